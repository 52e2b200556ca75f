"""The ordered, persisted list of items shown in the bottom panel."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any

from headunit.pluginlist import PluginList
from headunit.pluginobject import PanelItem
from headunit.settingsloader import Settings
from headunit.signal import Signal

log = logging.getLogger(__name__)

_SETTINGS_KEY = "bottomBarItems"
_USER_ROLE = 0x0100


class PanelRole(IntEnum):
    """Data roles of the panel items model."""

    NAME = _USER_ROLE + 1
    LABEL = _USER_ROLE + 2
    SOURCE = _USER_ROLE + 3
    PROPERTIES = _USER_ROLE + 4
    FILL_SPACE = _USER_ROLE + 5


_ROLE_NAMES: dict[PanelRole, str] = {
    PanelRole.NAME: "name",
    PanelRole.LABEL: "label",
    PanelRole.SOURCE: "source",
    PanelRole.PROPERTIES: "properties",
    PanelRole.FILL_SPACE: "fillSpace",
}


class PanelItemsModel:
    """Panel items chosen from those the plugins offer, saved as a name list."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings if settings is not None else Settings()
        self._plugin_list: PluginList | None = None
        self._items: list[PanelItem] = []
        self._editing = False
        self.length_changed = Signal()
        self.editing_changed = Signal()
        self.rows_inserted = Signal()
        self.model_reset = Signal()

    @property
    def length(self) -> int:
        return self.row_count()

    @property
    def editing(self) -> bool:
        return self._editing

    @editing.setter
    def editing(self, editing: bool) -> None:
        self._editing = editing
        self.editing_changed.emit()

    def role_names(self) -> dict[int, str]:
        return {int(role): name for role, name in _ROLE_NAMES.items()}

    def row_count(self) -> int:
        return len(self._items)

    def data(self, row: int, role: int) -> Any:
        item = self._items[row]
        if role == PanelRole.NAME:
            return item.name
        if role == PanelRole.LABEL:
            return item.label
        if role == PanelRole.SOURCE:
            return item.source
        if role == PanelRole.FILL_SPACE:
            return item.fill_space
        if role == PanelRole.PROPERTIES:
            return {**item.properties, "pluginContext": item.context_property}
        return ""

    def set_plugin_list(self, plugin_list: PluginList | None) -> None:
        """Attach the plugin list and load the saved panel items."""
        if plugin_list is None:
            raise ValueError("plugin list uninitialised")
        self._plugin_list = plugin_list
        self._load_list()

    def _require_plugin_list(self) -> PluginList:
        if self._plugin_list is None:
            raise RuntimeError("plugin list uninitialised")
        return self._plugin_list

    def _load_list(self) -> None:
        stored = self._settings.get(_SETTINGS_KEY, "")
        names = stored.split(",") if isinstance(stored, str) else []
        for position, name in enumerate(names):
            try:
                self.insert_plugin_item(position, name)
            except ValueError as error:
                log.debug("%s", error)

    def remove_unused_items(self) -> None:
        """Drop items that no plugin offers any more."""
        plugin_list = self._require_plugin_list()
        available = {
            item.name for plugin in plugin_list for item in plugin.bottom_bar_items
        }
        self._items = [item for item in self._items if item.name in available]
        self.model_reset.emit()
        self.length_changed.emit()
        self._save_list()

    def move(self, source: int, destination: int) -> None:
        if source == destination:
            return
        count = len(self._items)
        if not (0 <= source < count and 0 <= destination < count):
            raise IndexError(f"cannot move row {source} to {destination} of {count}")
        item = self._items.pop(source)
        self._items.insert(destination, item)
        self.model_reset.emit()
        self._save_list()

    def remove(self, index: int) -> None:
        del self._items[index]
        self.model_reset.emit()
        self.length_changed.emit()
        self._save_list()

    def insert_plugin_item(self, position: int, name: str) -> None:
        """Insert the panel item ``plugin::item`` at ``position``."""
        plugin_list = self._require_plugin_list()
        parts = name.split("::")
        if len(parts) != 2:
            raise ValueError(f"invalid panel item name: {name!r}")
        plugin = plugin_list.get_plugin(parts[0])
        if plugin is None:
            raise ValueError(f"invalid plugin name: {parts[0]!r}")
        item = next(
            (candidate for candidate in plugin.bottom_bar_items if candidate.name == name),
            PanelItem(),
        )
        self._items.insert(position, item)
        self.rows_inserted.emit(position)
        self.length_changed.emit()
        self._save_list()

    def _save_list(self) -> None:
        self._settings.set(_SETTINGS_KEY, ",".join(item.name for item in self._items))
        self._settings.save()