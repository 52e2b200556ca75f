"""List models that expose the loaded plugins to the user interface."""

from __future__ import annotations

import logging
from enum import Enum, IntEnum
from typing import Any

from headunit.pluginlist import PluginList
from headunit.pluginobject import PluginObject
from headunit.signal import Signal

log = logging.getLogger(__name__)

USER_ROLE = 0x0100


class PluginRole(IntEnum):
    """Data roles of the plugin list model."""

    NAME = USER_ROLE + 1
    LABEL = USER_ROLE + 2
    ICON = USER_ROLE + 3
    QML_SOURCE = USER_ROLE + 4
    LOADED = USER_ROLE + 5
    CONTEXT_PROPERTY = USER_ROLE + 6
    SETTINGS = USER_ROLE + 7
    SETTINGS_MENU = USER_ROLE + 8
    BOTTOM_BAR_ITEMS = USER_ROLE + 9


_ROLE_NAMES: dict[PluginRole, str] = {
    PluginRole.NAME: "name",
    PluginRole.LABEL: "label",
    PluginRole.ICON: "icon",
    PluginRole.QML_SOURCE: "qmlSource",
    PluginRole.LOADED: "pluginLoaded",
    PluginRole.CONTEXT_PROPERTY: "contextProperty",
    PluginRole.SETTINGS: "settings",
    PluginRole.SETTINGS_MENU: "settingsMenu",
    PluginRole.BOTTOM_BAR_ITEMS: "bottomBarItems",
}


class ListType(Enum):
    """Which plugins a proxy model lets through."""

    PLUGINS = "plugins"
    MENU_ITEMS = "mainmenu"
    SETTINGS_MENU = "settingsmenu"
    BOTTOM_BAR_ITEMS = "bottombar"


class PluginListModel:
    """One row per plugin of a plugin list."""

    def __init__(self) -> None:
        self._plugins: PluginList | None = None
        self.data_changed = Signal()
        self.rows_inserted = Signal()
        self.model_reset = Signal()

    def role_names(self) -> dict[int, str]:
        return {int(role): name for role, name in _ROLE_NAMES.items()}

    def row_count(self) -> int:
        return len(self._plugins) if self._plugins is not None else 0

    def data(self, row: int, role: int) -> Any:
        """Value of ``role`` for the plugin in ``row``; None without plugins."""
        if self._plugins is None:
            log.debug("Invalid plugin")
            return None
        plugin = self._plugins[row]
        role = PluginRole(role)
        if role is PluginRole.NAME:
            return plugin.name
        if role is PluginRole.LABEL:
            return plugin.label
        if role is PluginRole.ICON:
            return plugin.icon
        if role is PluginRole.QML_SOURCE:
            return plugin.source
        if role is PluginRole.LOADED:
            return plugin.loaded
        if role is PluginRole.CONTEXT_PROPERTY:
            return plugin.context_property
        if role is PluginRole.SETTINGS:
            return plugin.settings
        if role is PluginRole.SETTINGS_MENU:
            return plugin.settings_menu
        return [
            {"name": item.name, "label": item.label}
            for item in plugin.bottom_bar_items
        ]

    def set_plugins(self, plugins: PluginList | None) -> None:
        if plugins is None:
            return
        self._plugins = plugins
        self.model_reset.emit()
        for plugin in plugins:
            plugin.loaded_changed.connect(lambda *_, p=plugin: self._on_data_changed(p))
            plugin.source_changed.connect(lambda *_, p=plugin: self._on_data_changed(p))
        plugins.plugin_added.connect(self.rows_inserted.emit)

    def _on_data_changed(self, plugin: PluginObject) -> None:
        if self._plugins is None:
            return
        self.data_changed.emit(self._plugins.index(plugin))


class PluginListProxyModel:
    """Filters a plugin list model down to one kind of list."""

    def __init__(self) -> None:
        self._type = ListType.PLUGINS
        self.source_model = PluginListModel()
        self.filter_invalidated = Signal()

    @property
    def list_type(self) -> ListType:
        return self._type

    def set_plugins(self, plugins: PluginList | None) -> None:
        self.source_model.set_plugins(plugins)

    def set_type(self, list_type: str) -> None:
        """Select the list kind by name; unknown names keep the current kind."""
        lowered = list_type.lower()
        if list_type in ("", "plugin", "all"):
            self._type = ListType.PLUGINS
        elif lowered == "mainmenu":
            self._type = ListType.MENU_ITEMS
        elif lowered == "settingsmenu":
            self._type = ListType.SETTINGS_MENU
        elif lowered == "bottombar":
            self._type = ListType.BOTTOM_BAR_ITEMS
        self.filter_invalidated.emit()

    def filter_accepts_row(self, row: int) -> bool:
        model = self.source_model
        if self._type is ListType.PLUGINS:
            return True
        if self._type is ListType.MENU_ITEMS:
            source = model.data(row, PluginRole.QML_SOURCE)
            return bool(source) and isinstance(source, str)
        if self._type is ListType.SETTINGS_MENU:
            return len(model.data(row, PluginRole.SETTINGS_MENU) or {}) > 0
        return len(model.data(row, PluginRole.BOTTOM_BAR_ITEMS) or []) > 0

    def rows(self) -> list[int]:
        """Source rows accepted by the current filter, in order."""
        return [
            row for row in range(self.source_model.row_count())
            if self.filter_accepts_row(row)
        ]