"""A loaded plugin together with the metadata that describes it."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from headunit.settingsloader import PropertyMap, Settings, SettingsLoader
from headunit.signal import Signal

log = logging.getLogger(__name__)

_MEDIA_METHODS = (
    "start",
    "stop",
    "prev_track",
    "next_track",
    "set_media_volume",
    "set_voice_volume",
)


class PluginLoadError(ValueError):
    """Raised when a plugin cannot be wrapped from its metadata."""


@dataclass
class PanelItem:
    """An item a plugin offers for the bottom panel."""

    name: str = ""
    label: str = ""
    source: str = ""
    fill_space: bool = False
    properties: dict[str, Any] = field(default_factory=dict)
    context_property: Any = None


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value if isinstance(value, str) else str(value)


class PluginObject:
    """Wraps a plugin instance, or describes a built-in page without one."""

    def __init__(
        self,
        name: str,
        label: str,
        icon: str = "",
        source: str = "",
        settings_menu: dict[str, Any] | None = None,
        settings: Any = None,
        bottom_bar_items: list[Any] | None = None,
    ) -> None:
        self.name = name
        self.label = label
        self.icon = icon
        self.source = source
        self.settings = settings
        self.settings_menu: dict[str, Any] = dict(settings_menu or {})
        self.loaded = False
        self._plugin: Any = None
        self._metadata: dict[str, Any] = {}
        self._bottom_bar_items: list[PanelItem] = []

        self.loaded_changed = Signal()
        self.source_changed = Signal()
        self.message = Signal()
        self.action = Signal()
        self.bottom_bar_items_updated = Signal()

        self.load_bottom_bar_items(list(bottom_bar_items or []))

    @classmethod
    def from_plugin(
        cls, metadata: Any, plugin: Any, store: Settings | None = None
    ) -> PluginObject:
        """Wrap ``plugin`` as described by its ``metadata`` object."""
        if not isinstance(metadata, dict):
            raise PluginLoadError("invalid plugin: metadata must be an object")
        name = _text(metadata.get("name"))
        if plugin is None:
            raise PluginLoadError(f"error loading plugin {name!r}: no plugin instance")

        obj = cls(
            name=name,
            label=_text(metadata.get("label")),
            icon=_text(metadata.get("icon")),
        )
        obj._plugin = plugin
        obj._metadata = dict(metadata)

        if "source" in metadata:
            obj.source = _text(metadata["source"])
        else:
            obj.source = _text(obj.get_property_value("source"))
            if obj.source:
                obj._connect_to_property_signal("source", obj.source_changed.emit)

        plugin_message = getattr(plugin, "message", None)
        if isinstance(plugin_message, Signal):
            plugin_message.connect(obj._message_handler)
        plugin_action = getattr(plugin, "action", None)
        if isinstance(plugin_action, Signal):
            plugin_action.connect(obj._action_handler)

        config = metadata.get("config")
        if isinstance(config, dict):
            config = dict(config)
            settings_map = getattr(plugin, "settings", None)
            if not isinstance(settings_map, PropertyMap):
                settings_map = PropertyMap()
            loader: SettingsLoader | None = None
            if "items" in config:
                config["name"] = name
                loader = SettingsLoader(config, name, settings_map, store)
            elif "settings" in config:
                items = config["settings"]
                schema = {
                    "name": name,
                    "type": "items",
                    "items": items if isinstance(items, list) else [],
                    "autoSave": bool(config.get("settingsAutoSave")),
                }
                loader = SettingsLoader(schema, name, settings_map, store)
            if loader is not None:
                obj.settings = loader.settings_map
            obj.settings_menu = config

        log.debug("Plugin loaded: %s", name)
        obj._call_plugin("on_load")
        return obj

    @property
    def plugin(self) -> Any:
        return self._plugin

    @property
    def bottom_bar_items(self) -> list[PanelItem]:
        return list(self._bottom_bar_items)

    @property
    def context_property(self) -> Any:
        return self._call_plugin("get_context_property")

    @property
    def image_provider(self) -> Any:
        return self._call_plugin("get_image_provider")

    @property
    def media_interface(self) -> Any:
        plugin = self._plugin
        if plugin is not None and all(
            callable(getattr(plugin, method, None)) for method in _MEDIA_METHODS
        ):
            return plugin
        return None

    def _call_plugin(self, method: str, *args: Any) -> Any:
        if self._plugin is None:
            return None
        target = getattr(self._plugin, method, None)
        if callable(target):
            return target(*args)
        return None

    def init(self) -> None:
        """Initialise the plugin and collect its bottom bar items."""
        self._call_plugin("init")
        if self._plugin is not None:
            items = self._metadata.get("bottomBarItems")
            if isinstance(items, list):
                self.load_bottom_bar_items(items)
            else:
                value = self.get_property_value("bottom_bar_items")
                if isinstance(value, list) and value:
                    self._connect_to_property_signal(
                        "bottom_bar_items", self.update_bottom_bar_items
                    )
                    self.load_bottom_bar_items(value)
        self.loaded = True
        self.loaded_changed.emit()

    def _connect_to_property_signal(self, name: str, slot: Callable[[], Any]) -> None:
        if self._plugin is None:
            log.debug("Plugin not loaded: %s", self.name)
            return
        notify = getattr(self._plugin, f"{name}_changed", None)
        if isinstance(notify, Signal):
            notify.connect(lambda *_: slot())
        else:
            log.debug("Property %s doesn't have a notifiable signal", name)

    def get_property_value(self, name: str) -> Any:
        """Read a data attribute of the plugin; None when there is none."""
        if self._plugin is None:
            log.debug("get_property_value: plugin not loaded: %s", self.name)
            return None
        value = getattr(self._plugin, name, None)
        if callable(value) or isinstance(value, Signal):
            return None
        return value

    def _message_handler(self, message_id: str, parameter: Any) -> None:
        self.message.emit(self.name, message_id, parameter)

    def _action_handler(self, action_id: str, parameter: Any) -> None:
        self.action.emit(self.name, action_id, parameter)

    def handle_message(self, message_id: str, message: Any) -> None:
        self._call_plugin("event_message", message_id, message)

    def call_action(self, action_id: str, message: Any) -> None:
        self._call_plugin("action_message", action_id, message)

    def call_slot(self, slot: str) -> bool:
        """Call a no-argument method of the plugin; False when it has none."""
        if self._plugin is None:
            return False
        target = getattr(self._plugin, slot, None)
        if not callable(target) or isinstance(target, Signal):
            return False
        target()
        return True

    def update_bottom_bar_items(self) -> None:
        value = self.get_property_value("bottom_bar_items")
        self.load_bottom_bar_items(value if isinstance(value, list) else [])

    def load_bottom_bar_items(self, items: list[Any]) -> None:
        """Replace the bottom bar items with the valid, distinct ones in ``items``."""
        self._bottom_bar_items = []
        for item in items:
            if not (
                isinstance(item, dict)
                and "name" in item
                and "source" in item
                and "label" in item
            ):
                log.debug("Invalid bottom bar item in plugin %s", self.name)
                continue
            properties = item.get("properties")
            panel_item = PanelItem(
                name=f"{self.name}::{_text(item['name'])}",
                source=_text(item["source"]),
                label=_text(item["label"]),
                fill_space=bool(item.get("fillSpace")),
                properties=dict(properties) if isinstance(properties, dict) else {},
                context_property=self.context_property,
            )
            if any(existing.name == panel_item.name for existing in self._bottom_bar_items):
                log.debug("Panel item already exists: %s", panel_item.name)
                continue
            self._bottom_bar_items.append(panel_item)
        self.bottom_bar_items_updated.emit()