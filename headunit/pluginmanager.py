"""Loads plugins and routes their messages and actions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from headunit.pluginlist import PluginList
from headunit.pluginobject import PluginLoadError, PluginObject
from headunit.settingsloader import Settings
from headunit.signal import Signal

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PluginSpec:
    """A loadable plugin: its file name, metadata and a factory for its instance."""

    file_name: str
    metadata: Any
    factory: Callable[[], Any]

    @property
    def base_name(self) -> str:
        return self.file_name.split(".", 1)[0]


class PluginManager:
    """Creates plugin objects and dispatches the messages they send."""

    def __init__(
        self,
        plugin_list: PluginList,
        media_manager: Any,
        specs: Iterable[PluginSpec] = (),
        store: Settings | None = None,
    ) -> None:
        self._plugin_list = plugin_list
        self._media_manager = media_manager
        self._specs = list(specs)
        self._store = store
        self.image_providers: dict[str, Any] = {}
        self.theme_event = Signal()

    def load_plugins(self, filter_list: Iterable[str] | None = None) -> list[PluginObject]:
        """Load every plugin, or only those whose base name is in ``filter_list``."""
        wanted = {name.lower() for name in filter_list or ()}
        loaded: list[PluginObject] = []
        for spec in sorted(self._specs, key=lambda spec: spec.file_name.lower()):
            base_name = spec.base_name
            if wanted and base_name.lower() not in wanted:
                log.debug("Plugin not whitelisted (disabled): %s", base_name)
                continue
            try:
                plugin = PluginObject.from_plugin(spec.metadata, spec.factory(), self._store)
            except PluginLoadError as error:
                log.warning("%s: %s", spec.file_name, error)
                continue

            self._plugin_list.add_plugin(plugin)

            if plugin.media_interface is not None:
                log.debug("Adding interface %s", plugin.name)
                self._media_manager.add_interface(plugin.name, plugin.plugin)

            provider = plugin.image_provider
            if provider is not None:
                self.image_providers[plugin.name] = provider

            plugin.action.connect(self.action_handler)
            plugin.message.connect(self.message_handler)
            loaded.append(plugin)
        return loaded

    def message_handler(self, sender: str, message_id: str, message: Any) -> None:
        parts = message_id.split("::")
        if len(parts) == 2 and parts[0] == "GUI":
            self.theme_event.emit(sender, parts[1], message)
            return
        if len(parts) == 2 and parts[0] == "SYSTEM":
            event = message_id
        elif message_id == "MediaInput":
            self._media_manager.media_input("" if message is None else str(message))
            return
        elif message_id == "KeyInput":
            return
        else:
            event = f"{sender}::{message_id}"
        self._plugin_list.handle_message(event, message)

    def action_handler(self, sender: str, action_id: str, message: Any) -> None:
        parts = action_id.split("::")
        if len(parts) != 2:
            log.warning("action_handler(): invalid action id %r", action_id)
            return
        target, action = parts
        if target == "GUI":
            self.theme_event.emit(sender, action, message)
        elif target == "SYSTEM":
            self.theme_event.emit(sender, action, message)
            self.message_handler(sender, action_id, message)
        else:
            plugin = self._plugin_list.get_plugin(target)
            if plugin is None:
                log.warning("Invalid plugin object %s", action_id)
                return
            plugin.call_action(action, message)