"""The ordered collection of loaded plugins."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from headunit.pluginobject import PluginObject
from headunit.signal import Signal

log = logging.getLogger(__name__)


class PluginList:
    """Plugins in load order, addressable by index or name."""

    def __init__(self) -> None:
        self._plugins: list[PluginObject] = []
        self.plugin_loaded = Signal()
        self.plugin_added = Signal()

    def init_plugins(self) -> None:
        for plugin in list(self._plugins):
            plugin.init()

    def add_plugin(self, plugin: PluginObject) -> int:
        """Append ``plugin``, announce it on ``plugin_added`` and return its index."""
        if plugin is None:
            raise ValueError("plugin must not be None")
        self._plugins.append(plugin)
        index = self._plugins.index(plugin)
        self.plugin_added.emit(index)
        return index

    def contains_plugin(self, name: str) -> bool:
        return self.get_plugin(name) is not None

    def get_plugin(self, name: str) -> PluginObject | None:
        return next((plugin for plugin in self._plugins if plugin.name == name), None)

    def handle_message(self, message_id: str, message: Any) -> None:
        for plugin in list(self._plugins):
            plugin.handle_message(message_id, message)

    def call_slot(self, plugin_name: str, slot: str) -> None:
        plugin = self.get_plugin(plugin_name)
        if plugin is not None:
            plugin.call_slot(slot)

    def index(self, plugin: PluginObject) -> int:
        """Position of ``plugin``; ValueError when it is not in the list."""
        return self._plugins.index(plugin)

    def __getitem__(self, index: int) -> PluginObject:
        return self._plugins[index]

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[PluginObject]:
        return iter(list(self._plugins))