"""Builds the application's components and initialises them."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from headunit.mediamanager import MediaManager
from headunit.panelitemsmodel import PanelItemsModel
from headunit.pluginlist import PluginList
from headunit.pluginmanager import PluginManager, PluginSpec
from headunit.settingsloader import Settings
from headunit.signal import Signal
from headunit.thememanager import Theme, ThemeManager, ThemeNotFoundError

log = logging.getLogger(__name__)

DEFAULT_THEME = "default-theme"


class HUDLoader:
    """Creates the plugin list, managers and models, then initialises them."""

    def __init__(
        self,
        lazy_loading: bool = False,
        plugins: Iterable[str] | None = None,
        *,
        specs: Iterable[PluginSpec] = (),
        themes: dict[str, Theme] | None = None,
        themes_dir: str | Path | None = None,
        store: Settings | None = None,
        theme_name: str = DEFAULT_THEME,
    ) -> None:
        self._lazy_loading = lazy_loading
        self._plugins = list(plugins or [])
        self._specs = list(specs)
        self._themes = themes
        self._themes_dir = themes_dir
        self._store = store if store is not None else Settings()
        self._theme_name = theme_name

        self.context: dict[str, Any] = {}
        self.plugin_list: PluginList | None = None
        self.media_manager: MediaManager | None = None
        self.bottom_bar_model: PanelItemsModel | None = None
        self.theme_manager: ThemeManager | None = None
        self.plugin_manager: PluginManager | None = None

        self.theme_loaded = Signal()
        self._thread: threading.Thread | None = None
        self._finished = threading.Event()
        self._error: BaseException | None = None

    def load(self) -> None:
        """Create every component, load the plugins and start initialisation."""
        log.debug("Loading plugin list")
        self.plugin_list = PluginList()
        log.debug("Loading media manager")
        self.media_manager = MediaManager(self._store)
        log.debug("Loading bottom bar model")
        self.bottom_bar_model = PanelItemsModel(self._store)
        log.debug("Loading theme")
        self.theme_manager = ThemeManager(
            self.plugin_list,
            themes=self._themes,
            themes_dir=self._themes_dir,
            store=self._store,
            context=self.context,
        )
        log.debug("Loading plugins")
        self.plugin_manager = PluginManager(
            self.plugin_list, self.media_manager, self._specs, self._store
        )

        self.context["HUDPlugins"] = self.plugin_list
        self.context["HUDMediaManager"] = self.media_manager
        self.context["BottomBarModel"] = self.bottom_bar_model

        self.plugin_manager.theme_event.connect(self.theme_manager.on_event)
        self.theme_loaded.connect(self._on_theme_loaded)
        self.plugin_manager.load_plugins(self._plugins)

        if self._lazy_loading:
            log.debug("Loading in a thread")
            self._thread = threading.Thread(target=self._run, name="hud-init", daemon=True)
            self._thread.start()
        else:
            log.debug("Loading on main thread")
            self.init()
            self.init_finished()

    def _run(self) -> None:
        try:
            self.init()
            self.init_finished()
        except BaseException as error:  # re-raised by wait()
            self._error = error

    def _require_loaded(self) -> None:
        if self.plugin_list is None or self.theme_manager is None:
            raise RuntimeError("load() has not been called")

    def init(self) -> None:
        """Load the theme and initialise the plugins and media players."""
        self._require_loaded()
        log.debug("Init theme")
        try:
            self.theme_manager.init_theme(self._theme_name)
        except ThemeNotFoundError as error:
            log.warning("Error loading theme: %s", error)
        else:
            self.theme_loaded.emit()
        log.debug("Init plugins")
        self.plugin_list.init_plugins()
        self.media_manager.init()

    def _on_theme_loaded(self) -> None:
        self.theme_manager.init_finished()

    def init_finished(self) -> None:
        """Hand the plugin list to the bottom bar model and prune stale items."""
        self._require_loaded()
        log.debug("Setting bottom bar plugin list")
        self.bottom_bar_model.set_plugin_list(self.plugin_list)
        self.bottom_bar_model.remove_unused_items()
        self._finished.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for initialisation; True once it has finished."""
        if self._thread is not None:
            self._thread.join(timeout)
        if self._error is not None:
            raise self._error
        return self._finished.is_set()