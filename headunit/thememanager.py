"""Loads the user-interface theme and builds its style settings."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar

from headunit.pluginlist import PluginList
from headunit.pluginobject import PluginObject
from headunit.settingsloader import PropertyMap, Settings, SettingsLoader
from headunit.signal import Signal

log = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("name", "label", "colors", "sizes")
_ITEM_FIELDS = ("name", "label", "defaultValue")


class ThemeNotFoundError(LookupError):
    """Raised when a theme cannot be found."""


@dataclass
class Theme:
    """A theme: its metadata, an optional plugin object and where it lives."""

    METADATA_FILE: ClassVar[str] = "theme.json"

    metadata: dict[str, Any]
    plugin: Any = None
    directory: Path | None = None

    @classmethod
    def load(cls, directory: str | Path, plugin: Any = None) -> Theme:
        """Read a theme from the metadata file in ``directory``."""
        directory = Path(directory)
        document = json.loads(
            (directory / cls.METADATA_FILE).read_text(encoding="utf-8")
        )
        if not isinstance(document, dict):
            raise ValueError(f"{directory}: theme metadata must be a JSON object")
        return cls(metadata=document, plugin=plugin, directory=directory)


class ThemeManager:
    """Holds the active theme, its style maps and its settings pages."""

    def __init__(
        self,
        plugin_list: PluginList,
        themes: dict[str, Theme] | None = None,
        themes_dir: str | Path | None = None,
        store: Settings | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self._plugin_list = plugin_list
        self._themes = dict(themes or {})
        self._themes_dir = Path(themes_dir) if themes_dir is not None else None
        self._store = store if store is not None else Settings()
        self.context: dict[str, Any] = context if context is not None else {}
        self.context["ThemeManager"] = self

        self.style: dict[str, Any] = {}
        self._style_settings: list[dict[str, Any]] = []
        self._loaders: list[SettingsLoader] = []
        self._theme: Theme | None = None
        self._theme_source = ""
        self._bottom_bar_items: list[Any] = []
        self.import_paths: list[Path] = []
        self.colors_map = PropertyMap()
        self.sizes_map = PropertyMap()
        self.settings_menu_plugin: PluginObject | None = None
        self.theme_settings_plugin: PluginObject | None = None
        self.theme_source_changed = Signal()

    @property
    def theme(self) -> Theme | None:
        return self._theme

    @property
    def theme_source(self) -> str:
        return self._theme_source

    @property
    def bottom_bar_items(self) -> list[Any]:
        return self._bottom_bar_items

    def _find_theme(self, theme_name: str) -> Theme:
        if theme_name in self._themes:
            return self._themes[theme_name]
        if self._themes_dir is None:
            raise ThemeNotFoundError(f"theme {theme_name!r} doesn't exist")
        directory = self._themes_dir / theme_name
        if not directory.is_dir():
            raise ThemeNotFoundError(f"theme {theme_name!r} doesn't exist: {directory}")
        if not (directory / Theme.METADATA_FILE).is_file():
            raise ThemeNotFoundError(f"no theme metadata in theme folder {directory}")
        return Theme.load(directory)

    def init_theme(self, theme_name: str) -> Theme:
        """Load the theme and register its settings pages as plugins."""
        theme = self._find_theme(theme_name)
        self._theme = theme
        if theme.directory is not None:
            self.import_paths.append(theme.directory.resolve())

        metadata = theme.metadata
        items = metadata.get("bottomBarItems")
        if isinstance(items, list):
            self._bottom_bar_items = list(items)

        page_source = metadata.get("settingsPageSource", "")
        settings_page = {
            "type": "loader",
            "source": page_source if isinstance(page_source, str) else str(page_source),
        }
        self.theme_settings_plugin = PluginObject(
            "ThemeSettings",
            "Theme",
            settings_menu=settings_page,
            settings=self.style,
            bottom_bar_items=self._bottom_bar_items,
        )
        self.settings_menu_plugin = PluginObject(
            "Settings",
            "Settings",
            icon="icons/svg/gear-a.svg",
            source="qrc:/qml/HUDSettingsPage/SettingsPage.qml",
        )
        self._plugin_list.add_plugin(self.settings_menu_plugin)
        self._plugin_list.add_plugin(self.theme_settings_plugin)
        log.debug("Theme loaded: %s", theme_name)
        return theme

    def _require_theme(self) -> Theme:
        if self._theme is None:
            raise RuntimeError("no theme loaded")
        return self._theme

    def init_finished(self) -> None:
        """Build the style from the theme metadata and announce the theme source."""
        theme = self._require_theme()
        metadata = theme.metadata
        try:
            self.process_theme_settings(metadata)
        except ValueError as error:
            log.debug("Error processing theme settings: %s", error)

        register_types = getattr(theme.plugin, "register_types", None)
        if callable(register_types):
            register_types("")
        initialize_engine = getattr(theme.plugin, "initialize_engine", None)
        if callable(initialize_engine):
            initialize_engine(self.context, "")

        self.context["HUDStyle"] = self.style
        if "source" in metadata:
            source = metadata["source"]
            self._theme_source = source if isinstance(source, str) else str(source)
        self.theme_source_changed.emit()
        log.debug("Theme init finished")

    def on_event(self, sender: str, event: str, event_data: Any) -> None:
        """Pass an event to the theme's ``on_event`` handler, if it has one."""
        theme = self._require_theme()
        handler = getattr(theme.plugin, "on_event", None)
        if not callable(handler):
            return
        handler(self._plugin_list.get_plugin(sender), sender, event, event_data)

    def process_theme_settings(self, settings: dict[str, Any]) -> None:
        """Create the colour, size and extra settings maps of the style."""
        if not isinstance(settings, dict) or any(
            field not in settings for field in _REQUIRED_FIELDS
        ):
            raise ValueError("theme settings are missing required field(s)")
        colors = settings["colors"]
        sizes = settings["sizes"]
        if not isinstance(colors, list) or not isinstance(sizes, list):
            raise ValueError('"colors" or "sizes" field is not an array')

        self._style_settings.append(
            self._load_settings_map("colors", "Colors", "color", colors, self.colors_map)
        )
        self._style_settings.append(
            self._load_settings_map("sizes", "Sizes", "tumbler", sizes, self.sizes_map)
        )
        self.style["colors"] = self.colors_map
        self.style["sizes"] = self.sizes_map

        extra = settings.get("settings")
        for item in extra if isinstance(extra, list) else []:
            if not isinstance(item, dict):
                log.debug("Item is not object")
                continue
            settings_map = PropertyMap()
            self._loaders.append(SettingsLoader(item, "", settings_map, self._store))
            name = item.get("name")
            self.style[name if isinstance(name, str) else ""] = settings_map
            self._style_settings.append(dict(item))

        self.style["settings"] = self._style_settings

    def _load_settings_map(
        self,
        name: str,
        label: str,
        item_type: str,
        items: list[Any],
        settings_map: PropertyMap,
    ) -> dict[str, Any]:
        settings: dict[str, Any] = {"label": label, "type": "items", "name": name}
        settings["items"] = (
            list(items) if item_type == "" else self.theme_settings_to_settings_items(items, item_type)
        )
        self._loaders.append(SettingsLoader(dict(settings), name, settings_map, self._store))
        return settings

    def theme_settings_to_settings_items(
        self, items: list[Any], item_type: str
    ) -> list[dict[str, Any]]:
        """Turn theme entries into settings items of ``item_type``, skipping bad ones."""
        result: list[dict[str, Any]] = []
        for item in items:
            if not isinstance(item, dict):
                log.debug("Invalid settings type, skipping")
                continue
            if any(field not in item for field in _ITEM_FIELDS):
                log.debug("Theme setting is missing required field(s), skipping")
                continue
            result.append(
                {
                    "label": item["label"],
                    "name": item["name"],
                    "defaultValue": item["defaultValue"],
                    "type": item_type,
                }
            )
        return result