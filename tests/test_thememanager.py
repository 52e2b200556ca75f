import json

import pytest

from headunit.pluginlist import PluginList
from headunit.settingsloader import PropertyMap, Settings
from headunit.thememanager import Theme, ThemeManager, ThemeNotFoundError


def _metadata(**extra):
    metadata = {
        "name": "default",
        "label": "Default",
        "colors": [{"name": "background", "label": "Background", "defaultValue": "#101010"}],
        "sizes": [{"name": "bar", "label": "Bar", "defaultValue": 48}],
    }
    metadata.update(extra)
    return metadata


class RecordingTheme:
    def __init__(self):
        self.events = []
        self.registered = []

    def register_types(self, uri):
        self.registered.append(uri)

    def on_event(self, plugin, sender, event, data):
        self.events.append((plugin, sender, event, data))


def _manager(metadata=None, plugin=None, store=None, context=None):
    plugins = PluginList()
    theme = Theme(metadata=metadata if metadata is not None else _metadata(), plugin=plugin)
    manager = ThemeManager(
        plugins, themes={"default-theme": theme}, store=store, context=context
    )
    return manager, plugins


def test_init_theme_registers_settings_pages():
    manager, plugins = _manager(_metadata(settingsPageSource="qrc:/ThemeSettings.qml"))
    manager.init_theme("default-theme")
    assert [plugin.name for plugin in plugins] == ["Settings", "ThemeSettings"]
    settings = plugins.get_plugin("Settings")
    assert settings.source == "qrc:/qml/HUDSettingsPage/SettingsPage.qml"
    assert settings.icon == "icons/svg/gear-a.svg"
    theme_settings = plugins.get_plugin("ThemeSettings")
    assert theme_settings.settings_menu == {"type": "loader", "source": "qrc:/ThemeSettings.qml"}
    assert theme_settings.label == "Theme"


def test_theme_bottom_bar_items_are_given_to_theme_settings():
    items = [{"name": "clock", "label": "Clock", "source": "Clock.qml"}]
    manager, plugins = _manager(_metadata(bottomBarItems=items))
    manager.init_theme("default-theme")
    assert manager.bottom_bar_items == items
    names = [item.name for item in plugins.get_plugin("ThemeSettings").bottom_bar_items]
    assert names == ["ThemeSettings::clock"]


def test_unknown_theme_raises():
    manager, plugins = _manager()
    with pytest.raises(ThemeNotFoundError):
        manager.init_theme("missing")
    assert len(plugins) == 0


def test_init_finished_before_theme_raises():
    manager, _ = _manager()
    with pytest.raises(RuntimeError):
        manager.init_finished()


def test_init_finished_builds_style_and_source():
    plugin = RecordingTheme()
    context = {}
    manager, _ = _manager(_metadata(source="qrc:/Theme.qml"), plugin=plugin, context=context)
    emitted = []
    manager.theme_source_changed.connect(lambda: emitted.append(manager.theme_source))
    manager.init_theme("default-theme")
    manager.init_finished()
    assert manager.colors_map["background"] == "#101010"
    assert manager.sizes_map["bar"] == 48
    assert manager.style["colors"] is manager.colors_map
    assert context["HUDStyle"] is manager.style
    assert context["ThemeManager"] is manager
    assert emitted == ["qrc:/Theme.qml"]
    assert plugin.registered == [""]
    names = [entry["name"] for entry in manager.style["settings"]]
    assert names == ["colors", "sizes"]


def test_stored_colour_overrides_default():
    store = Settings()
    store.set("colors/background", "#000000")
    manager, _ = _manager(store=store)
    manager.init_theme("default-theme")
    manager.init_finished()
    assert manager.colors_map["background"] == "#000000"


def test_colour_changes_are_persisted():
    store = Settings()
    manager, _ = _manager(store=store)
    manager.init_theme("default-theme")
    manager.init_finished()
    manager.colors_map["background"] = "#222222"
    assert store.get("colors/background") == "#222222"


def test_extra_settings_become_style_maps():
    extra = {
        "name": "layout",
        "label": "Layout",
        "type": "items",
        "items": [{"name": "compact", "label": "Compact", "type": "switch"}],
    }
    manager, _ = _manager()
    manager.process_theme_settings(_metadata(settings=[extra, "bogus"]))
    assert isinstance(manager.style["layout"], PropertyMap)
    assert manager.style["layout"]["compact"] is False
    assert manager.style["settings"][-1] == extra


@pytest.mark.parametrize("missing", ["name", "label", "colors", "sizes"])
def test_process_theme_settings_requires_fields(missing):
    metadata = _metadata()
    del metadata[missing]
    manager, _ = _manager()
    with pytest.raises(ValueError):
        manager.process_theme_settings(metadata)


def test_process_theme_settings_requires_arrays():
    manager, _ = _manager()
    with pytest.raises(ValueError):
        manager.process_theme_settings(_metadata(colors="red"))


def test_theme_settings_to_settings_items_filters_and_types():
    manager, _ = _manager()
    items = [
        {"name": "a", "label": "A", "defaultValue": 1, "extra": True},
        {"name": "b", "label": "B"},
        "not a map",
    ]
    result = manager.theme_settings_to_settings_items(items, "tumbler")
    assert result == [{"label": "A", "name": "a", "defaultValue": 1, "type": "tumbler"}]


def test_on_event_passes_sender_plugin_to_theme():
    plugin = RecordingTheme()
    manager, plugins = _manager(plugin=plugin)
    manager.init_theme("default-theme")
    manager.on_event("Settings", "OpenOverlay", {"source": "x"})
    assert plugin.events == [
        (plugins.get_plugin("Settings"), "Settings", "OpenOverlay", {"source": "x"})
    ]


def test_theme_is_found_in_themes_directory(tmp_path):
    directory = tmp_path / "default-theme"
    directory.mkdir()
    (directory / Theme.METADATA_FILE).write_text(json.dumps(_metadata()), encoding="utf-8")
    manager = ThemeManager(PluginList(), themes_dir=tmp_path)
    theme = manager.init_theme("default-theme")
    assert theme.metadata == _metadata()
    assert manager.import_paths == [directory.resolve()]


def test_theme_directory_without_metadata_raises(tmp_path):
    (tmp_path / "empty-theme").mkdir()
    manager = ThemeManager(PluginList(), themes_dir=tmp_path)
    with pytest.raises(ThemeNotFoundError):
        manager.init_theme("empty-theme")