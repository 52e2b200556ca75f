# headunit

The core of a car head unit, as a plain Python library. It keeps a list of
plugins and routes the messages and actions they send each other. It picks
the active media player, stores the settings that plugins and themes declare,
and keeps the bottom-bar layout. It also drives a TDA7418 audio processor
over I2C. There are no third-party dependencies.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## The `headunit` command

```
headunit [-p "<names>"] [-l] [--themes-dir DIR] [--settings FILE] [--version]
```

- `-p` / `--plugins "<names>"`: a space-separated list of plugin file base
  names to enable. Case does not matter. Without it, every plugin is enabled.
- `-l` / `--lazy-loading`: load the theme and initialise the plugins on a
  background thread.
- `--themes-dir DIR`: where to look for themes. The default is a `themes`
  directory next to the running script.
- `--settings FILE`: the JSON file settings are kept in. The default is
  `~/.config/headunit/settings.json`.

The command builds every component and loads the theme `default-theme` from
`<themes-dir>/default-theme/theme.json`. If that theme is missing, it logs a
warning and goes on. It then initialises everything, saves the settings and
exits with status 0.

## Using it from Python

A plugin is any object. The host calls these methods and attributes when the
plugin has them:

- `init()`, `on_load()`, `event_message(id, value)`, `action_message(id, value)`
- `get_context_property()`, `get_image_provider()`
- `message` and `action`: `headunit.signal.Signal` instances the plugin emits
  with `(id, value)`
- `settings`: a `PropertyMap` that the plugin's settings schema is loaded into
- `bottom_bar_items`: a list of panel item descriptions

An object with `start`, `stop`, `prev_track`, `next_track`,
`set_media_volume` and `set_voice_volume` counts as a media player. Set
`media_stream` or `voice_stream` to true to have its volumes remembered.
Give it a `playback_started` signal to make it the active player whenever
playback starts.

Plugins are passed in as `PluginSpec(file_name, metadata, factory)`:

```python
from headunit.hudloader import HUDLoader
from headunit.hud_serial_test import HUDSerialTest
from headunit.pluginmanager import PluginSpec
from headunit.settingsloader import Settings

spec = PluginSpec(
    "hud-serial-test.so",
    {"name": "HUDSerialTest", "label": "Serial test"},
    HUDSerialTest,
)
loader = HUDLoader(specs=[spec], store=Settings("settings.json"), themes_dir="themes")
loader.load()
loader.wait()
print([plugin.name for plugin in loader.plugin_list])
```

A plugin's metadata may carry:

- `name`, `label`, `icon` and `source`
- `bottomBarItems`: objects with `name`, `label`, `source`, and optionally
  `fillSpace` and `properties`
- `config`: a settings schema, given either as an `items` tree or as a
  `settings` list

## Modules

- `headunit.signal.Signal`: a synchronous observer with `connect`,
  `disconnect` and `emit`.
- `headunit.settingsloader`:
  - `Settings` is a key/value store. Keys are separated by `/`, `group()`
    scopes them, and the store is saved as JSON.
  - `PropertyMap` is a mapping that emits `value_changed` when an item
    changes.
  - `SettingsLoader` turns an `items` schema into a property map. For each
    value it uses the saved value first, then the item's `defaultValue`, then
    a default for the item's type (`slider`, `switch`, `checkbox`,
    `textfield`, `combobox`, `color`, `file`, `folder`, `tumbler`, `string`,
    `int`, `uint`, `double`, `long` or `bool`). It writes every change back.
- `headunit.mediamanager.MediaManager`: the registered media players, the
  active one, and the per-player `media_volumes` and `voice_volumes`.
  Selecting a new active player stops the others.
- `headunit.pluginobject`: `PluginObject` wraps one plugin or describes a
  built-in page. `PanelItem` is a bottom-bar item named `<plugin>::<item>`.
- `headunit.pluginlist.PluginList`: the plugins in load order.
- `headunit.pluginlistmodel`: `PluginListModel` has one row per plugin.
  `PluginListProxyModel` filters it by list type: `all`/`plugin`,
  `mainmenu`, `settingsmenu` or `bottombar`.
- `headunit.panelitemsmodel.PanelItemsModel`: the ordered bottom bar, saved
  under `bottomBarItems` as a comma-separated list of item names.
- `headunit.pluginmanager.PluginManager` loads the specs and routes traffic:
  - message `GUI::<event>` goes to the theme (`theme_event`);
  - message `SYSTEM::<event>` goes to every plugin;
  - message `MediaInput` with `Next` or `Previous` goes to the media
    manager;
  - message `KeyInput` is dropped;
  - any other message reaches every plugin as `<sender>::<id>`;
  - action `GUI::<x>` goes to the theme;
  - action `SYSTEM::<x>` goes to the theme and to every plugin;
  - action `<Plugin>::<x>` goes to the named plugin only.
- `headunit.thememanager`:
  - `Theme` reads a theme's `theme.json`, which needs `name`, `label`, and
    `colors` and `sizes` arrays of `{name, label, defaultValue}` entries.
  - `ThemeManager` builds `style` from the theme: colour and size maps plus
    any extra `settings` pages. It adds the `Settings` and `ThemeSettings`
    pages to the plugin list and passes events to the theme object's
    `on_event`.
- `headunit.hudloader.HUDLoader`: creates and initialises all of the above,
  either on the calling thread or on a background one (`wait()` joins it).
- `headunit.audioprocessorinterface`: the abstract `AudioProcessor` with the
  `InputChannel`, `OutputChannel` and `EqBand` enums.
- `headunit.tda7418`: `TDA7418` implements `AudioProcessor`. It writes
  registers through an `SMBusWriter`, which by default uses `/dev/i2c-1` at
  address `0x44` and needs Linux. Out-of-range levels raise `ValueError`.
  Bus errors are logged.
- `headunit.audioprocessorplugin.AudioProcessorPlugin` handles the
  `Sound`, `TuneUp`, `TuneDown`, `VolumeUp` and `VolumeDown` actions and
  applies the settings `volume` (0–50), `balance`, `bass`, `middle` and
  `treble` (−15–15) and `sub` (−100–15). It opens and closes the sound
  overlays with `GUI::` actions, and the overlay closes itself after 5
  seconds.
- `headunit.hud_serial_test.HUDSerialTest`: a test panel that turns button
  presses into `MediaInput` messages and `AudioProcessorPlugin::` actions. It
  turns climate settings into `HVACPlugin::Update` actions that carry a
  `ClimateControlCommandFrame`.

## What it does not do

- It draws no user interface. The models, style maps and context dictionary
  hold data for a front end to show, but none is included.
- It does not find plugin files on disk. Plugins exist only as `PluginSpec`
  objects you supply from Python, so the `headunit` command on its own loads
  no plugins.
- It plays no media itself. Media players are whatever plugin objects you
  register.