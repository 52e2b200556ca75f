"""Persistent settings, observable property maps and the settings-schema loader."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any

from headunit.signal import Signal

log = logging.getLogger(__name__)

_JSON_SCALARS = (type(None), bool, int, float, str, list, dict)


class Settings:
    """Hierarchical key/value store with '/'-separated keys and scoped groups."""

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._values: dict[str, Any] = {}
        self._groups: list[str] = []
        if self._path is not None and self._path.exists():
            data = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError(f"{self._path}: settings file must hold a JSON object")
            self._values = {str(key): value for key, value in data.items()}

    @property
    def current_group(self) -> str:
        return "/".join(self._groups)

    def _full_key(self, key: str) -> str:
        return "/".join([*self._groups, *(part for part in key.split("/") if part)])

    @contextmanager
    def group(self, name: str) -> Iterator[Settings]:
        """Scope every key used inside the block under ``name``."""
        parts = [part for part in name.split("/") if part]
        self._groups.extend(parts)
        try:
            yield self
        finally:
            del self._groups[len(self._groups) - len(parts):]

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(self._full_key(key), default)

    def set(self, key: str, value: Any) -> None:
        self._values[self._full_key(key)] = value

    def contains(self, key: str) -> bool:
        return self._full_key(key) in self._values

    def _children(self) -> Iterator[str]:
        prefix = self.current_group + "/" if self._groups else ""
        for key in self._values:
            if key.startswith(prefix):
                yield key[len(prefix):]

    def child_keys(self) -> list[str]:
        return sorted({rest for rest in self._children() if "/" not in rest})

    def child_groups(self) -> list[str]:
        return sorted({rest.split("/", 1)[0] for rest in self._children() if "/" in rest})

    def save(self) -> None:
        """Write the store to its file, if it has one."""
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(self._values, indent=2, sort_keys=True), encoding="utf-8"
        )


class PropertyMap:
    """A mapping whose item assignments are announced on ``value_changed``."""

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})
        self.value_changed = Signal()

    def insert(self, key: str, value: Any) -> None:
        """Store a value without notifying observers."""
        self._values[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        changed = key not in self._values or self._values[key] != value
        self._values[key] = value
        if changed:
            self.value_changed.emit(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def keys(self) -> list[str]:
        return list(self._values)

    def to_dict(self) -> dict[str, Any]:
        return {
            key: value.to_dict() if isinstance(value, PropertyMap) else value
            for key, value in self._values.items()
        }


class _Kind(Enum):
    MAP = "map"
    DOUBLE = "double"
    BOOL = "bool"
    ANY = "any"
    STRING = "string"
    COLOR = "color"
    INT = "int"
    UINT = "uint"
    LONG = "long"


_ITEM_TYPES: dict[str, _Kind] = {
    "items": _Kind.MAP,
    "slider": _Kind.DOUBLE,
    "switch": _Kind.BOOL,
    "checkbox": _Kind.BOOL,
    "textfield": _Kind.ANY,
    "combobox": _Kind.STRING,
    "color": _Kind.COLOR,
    "file": _Kind.STRING,
    "folder": _Kind.STRING,
    "tumbler": _Kind.DOUBLE,
    "string": _Kind.STRING,
    "int": _Kind.INT,
    "uint": _Kind.UINT,
    "double": _Kind.DOUBLE,
    "long": _Kind.LONG,
    "bool": _Kind.BOOL,
}

_DEFAULTS: dict[_Kind, Any] = {
    _Kind.DOUBLE: 0.0,
    _Kind.BOOL: False,
    _Kind.ANY: "",
    _Kind.INT: 0,
    _Kind.COLOR: "#ffffff",
    _Kind.STRING: "",
}


def _to_int(value: Any) -> int | None:
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, float):
        return round(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _to_string(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _convert(value: Any, kind: _Kind) -> Any:
    """Convert a stored value to ``kind``; None when it cannot be done."""
    if value is None:
        return None
    if kind is _Kind.ANY:
        return value
    if kind is _Kind.MAP:
        return value if isinstance(value, dict) else None
    if kind is _Kind.DOUBLE:
        if isinstance(value, (bool, int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                return None
        return None
    if kind is _Kind.BOOL:
        if isinstance(value, (bool, int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() not in ("", "0", "false")
        return None
    if kind in (_Kind.INT, _Kind.LONG):
        return _to_int(value)
    if kind is _Kind.UINT:
        number = _to_int(value)
        return number if number is not None and number >= 0 else None
    if kind is _Kind.STRING:
        return _to_string(value)
    if kind is _Kind.COLOR:
        return value if isinstance(value, str) and value else None
    return None


def _convert_like(value: Any, template: Any) -> Any:
    """Convert a stored value to the JSON type of ``template``."""
    if isinstance(template, bool):
        return _convert(value, _Kind.BOOL)
    if isinstance(template, int):
        return _convert(value, _Kind.INT)
    if isinstance(template, float):
        return _convert(value, _Kind.DOUBLE)
    if isinstance(template, str):
        return _convert(value, _Kind.STRING)
    if isinstance(template, list):
        return value if isinstance(value, list) else None
    if isinstance(template, dict):
        return value if isinstance(value, dict) else None
    return value


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


class SettingsLoader:
    """Builds a property map from a settings schema and keeps it persisted."""

    def __init__(
        self,
        config: dict[str, Any],
        name: str,
        settings_map: PropertyMap,
        settings: Settings | None = None,
    ) -> None:
        self._name = name
        self._map = settings_map
        self._settings = settings if settings is not None else Settings()
        settings_map.value_changed.connect(self.settings_changed)
        self._load_json(config)

    @property
    def name(self) -> str:
        return self._name

    @property
    def settings_map(self) -> PropertyMap:
        return self._map

    @property
    def settings(self) -> Settings:
        return self._settings

    def settings_changed(self, key: str, value: Any) -> None:
        self.save_settings()

    def save_settings(self) -> None:
        """Write every value of the property map that differs from the store."""
        self._save_group(self._name, self._map)
        self._settings.save()

    def _save_group(self, group: str, settings_map: PropertyMap | None) -> None:
        if settings_map is None:
            return
        with self._settings.group(group):
            for key in settings_map.keys():
                value = settings_map[key]
                if isinstance(value, PropertyMap):
                    self._save_group(key, value)
                elif not isinstance(value, _JSON_SCALARS):
                    continue
                elif self._settings.get(key) != value:
                    self._settings.set(key, value)

    def load_file(self, path: str | Path) -> None:
        """Load a settings schema from a JSON file."""
        document = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(document, dict):
            raise ValueError(f"{path}: settings schema must be a JSON object")
        self._load_json(document)

    def _load_json(self, config: dict[str, Any]) -> None:
        if config.get("type") != "items":
            log.debug(
                "%s: error loading settings JSON, root type should be of \"items\" type",
                self._settings.current_group,
            )
            return
        with self._settings.group(self._name):
            root = self._process_item(config)
        if not isinstance(root, dict):
            log.debug("Invalid root object")
            return
        self._create_property_map(self._name, root, self._map)
        self.save_settings()

    def _process_item(self, item: dict[str, Any]) -> Any:
        if item.get("label") == "" or item.get("name") == "" or item.get("type") == "":
            log.debug(
                "%s: missing required property(s); every item needs label, name and type",
                self._settings.current_group,
            )
            return None

        item_type = _as_str(item.get("type"))
        item_name = _as_str(item.get("name"))

        if item_type == "items":
            children = item.get("items")
            if not isinstance(children, list):
                log.debug("%s: missing \"items\" array", self._settings.current_group)
                return None
            group = item_name if item_name != self._name else ""
            items_map: dict[str, Any] = {}
            with self._settings.group(group):
                for child in children:
                    if not isinstance(child, dict):
                        log.debug("%s: invalid items type, skipping", self._settings.current_group)
                        continue
                    child_name = _as_str(child.get("name"))
                    if child_name in items_map:
                        if child_name:
                            log.debug("Duplicate name (%s %s) skipping", self._settings.current_group, child_name)
                        continue
                    items_map[child_name] = self._process_item(child)
            return items_map

        kind = _ITEM_TYPES.get(item_type)
        if kind is None:
            return None
        value = _convert(self._settings.get(item_name), kind)
        if value is None:
            if "defaultValue" in item:
                value = item["defaultValue"]
            else:
                value = _DEFAULTS.get(kind)
        return value

    def _create_property_map(
        self, group: str, values: dict[str, Any], property_map: PropertyMap
    ) -> PropertyMap:
        with self._settings.group(group):
            for key, value in values.items():
                if isinstance(value, dict):
                    child = PropertyMap()
                    child.value_changed.connect(self.settings_changed)
                    self._create_property_map(key, value, child)
                    property_map.insert(key, child)
                elif self._settings.contains(key):
                    property_map.insert(key, _convert_like(self._settings.get(key), value))
                else:
                    property_map.insert(key, value)
        return property_map