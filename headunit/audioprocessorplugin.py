"""Plugin that drives an audio processor from settings and input actions."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import IntEnum
from typing import Any

from headunit.audioprocessorinterface import AudioProcessor, EqBand, OutputChannel
from headunit.settingsloader import PropertyMap
from headunit.signal import Signal

log = logging.getLogger(__name__)

AUDIO_PARAMETERS = ("volume", "sub", "bass", "middle", "treble", "balance")
_VOLUME_OVERLAY = "qrc:/AudioProcessor/Volume.qml"
_SETTINGS_OVERLAY = "qrc:/AudioProcessor/SoundSettings.qml"


class SoundSettingsState(IntEnum):
    """Which sound setting the tune actions adjust."""

    DEFAULT = 0
    BALANCE = 1
    SUB = 2
    BASS = 3
    MIDDLE = 4
    TREBLE = 5


_TUNE_KEYS: dict[SoundSettingsState, str] = {
    SoundSettingsState.BALANCE: "balance",
    SoundSettingsState.SUB: "sub",
    SoundSettingsState.BASS: "bass",
    SoundSettingsState.MIDDLE: "middle",
    SoundSettingsState.TREBLE: "treble",
}

_EQ_BANDS: dict[str, EqBand] = {
    "bass": EqBand.BASS,
    "middle": EqBand.MIDDLE,
    "treble": EqBand.TREBLE,
}


def _to_int(value: Any) -> int:
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, float):
        return round(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


class _OverlayTimer:
    """A restartable single-shot timer."""

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self._interval = interval
        self._callback = callback
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        with self._lock:
            return self._timer is not None and self._timer.is_alive()

    def start(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._interval, self._callback)
            self._timer.daemon = True
            self._timer.start()

    def stop(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class AudioProcessorPlugin:
    """Maps volume, balance and tone settings onto an audio processor backend."""

    def __init__(
        self, backend: AudioProcessor | None = None, overlay_timeout: float = 5.0
    ) -> None:
        if backend is None:
            from headunit.tda7418 import TDA7418

            backend = TDA7418()
        self._backend = backend
        self.settings = PropertyMap()
        self.actions: list[str] = []
        self.message = Signal()
        self.action = Signal()
        self.settings_state_changed = Signal()
        self._state = SoundSettingsState.DEFAULT
        self._timer = _OverlayTimer(overlay_timeout, self.close_overlay)
        self.settings.value_changed.connect(self._settings_changed)

    @property
    def settings_state(self) -> SoundSettingsState:
        return self._state

    @property
    def overlay_active(self) -> bool:
        return self._timer.active

    def get_context_property(self) -> AudioProcessorPlugin:
        return self

    def init(self) -> None:
        """Push every stored audio setting to the backend."""
        self.actions = ["Sound", "TuneUp", "TuneDown", "VolumeUp", "VolumeDown"]
        for parameter in AUDIO_PARAMETERS:
            self.set_audio_parameter(parameter, _to_int(self.settings.get(parameter, 0)))

    def _update_setting(self, key: str, value: int) -> None:
        self.settings.insert(key, value)
        self.settings.value_changed.emit(key, value)

    def action_message(self, action_id: str, message: Any) -> None:
        if action_id == "Sound":
            if self._state is SoundSettingsState.DEFAULT:
                self.open_overlay()
            self._timer.start()
            if self._state < SoundSettingsState.TREBLE:
                self._state = SoundSettingsState(self._state + 1)
            else:
                self._state = SoundSettingsState.BALANCE
            self.settings_state_changed.emit()
        elif action_id in ("TuneUp", "TuneDown"):
            key = _TUNE_KEYS.get(self._state)
            if key is None:
                return
            step = 1 if action_id == "TuneUp" else -1
            self._update_setting(key, _to_int(self.settings.get(key, 0)) + step)
        elif action_id in ("VolumeUp", "VolumeDown"):
            step = 1 if action_id == "VolumeUp" else -1
            value = min(max(_to_int(self.settings.get("volume", 0)) + step, 0), 50)
            self._update_setting("volume", value)
            self.action.emit("GUI::OpenOverlay", {"source": _VOLUME_OVERLAY})

    def _settings_changed(self, key: str, value: Any) -> None:
        self.set_audio_parameter(key, _to_int(value))

    def open_overlay(self) -> None:
        self.action.emit("GUI::OpenOverlay", {"source": _SETTINGS_OVERLAY})

    def set_audio_parameter(self, parameter: str, value: int) -> bool:
        """Apply one setting to the backend; False when it is unknown or out of range."""
        backend = self._backend
        if parameter == "volume":
            if not 0 <= value <= 50:
                return False
            backend.set_volume(50 + value)
        elif parameter == "balance":
            if not -15 <= value <= 15:
                return False
            left = 100 + value if value < 0 else 100
            right = 100 - value if value > 0 else 100
            backend.set_output_channel_level(OutputChannel.FRONT_LEFT, left)
            backend.set_output_channel_level(OutputChannel.FRONT_RIGHT, right)
        elif parameter == "sub":
            if not -100 <= value <= 15:
                return False
            backend.set_output_channel_level(OutputChannel.SUBWOOFER, 100 + value)
        elif parameter in _EQ_BANDS:
            if not -15 <= value <= 15:
                return False
            backend.set_eq_band_level(_EQ_BANDS[parameter], value)
        else:
            return False
        log.debug("Set audio parameter %s %s", parameter, value)
        self._timer.start()
        return True

    def close_overlay(self) -> None:
        self._timer.stop()
        self._state = SoundSettingsState.DEFAULT
        self.settings_state_changed.emit()
        self.action.emit("GUI::CloseOverlay", None)