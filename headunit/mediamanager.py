"""Routes media controls and volumes to the registered media players."""

from __future__ import annotations

import logging
from typing import Any

from headunit.settingsloader import PropertyMap, Settings
from headunit.signal import Signal

log = logging.getLogger(__name__)

_ACTIVE_KEY = "MediaManager/ActiveMediaPlayer"
_MEDIA_VOLUME_KEY = "MediaManager/MediaVolumes"
_VOICE_VOLUME_KEY = "MediaManager/VoiceVolumes"
_REQUIRED_METHODS = (
    "start",
    "stop",
    "prev_track",
    "next_track",
    "set_media_volume",
    "set_voice_volume",
)


def _is_media_interface(candidate: Any) -> bool:
    return all(callable(getattr(candidate, name, None)) for name in _REQUIRED_METHODS)


class MediaManager:
    """Keeps track of media players and which of them is active."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings if settings is not None else Settings()
        self._interfaces: dict[str, Any] = {}
        stored = self._settings.get(_ACTIVE_KEY, "")
        self._active = stored if isinstance(stored, str) else ""
        self.media_volumes = PropertyMap()
        self.voice_volumes = PropertyMap()
        self.interfaces_changed = Signal()
        self.active_media_player_changed = Signal()
        self.media_volumes.value_changed.connect(self._set_media_volume)
        self.voice_volumes.value_changed.connect(self._set_voice_volume)

    @property
    def interfaces(self) -> list[str]:
        return list(self._interfaces)

    @property
    def active_media_player(self) -> str:
        return self._active

    def init(self) -> None:
        """Apply the remembered volumes to every registered player."""
        for name in self.media_volumes:
            if name in self._interfaces:
                self._interfaces[name].set_media_volume(int(self.media_volumes[name]))
        for name in self.voice_volumes:
            if name in self._interfaces:
                self._interfaces[name].set_voice_volume(int(self.voice_volumes[name]))

    def add_interface(self, name: str, interface: Any) -> bool:
        """Register a media player; objects that are not players are ignored."""
        if not _is_media_interface(interface):
            return False
        self._interfaces[name] = interface
        self.interfaces_changed.emit()

        if getattr(interface, "media_stream", False):
            self.media_volumes.insert(
                name, int(self._settings.get(_MEDIA_VOLUME_KEY + name, 100))
            )
        if getattr(interface, "voice_stream", False):
            self.voice_volumes.insert(
                name, int(self._settings.get(_VOICE_VOLUME_KEY + name, 100))
            )

        playback_started = getattr(interface, "playback_started", None)
        if isinstance(playback_started, Signal):
            playback_started.connect(lambda *_: self._playback_started(interface))
        return True

    def _playback_started(self, interface: Any) -> None:
        for name, registered in self._interfaces.items():
            if registered is interface:
                self.set_active_media_player(name)
                return

    def set_active_media_player(self, name: str) -> None:
        """Make ``name`` the active player and stop all the others."""
        if self._active == name:
            return
        self._active = name
        self._settings.set(_ACTIVE_KEY, name)
        self._settings.save()
        for interface_name, interface in self._interfaces.items():
            if interface_name != name:
                interface.stop()
        self.active_media_player_changed.emit()

    def _set_voice_volume(self, name: str, value: Any) -> None:
        if name in self._interfaces:
            volume = int(value)
            self._interfaces[name].set_voice_volume(volume)
            self._settings.set(_VOICE_VOLUME_KEY + name, volume)
            self._settings.save()

    def _set_media_volume(self, name: str, value: Any) -> None:
        if name in self._interfaces:
            volume = int(value)
            self._interfaces[name].set_media_volume(volume)
            self._settings.set(_MEDIA_VOLUME_KEY + name, volume)
            self._settings.save()

    def media_input(self, input_name: str) -> None:
        if input_name == "Next":
            self.next_track()
        elif input_name == "Previous":
            self.prev_track()

    def _active_interface(self) -> Any | None:
        return self._interfaces.get(self._active)

    def start(self) -> None:
        if (interface := self._active_interface()) is not None:
            interface.start()

    def stop(self) -> None:
        if (interface := self._active_interface()) is not None:
            interface.stop()

    def prev_track(self) -> None:
        if (interface := self._active_interface()) is not None:
            interface.prev_track()

    def next_track(self) -> None:
        if (interface := self._active_interface()) is not None:
            interface.next_track()

    def set_volume(self, volume: int) -> None:
        if (interface := self._active_interface()) is not None:
            interface.set_media_volume(volume)