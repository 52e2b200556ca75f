"""The operations every audio processor backend provides."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum


class OutputChannel(IntEnum):
    """Output channels of an audio processor."""

    FRONT_LEFT = 0
    FRONT_RIGHT = 1
    REAR_LEFT = 2
    REAR_RIGHT = 3
    SUBWOOFER = 4


class InputChannel(IntEnum):
    """Input channels an audio processor may select."""

    INPUT_1 = 0
    INPUT_2 = 1
    INPUT_3 = 2
    INPUT_4 = 3
    INPUT_5 = 4
    INPUT_6 = 5
    INPUT_7 = 6
    INPUT_8 = 7


class EqBand(IntEnum):
    """Equaliser bands."""

    BASS = 0
    MIDDLE = 1
    TREBLE = 2


class AudioProcessor(ABC):
    """Controls the volume, routing and tone of an audio processor."""

    @abstractmethod
    def set_input(self, channel: InputChannel) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_volume(self, volume: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_mute(self, mute: bool) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_input_gain(self, level: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_output_channel_level(self, channel: OutputChannel, level: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_eq_band_level(self, band: EqBand, level: int) -> None:
        raise NotImplementedError