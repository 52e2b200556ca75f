"""Backend for the TDA7418 audio processor on an I2C bus."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from enum import IntEnum

from headunit.audioprocessorinterface import (
    AudioProcessor,
    EqBand,
    InputChannel,
    OutputChannel,
)

log = logging.getLogger(__name__)

I2C_ADDRESS = 0x44
I2C_DEVICE = "/dev/i2c-1"
_I2C_SLAVE = 0x0703
_SMBUS_BLOCK_MAX = 32


class Register(IntEnum):
    """Sub-addresses of the TDA7418 registers."""

    INPUT_SELECTOR = 0
    LOUDNESS = 1
    VOLUME = 2
    TREBLE = 3
    MIDDLE = 4
    BASS = 5
    MIDDLE_BASS_FC = 6
    ATTENUATOR_FL = 7
    ATTENUATOR_RL = 8
    ATTENUATOR_RR = 9
    ATTENUATOR_FR = 10
    ATTENUATOR_SUB = 11
    SOFT_MUTE = 12
    AUDIO_TEST = 13


class InputSource(IntEnum):
    """Input selector codes of the TDA7418."""

    PD = 0
    SE1 = 1
    SE2 = 2
    SE3 = 3


_INPUTS: dict[InputChannel, InputSource] = {
    InputChannel.INPUT_1: InputSource.SE1,
    InputChannel.INPUT_2: InputSource.SE2,
    InputChannel.INPUT_3: InputSource.SE3,
    InputChannel.INPUT_4: InputSource.PD,
}

_ATTENUATORS: dict[OutputChannel, Register] = {
    OutputChannel.FRONT_LEFT: Register.ATTENUATOR_FL,
    OutputChannel.FRONT_RIGHT: Register.ATTENUATOR_FR,
    OutputChannel.REAR_LEFT: Register.ATTENUATOR_RL,
    OutputChannel.REAR_RIGHT: Register.ATTENUATOR_RR,
    OutputChannel.SUBWOOFER: Register.ATTENUATOR_SUB,
}

_EQ_REGISTERS: dict[EqBand, Register] = {
    EqBand.BASS: Register.BASS,
    EqBand.MIDDLE: Register.MIDDLE,
    EqBand.TREBLE: Register.TREBLE,
}


class SMBusWriter:
    """Writes SMBus data to one device address through a Linux I2C device node."""

    def __init__(self, device: str = I2C_DEVICE, address: int = I2C_ADDRESS) -> None:
        self.device = device
        self.address = address

    @contextmanager
    def _open(self) -> Iterator[int]:
        import fcntl

        fd = os.open(self.device, os.O_RDWR)
        try:
            fcntl.ioctl(fd, _I2C_SLAVE, self.address)
            yield fd
        finally:
            os.close(fd)

    def write_byte(self, register: int, value: int) -> None:
        """Write one data byte to ``register``; OSError on bus failure."""
        payload = bytes([register, value])
        with self._open() as fd:
            os.write(fd, payload)

    def write_block(self, register: int, data: Iterable[int]) -> None:
        """Write a counted block of bytes to ``register``; OSError on bus failure."""
        block = bytes(data)
        if len(block) > _SMBUS_BLOCK_MAX:
            raise ValueError(f"SMBus block holds at most {_SMBUS_BLOCK_MAX} bytes")
        payload = bytes([register, len(block)]) + block
        with self._open() as fd:
            os.write(fd, payload)


def _attenuation(level: int) -> int:
    if not 0 <= level <= 115:
        raise ValueError(f"invalid level {level}, expected 0..115")
    step = int(96 - level * 0.8) if level < 100 else level - 100
    return 0b10000000 | step


class TDA7418(AudioProcessor):
    """TDA7418 audio processor driven over SMBus."""

    def __init__(self, writer: SMBusWriter | None = None) -> None:
        self._writer = writer if writer is not None else SMBusWriter()
        self._input_selector = 0
        for band in EqBand:
            self.set_eq_band_level(band, 0)
        for channel in OutputChannel:
            self.set_output_channel_level(channel, 100)
        self.set_mute(False)
        self.set_input(InputChannel.INPUT_3)
        self.set_input_gain(0)

    @property
    def input_selector(self) -> int:
        """Current contents of the input selector register."""
        return self._input_selector

    def _write(self, register: Register, value: int) -> None:
        try:
            self._writer.write_byte(int(register), value & 0xFF)
        except OSError as error:
            log.warning(
                "Unable to write register 0x%02x::0x%02x: %s",
                I2C_ADDRESS, int(register), error,
            )

    def set_input(self, channel: InputChannel) -> None:
        source = _INPUTS.get(InputChannel(channel))
        if source is None:
            raise ValueError(f"unsupported input {channel!r}")
        self._input_selector = (self._input_selector & 0b11111000) | source
        self._write(Register.INPUT_SELECTOR, self._input_selector)

    def set_volume(self, volume: int) -> None:
        self._write(Register.VOLUME, _attenuation(volume))

    def set_mute(self, mute: bool) -> None:
        self._write(Register.SOFT_MUTE, 0b01111100 | (0 if mute else 1))

    def set_input_gain(self, level: int) -> None:
        if not 0 <= level <= 15:
            raise ValueError(f"invalid input gain {level}, expected 0..15")
        self._input_selector = ((self._input_selector & 0b10000111) | (level << 3)) & 0xFF
        self._write(Register.INPUT_SELECTOR, self._input_selector)

    def set_output_channel_level(self, channel: OutputChannel, level: int) -> None:
        register = _ATTENUATORS[OutputChannel(channel)]
        self._write(register, _attenuation(level))

    def set_eq_band_level(self, band: EqBand, level: int) -> None:
        register = _EQ_REGISTERS[EqBand(band)]
        if not -15 <= level <= 15:
            raise ValueError(f"invalid EQ level {level}, expected -15..15")
        step = 31 - level if level >= 0 else level + 15
        self._write(register, 0b11100000 | step)