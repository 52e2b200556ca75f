import logging

import pytest

from headunit.audioprocessorinterface import EqBand, InputChannel, OutputChannel
from headunit.tda7418 import (
    I2C_ADDRESS,
    InputSource,
    Register,
    SMBusWriter,
    TDA7418,
)


class RecordingWriter:
    def __init__(self):
        self.writes = []

    def write_byte(self, register, value):
        self.writes.append((register, value))

    def write_block(self, register, data):
        self.writes.append((register, bytes(data)))


class FailingWriter:
    def write_byte(self, register, value):
        raise OSError("bus gone")

    def write_block(self, register, data):
        raise OSError("bus gone")


@pytest.fixture
def chip():
    writer = RecordingWriter()
    device = TDA7418(writer)
    writer.writes.clear()
    return device, writer


def test_construction_writes_defaults_in_order():
    writer = RecordingWriter()
    TDA7418(writer)
    registers = [register for register, _ in writer.writes]
    assert registers == [
        Register.BASS,
        Register.MIDDLE,
        Register.TREBLE,
        Register.ATTENUATOR_FL,
        Register.ATTENUATOR_FR,
        Register.ATTENUATOR_RL,
        Register.ATTENUATOR_RR,
        Register.ATTENUATOR_SUB,
        Register.SOFT_MUTE,
        Register.INPUT_SELECTOR,
        Register.INPUT_SELECTOR,
    ]
    assert writer.writes[-1] == (Register.INPUT_SELECTOR, InputSource.SE3)


def test_full_volume_has_no_attenuation(chip):
    device, writer = chip
    device.set_volume(100)
    assert writer.writes == [(Register.VOLUME, 0b10000000)]


def test_volume_attenuation_decreases_with_level(chip):
    device, writer = chip
    for level in range(100):
        device.set_volume(level)
    steps = [value & 0x7F for _, value in writer.writes]
    assert steps == sorted(steps, reverse=True)
    assert all(value & 0b10000000 for _, value in writer.writes)


def test_boost_levels_increase(chip):
    device, writer = chip
    for level in range(100, 116):
        device.set_output_channel_level(OutputChannel.SUBWOOFER, level)
    steps = [value & 0x7F for _, value in writer.writes]
    assert steps == sorted(set(steps))
    assert all(register == Register.ATTENUATOR_SUB for register, _ in writer.writes)


@pytest.mark.parametrize("level", [-1, 116])
def test_invalid_volume_raises(chip, level):
    device, writer = chip
    with pytest.raises(ValueError):
        device.set_volume(level)
    assert writer.writes == []


def test_mute_bit(chip):
    device, writer = chip
    device.set_mute(True)
    device.set_mute(False)
    assert writer.writes == [
        (Register.SOFT_MUTE, 0b01111100),
        (Register.SOFT_MUTE, 0b01111101),
    ]


def test_eq_zero_level(chip):
    device, writer = chip
    device.set_eq_band_level(EqBand.BASS, 0)
    assert writer.writes == [(Register.BASS, 0xFF)]


def test_eq_positive_and_negative_ranges(chip):
    device, writer = chip
    for level in range(-15, 16):
        device.set_eq_band_level(EqBand.TREBLE, level)
    values = [value for _, value in writer.writes]
    assert all(value & 0b11100000 == 0b11100000 for value in values)
    negatives = [value & 0x1F for value in values[:15]]
    positives = [value & 0x1F for value in values[15:]]
    assert max(negatives) < min(positives)
    assert len(set(value & 0x1F for value in values)) == 31


@pytest.mark.parametrize("level", [-16, 16])
def test_invalid_eq_level_raises(chip, level):
    device, _ = chip
    with pytest.raises(ValueError):
        device.set_eq_band_level(EqBand.MIDDLE, level)


def test_input_gain_keeps_input_bits(chip):
    device, writer = chip
    device.set_input_gain(5)
    assert device.input_selector & 0b111 == InputSource.SE3
    assert device.input_selector >> 3 == 5
    assert writer.writes == [(Register.INPUT_SELECTOR, device.input_selector)]


def test_input_keeps_gain_bits(chip):
    device, _ = chip
    device.set_input_gain(7)
    device.set_input(InputChannel.INPUT_4)
    assert device.input_selector & 0b111 == InputSource.PD
    assert device.input_selector >> 3 == 7


def test_invalid_gain_and_input_raise(chip):
    device, _ = chip
    with pytest.raises(ValueError):
        device.set_input_gain(16)
    with pytest.raises(ValueError):
        device.set_input(InputChannel.INPUT_6)


def test_bus_errors_are_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="headunit.tda7418"):
        device = TDA7418(FailingWriter())
        device.set_volume(50)
    assert any("Unable to write" in record.getMessage() for record in caplog.records)


def test_writer_defaults():
    writer = SMBusWriter()
    assert writer.address == I2C_ADDRESS
    assert writer.device == "/dev/i2c-1"


def test_writer_missing_device_raises(tmp_path):
    writer = SMBusWriter(str(tmp_path / "missing"))
    with pytest.raises(OSError):
        writer.write_byte(Register.VOLUME, 0)


def test_writer_rejects_oversized_values(tmp_path):
    writer = SMBusWriter(str(tmp_path / "missing"))
    with pytest.raises(ValueError):
        writer.write_byte(Register.VOLUME, 256)
    with pytest.raises(ValueError):
        writer.write_block(Register.VOLUME, bytes(33))