import pytest

from headunit.signal import Signal


def test_emit_calls_slots_in_order_with_arguments():
    signal = Signal()
    received = []
    signal.connect(lambda *args: received.append(("first", args)))
    signal.connect(lambda *args: received.append(("second", args)))
    signal.emit(1, "two")
    assert received == [("first", (1, "two")), ("second", (1, "two"))]


def test_disconnect_stops_delivery():
    signal = Signal()
    received = []
    slot = received.append
    signal.connect(slot)
    signal.emit("a")
    signal.disconnect(slot)
    signal.emit("b")
    assert received == ["a"]
    assert len(signal) == 0


def test_disconnect_removes_all_connections_of_a_slot():
    signal = Signal()
    received = []
    slot = received.append
    signal.connect(slot)
    signal.connect(slot)
    assert len(signal) == 2
    signal.disconnect(slot)
    signal.emit("x")
    assert received == []


def test_disconnect_unknown_slot_raises():
    signal = Signal()
    with pytest.raises(ValueError):
        signal.disconnect(print)


def test_connect_rejects_non_callable():
    signal = Signal()
    with pytest.raises(TypeError):
        signal.connect(42)


def test_slot_may_disconnect_itself_during_emit():
    signal = Signal()
    received = []

    def once(value):
        received.append(value)
        signal.disconnect(once)

    signal.connect(once)
    signal.connect(received.append)
    signal.emit(1)
    signal.emit(2)
    assert received == [1, 1, 2]