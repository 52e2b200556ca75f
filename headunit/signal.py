"""A small synchronous observer used to wire components together."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any


class Signal:
    """A list of callables invoked, in connection order, on every emit."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []
        self._lock = threading.Lock()

    def connect(self, slot: Callable[..., Any]) -> None:
        """Call ``slot`` on every later emit."""
        if not callable(slot):
            raise TypeError(f"slot must be callable, got {type(slot).__name__}")
        with self._lock:
            self._slots.append(slot)

    def disconnect(self, slot: Callable[..., Any]) -> None:
        """Remove every connection of ``slot``."""
        with self._lock:
            remaining = [connected for connected in self._slots if connected != slot]
            if len(remaining) == len(self._slots):
                raise ValueError("slot is not connected")
            self._slots = remaining

    def emit(self, *args: Any) -> None:
        """Call every connected slot with ``args``."""
        with self._lock:
            slots = list(self._slots)
        for slot in slots:
            slot(*args)

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)