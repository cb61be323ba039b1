"""Clock sources for TSID generators."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from datetime import datetime
from threading import Lock
from typing import Callable, Union

from tsidkit.core.tsid import epoch_to_millis

__all__ = ["Clock", "SystemClock", "FunctionClock", "FixedClock", "as_clock"]


class Clock(ABC):
    """Source of wall-clock time in Unix milliseconds."""

    @abstractmethod
    def now_millis(self) -> int:
        pass


class SystemClock(Clock):
    """UTC system clock."""

    def now_millis(self) -> int:
        return time.time_ns() // 1_000_000


class FunctionClock(Clock):
    """Adapts a zero-argument callable returning Unix milliseconds."""

    def __init__(self, func: Callable[[], int]):
        self._func = func

    def now_millis(self) -> int:
        return int(self._func())


class FixedClock(Clock):
    """
    Manually driven clock for tests.

    Time only moves through ``set()`` / ``advance()``.
    """

    def __init__(self, millis: Union[int, datetime] = 0):
        self._lock = Lock()
        self._millis = epoch_to_millis(millis)

    def now_millis(self) -> int:
        with self._lock:
            return self._millis

    def set(self, millis: Union[int, datetime]) -> None:
        with self._lock:
            self._millis = epoch_to_millis(millis)

    def advance(self, delta_ms: int) -> None:
        """Move the clock by ``delta_ms`` (negative values move it back)."""
        with self._lock:
            self._millis += delta_ms


def as_clock(source: Union[Clock, Callable[[], int], None]) -> Clock:
    if source is None:
        return SystemClock()
    if isinstance(source, Clock):
        return source
    if callable(source):
        return FunctionClock(source)
    raise TypeError(f"Unsupported clock source: {source!r}")
