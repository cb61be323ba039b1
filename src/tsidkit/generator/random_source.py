"""
Random sources used to draw node ids and reset counters.

Two flavours, mirroring what callers usually have at hand:

- ``IntRandom``: a ``random.Random`` instance or a zero-arg int function.
- ``ByteRandom``: a ``length -> bytes`` function, ``secrets.token_bytes`` by
  default.

A byte function MAY return a fixed value. Returning ``None`` or ``b""`` resets
the counter to zero on every new millisecond (Snowflake-like sequences,
deterministic tests).
"""

from __future__ import annotations

import random
import secrets
from abc import ABC, abstractmethod
from typing import Callable, Optional, Union

__all__ = ["RandomSource", "IntRandom", "ByteRandom", "as_random_source"]

_INT_BITS = 32


class RandomSource(ABC):
    @abstractmethod
    def next_int(self) -> int:
        """Return a random non-negative 32-bit integer."""
        pass

    @abstractmethod
    def next_bytes(self, length: int) -> Optional[bytes]:
        """Return ``length`` random bytes (None/empty allowed, see module doc)."""
        pass


class IntRandom(RandomSource):
    def __init__(self, source: Union[random.Random, Callable[[], int], None] = None):
        if source is None:
            source = random.SystemRandom()
        if isinstance(source, random.Random):
            rng = source
            self._func: Callable[[], int] = lambda: rng.getrandbits(_INT_BITS)
        else:
            self._func = source

    def next_int(self) -> int:
        return int(self._func()) & ((1 << _INT_BITS) - 1)

    def next_bytes(self, length: int) -> Optional[bytes]:
        out = bytearray()
        while len(out) < length:
            out += self.next_int().to_bytes(_INT_BITS // 8, "big")
        return bytes(out[:length])


class ByteRandom(RandomSource):
    def __init__(self, func: Optional[Callable[[int], Optional[bytes]]] = None):
        self._func = func or secrets.token_bytes

    def next_int(self) -> int:
        data = self._func(_INT_BITS // 8)
        if not data:
            return 0
        return int.from_bytes(bytes(data[: _INT_BITS // 8]), "big")

    def next_bytes(self, length: int) -> Optional[bytes]:
        return self._func(length)


def as_random_source(
    source: Union[RandomSource, random.Random, None],
) -> RandomSource:
    """
    Wrap ``source`` in a RandomSource.

    ``random.SystemRandom`` reads bytes from the OS, so it becomes a
    ``ByteRandom``; other ``random.Random`` instances become ``IntRandom``.
    """
    if source is None:
        return ByteRandom()
    if isinstance(source, RandomSource):
        return source
    if isinstance(source, random.SystemRandom):
        rng = source
        return ByteRandom(lambda length: rng.randbytes(length))
    if isinstance(source, random.Random):
        return IntRandom(source)
    raise TypeError(f"Unsupported random source: {source!r}")
