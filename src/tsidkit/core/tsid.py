from __future__ import annotations

import functools
from datetime import datetime, timezone
from typing import Optional, Union

from . import codec
from .constants import (
    DEFAULT_NODE_BITS,
    MAX_NODE_BITS,
    MIN_NODE_BITS,
    RANDOM_BITS,
    RANDOM_MASK,
    TSID_BYTES,
    TSID_EPOCH_MILLIS,
    TSID_MASK,
)
from .exceptions import ConfigurationError, FormatError

Epoch = Union[int, datetime]


def epoch_to_millis(epoch: Optional[Epoch]) -> int:
    """Normalize an epoch given as Unix ms or datetime (naive = UTC)."""
    if epoch is None:
        return TSID_EPOCH_MILLIS
    if isinstance(epoch, datetime):
        if epoch.tzinfo is None:
            epoch = epoch.replace(tzinfo=timezone.utc)
        return int(epoch.timestamp() * 1000)
    return int(epoch)


def check_node_bits(node_bits: int) -> int:
    if not (MIN_NODE_BITS <= node_bits <= MAX_NODE_BITS):
        raise ConfigurationError(
            f"node_bits must be in [{MIN_NODE_BITS}, {MAX_NODE_BITS}], got {node_bits}"
        )
    return node_bits


@functools.total_ordering
class Tsid:
    """
    Time-Sortable Identifier.

    Layout (64 bits, most significant first):
        [ time (42 b) ][ node (0-20 b) ][ counter (2-22 b) ]

    time = milliseconds since the epoch (default 2020-01-01T00:00:00Z).
    node + counter together form the 22-bit random component.

    Instances are immutable; ordering, equality and hashing use the raw number,
    so sorting TSIDs and sorting their strings give the same order.
    """

    __slots__ = ("_number",)

    def __init__(self, number: int):
        # Signed 64-bit input (e.g. a BIGINT column) maps to the same TSID
        object.__setattr__(self, "_number", int(number) & TSID_MASK)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Tsid is immutable")

    @classmethod
    def from_number(cls, number: int) -> "Tsid":
        return cls(number)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Tsid":
        """Build a TSID from 8 big-endian bytes."""
        if data is None or len(data) != TSID_BYTES:
            size = None if data is None else len(data)
            raise FormatError(f"TSID bytes must be {TSID_BYTES} long, got {size}")
        return cls(int.from_bytes(bytes(data), "big"))

    @classmethod
    def from_string(cls, text: str) -> "Tsid":
        """Build a TSID from its canonical 13-character string."""
        return cls(codec.decode(text))

    @staticmethod
    def is_valid(text: object) -> bool:
        return codec.is_valid(text)

    def to_number(self) -> int:
        return self._number

    def to_bytes(self) -> bytes:
        return self._number.to_bytes(TSID_BYTES, "big")

    def to_string(self) -> str:
        return codec.encode(self._number)

    def to_lower(self) -> str:
        return codec.encode(self._number, lowercase=True)

    @property
    def time(self) -> int:
        """Milliseconds since the epoch the TSID was generated with."""
        return self._number >> RANDOM_BITS

    @property
    def random(self) -> int:
        """The 22-bit random component (node + counter)."""
        return self._number & RANDOM_MASK

    def node(self, node_bits: int = DEFAULT_NODE_BITS) -> int:
        """Node id, assuming the TSID was generated with ``node_bits``."""
        check_node_bits(node_bits)
        return self.random >> (RANDOM_BITS - node_bits)

    def counter(self, node_bits: int = DEFAULT_NODE_BITS) -> int:
        check_node_bits(node_bits)
        return self.random & (RANDOM_MASK >> node_bits)

    def unix_millis(self, custom_epoch: Optional[Epoch] = None) -> int:
        return self.time + epoch_to_millis(custom_epoch)

    def instant(self, custom_epoch: Optional[Epoch] = None) -> datetime:
        """Creation time as an aware UTC datetime (millisecond precision)."""
        millis = self.unix_millis(custom_epoch)
        seconds, remainder = divmod(millis, 1000)
        return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(
            microsecond=remainder * 1000
        )

    def __int__(self) -> int:
        return self._number

    def __index__(self) -> int:
        return self._number

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Tsid('{self.to_string()}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tsid):
            return NotImplemented
        return self._number == other._number

    def __lt__(self, other: "Tsid") -> bool:
        if not isinstance(other, Tsid):
            return NotImplemented
        return self._number < other._number

    def __hash__(self) -> int:
        return hash(self._number)

    def __reduce__(self):
        return (Tsid, (self._number,))


__all__ = ["Tsid", "Epoch", "epoch_to_millis", "check_node_bits"]
