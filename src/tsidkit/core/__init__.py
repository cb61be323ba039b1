"""TSID value type, codec and constants."""

from .codec import decode, encode, is_valid
from .constants import DEFAULT_NODE_BITS, TSID_EPOCH_MILLIS
from .exceptions import (
    CapacityExceededError,
    ConfigurationError,
    FormatError,
    TsidError,
)
from .tsid import Tsid

__all__ = [
    "Tsid",
    "encode",
    "decode",
    "is_valid",
    "DEFAULT_NODE_BITS",
    "TSID_EPOCH_MILLIS",
    "TsidError",
    "ConfigurationError",
    "FormatError",
    "CapacityExceededError",
]
