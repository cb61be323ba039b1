"""tsidkit - Time-Sortable Identifiers (TSID) for Python."""

from ._version import __version__
from .config import (
    EnvironmentNodeIdSource,
    GeneratorSettings,
    NodeIdSource,
    StaticNodeIdSource,
    TsidGeneratorBuilder,
)
from .core import (
    CapacityExceededError,
    ConfigurationError,
    FormatError,
    Tsid,
    TsidError,
    decode,
    encode,
    is_valid,
)
from .generator import FixedClock, OverflowPolicy, TsidGenerator
from .presets import get_generator, get_tsid, get_tsid256, get_tsid1024, get_tsid4096

__all__ = [
    "Tsid",
    "TsidGenerator",
    "TsidGeneratorBuilder",
    "GeneratorSettings",
    "OverflowPolicy",
    "FixedClock",
    "NodeIdSource",
    "StaticNodeIdSource",
    "EnvironmentNodeIdSource",
    "encode",
    "decode",
    "is_valid",
    "get_generator",
    "get_tsid",
    "get_tsid256",
    "get_tsid1024",
    "get_tsid4096",
    "TsidError",
    "ConfigurationError",
    "FormatError",
    "CapacityExceededError",
    "__version__",
]
