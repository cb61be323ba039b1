"""TSID generator engine and its clock/random collaborators."""

from .clock import Clock, FixedClock, FunctionClock, SystemClock
from .engine import OverflowPolicy, TsidGenerator
from .random_source import ByteRandom, IntRandom, RandomSource

__all__ = [
    "TsidGenerator",
    "OverflowPolicy",
    "Clock",
    "SystemClock",
    "FunctionClock",
    "FixedClock",
    "RandomSource",
    "IntRandom",
    "ByteRandom",
]
