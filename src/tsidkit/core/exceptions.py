"""Exceptions raised by tsidkit."""


class TsidError(Exception):
    """Base class for all tsidkit errors."""


class ConfigurationError(TsidError, ValueError):
    """Invalid generator configuration (node bits, node id, settings)."""


class FormatError(TsidError, ValueError):
    """Malformed TSID text or binary input."""


class CapacityExceededError(TsidError, RuntimeError):
    """
    Too many TSIDs requested within one millisecond.

    Raised only with ``OverflowPolicy.RAISE``. Retrying is safe: the next call
    observes either a new millisecond or a freshly reset counter.
    """


__all__ = [
    "TsidError",
    "ConfigurationError",
    "FormatError",
    "CapacityExceededError",
]
