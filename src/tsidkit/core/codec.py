"""
Crockford base32 codec for TSIDs.

A TSID string is 13 characters long:

    13 chars x 5 bits = 65 bits, of which the 64 low bits hold the TSID.

The extra top bit must always be zero, so the first character is one of
``0-9A-F``. Decoding is case-insensitive, accepts ``O``/``I``/``L`` as
``0``/``1``/``1``, ignores ``-`` separators and rejects ``U``.
"""

from __future__ import annotations

from typing import Dict, Optional

from .constants import (
    ALPHABET_ALIASES,
    ALPHABET_LOWER,
    ALPHABET_UPPER,
    FIRST_CHAR_MAX,
    TSID_CHARS,
    TSID_MASK,
)
from .exceptions import FormatError

# Shifts for 13 five-bit groups, most significant first: 60, 55, ..., 0
_SHIFTS = tuple(range(5 * (TSID_CHARS - 1), -1, -5))


def _build_decoding_table() -> Dict[str, int]:
    table: Dict[str, int] = {}
    for value, char in enumerate(ALPHABET_UPPER):
        table[char] = value
        table[char.lower()] = value
    for char, value in ALPHABET_ALIASES.items():
        table[char] = value
        table[char.lower()] = value
    return table


_DECODING = _build_decoding_table()


def encode(value: int, lowercase: bool = False) -> str:
    """Encode a 64-bit value as a fixed-width 13-character string."""
    value &= TSID_MASK
    alphabet = ALPHABET_LOWER if lowercase else ALPHABET_UPPER
    return "".join(alphabet[(value >> shift) & 0b11111] for shift in _SHIFTS)


def _check(text: object) -> Optional[str]:
    """
    Return the reason ``text`` is not a valid TSID string, or None if it is.
    """
    if not isinstance(text, str):
        return "not a string"
    chars = text.replace("-", "")
    if len(chars) != TSID_CHARS:
        return f"expected {TSID_CHARS} characters, got {len(chars)}"
    for char in chars:
        if char not in _DECODING:
            return f"invalid character {char!r}"
    if _DECODING[chars[0]] > FIRST_CHAR_MAX:
        return f"first character {chars[0]!r} overflows 64 bits"
    return None


def is_valid(text: object) -> bool:
    """Check whether ``text`` decodes to a TSID."""
    return _check(text) is None


def decode(text: str) -> int:
    """
    Decode a TSID string into its 64-bit value.

    Raises:
        FormatError: wrong length, character outside the alphabet (``U``
            included) or a first character above ``F``.
    """
    reason = _check(text)
    if reason is not None:
        raise FormatError(f"Invalid TSID {text!r}: {reason}")

    number = 0
    for char in text.replace("-", ""):
        number = (number << 5) | _DECODING[char]
    return number


__all__ = ["encode", "decode", "is_valid"]
