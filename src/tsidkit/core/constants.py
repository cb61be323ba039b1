"""
TSID layout constants, epoch and alphabet.
"""

# Bit layout: time(42) | random(22), random = node(0-20) | counter(2-22)
TSID_BITS = 64
TIME_BITS = 42
RANDOM_BITS = 22
RANDOM_MASK = (1 << RANDOM_BITS) - 1  # 0x3FFFFF
TSID_MASK = (1 << TSID_BITS) - 1

# Sizes
TSID_CHARS = 13
TSID_BYTES = 8

# Node bit-width limits and presets
MIN_NODE_BITS = 0
MAX_NODE_BITS = 20
NODE_BITS_256 = 8
NODE_BITS_1024 = 10
NODE_BITS_4096 = 12
DEFAULT_NODE_BITS = NODE_BITS_1024

# 2020-01-01T00:00:00Z in Unix milliseconds
TSID_EPOCH_MILLIS = 1577836800000

# Backward clock movement treated as "same millisecond" (NTP step, leap second)
DEFAULT_DRIFT_TOLERANCE_MS = 10_000

# Crockford base32
ALPHABET_UPPER = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
ALPHABET_LOWER = ALPHABET_UPPER.lower()
# Lookalikes accepted on decode
ALPHABET_ALIASES = {"O": 0, "I": 1, "L": 1}
# Encoded chars carry 65 bits, so the first char must leave the top bit unset
FIRST_CHAR_MAX = 0b01111
