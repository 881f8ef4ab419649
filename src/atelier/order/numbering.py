"""Order number generation.

Numbers look like ``AB-LX3K9Z2A-7QF2MC``: a base36 millisecond timestamp
followed by six random characters. The store enforces uniqueness, so a
collision fails the insert instead of producing a duplicate.
"""

import secrets
import string
import time

ORDER_NUMBER_PREFIX = "AB"
_ALPHABET = string.digits + string.ascii_uppercase
_SUFFIX_LENGTH = 6


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_order_number(timestamp_ms: int | None = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{ORDER_NUMBER_PREFIX}-{_base36(timestamp_ms)}-{suffix}"
