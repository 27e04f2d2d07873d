"""
Identifier generation

Audit entries, sessions and locally recorded awards get time-ordered UUIDs
(version 7 layout), so an event's history sorts chronologically by id.
"""

import secrets
import time
import uuid


def generate_id() -> str:
    """
    Generate a time-ordered UUID string (version 7 layout)

    48 bits of Unix milliseconds, then version and variant bits, then 74
    random bits.

    Returns:
        e.g. "01908e9a-3b87-7c41-9a2e-5f1d0c3b8e77"
    """
    millis = time.time_ns() // 1_000_000
    value = (millis & ((1 << 48) - 1)) << 80
    value |= 0x7 << 76
    value |= secrets.randbits(12) << 64
    value |= 0b10 << 62
    value |= secrets.randbits(62)
    return str(uuid.UUID(int=value))
