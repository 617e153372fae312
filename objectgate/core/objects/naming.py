"""
Storage key naming.

Keys are "<epoch milliseconds>-<original filename>". The timestamp prefix
keeps repeated uploads of the same filename apart without a round trip to
the store. Two uploads of an identical filename within the same
millisecond will collide; that risk is accepted.

Filenames are not sanitized: path separators and other characters pass
through into the key unchanged.
"""

import time
from typing import Callable

KEY_DELIMITER = "-"


def current_millis() -> int:
    return time.time_ns() // 1_000_000


def build_storage_key(
    filename: str,
    clock: Callable[[], int] = current_millis,
) -> str:
    """Derive the storage key for an uploaded file."""
    return f"{clock()}{KEY_DELIMITER}{filename or ''}"
