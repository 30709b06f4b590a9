"""Collision-resistant identifiers for new records."""

import logging
import os
import time

logger = logging.getLogger(__name__)

# 64 symbols, so masking a random byte with 63 keeps the draw uniform.
ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"
ID_LENGTH = 21


def new_id() -> str:
    """
    Return a 21-char URL-safe identifier from the OS random source.

    Falls back to a time-derived value when the strong source is unavailable;
    that value is not collision-resistant, so the fallback is logged.
    """
    try:
        raw = os.urandom(ID_LENGTH)
    except (NotImplementedError, OSError) as e:
        fallback = str(time.time_ns())
        logger.warning("Degraded id generation (no strong random source: %s); id=%s", e, fallback)
        return fallback
    return "".join(ALPHABET[b & 63] for b in raw)
