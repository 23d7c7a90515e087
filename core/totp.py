"""
TOTP (Time-based One-Time Password) implementation following RFC 6238.

Produces codes identical to Google Authenticator.
"""

import calendar
import math
import time
from datetime import datetime
from typing import Optional, Union

from core.config import DEFAULT_CONFIG, OTPConfig
from core.hotp import hotp_code

TimeLike = Union[int, float, datetime]


def to_timestamp(for_time: Optional[TimeLike] = None) -> float:
    """
    Convert ``for_time`` to Unix seconds.

    ``None`` means now. Naive datetimes are interpreted as UTC.
    """
    if for_time is None:
        return time.time()
    if isinstance(for_time, datetime):
        if for_time.tzinfo is None:
            return calendar.timegm(for_time.utctimetuple()) + for_time.microsecond / 1e6
        return for_time.timestamp()
    return for_time


def timecode(for_time: Optional[TimeLike] = None, interval: int = 30) -> int:
    """Return the time-step counter ``floor(t / interval)``."""
    return math.floor(to_timestamp(for_time)) // interval


def generate_totp(
    secret_bytes: bytes,
    config: OTPConfig = DEFAULT_CONFIG,
    for_time: Optional[TimeLike] = None,
    padded: bool = True,
) -> Union[str, int]:
    """
    Generate a TOTP code.

    Args:
        secret_bytes: Raw (already base32-decoded) secret bytes.
        config:       Digits, algorithm and interval.
        for_time:     Unix timestamp or datetime (uses time.time() if None).
        padded:       Return the zero-padded string; when False return the
                      same code as an int.

    Returns:
        OTP string, zero-padded to ``config.digits`` characters, or its
        integer value.
    """
    counter = timecode(for_time, config.interval)
    code = hotp_code(secret_bytes, counter, config.digits, config.algorithm)
    return str(code) if padded else int(code)


def now(secret_bytes: bytes, config: OTPConfig = DEFAULT_CONFIG) -> str:
    """Return the TOTP code for the current time."""
    return generate_totp(secret_bytes, config)


def remaining_seconds(interval: int = 30, for_time: Optional[TimeLike] = None) -> int:
    """Return seconds until the current TOTP window expires."""
    t = math.floor(to_timestamp(for_time))
    return interval - (t % interval)
