"""
TOTP verification: exact, drift-tolerant, and replay-safe.

Nothing here keeps state between calls. The replay marker returned by
:func:`verify_with_drift_and_prior` belongs to the caller, who must persist it
(atomically, if verifications can race) and pass it back on the next attempt.
"""

import logging
from typing import List, Optional

from core.config import DEFAULT_CONFIG, OTPConfig
from core.crypto import constant_time_compare
from core.hotp import check_token, generate_hotp
from core.totp import TimeLike, timecode, to_timestamp

logger = logging.getLogger(__name__)


def verify_totp(
    token: str,
    secret_bytes: bytes,
    config: OTPConfig = DEFAULT_CONFIG,
    for_time: Optional[TimeLike] = None,
) -> bool:
    """
    Check ``token`` against the code for the step containing ``for_time``.

    Raises:
        TypeError: If ``token`` is not a string.
    """
    return verify_with_drift(token, 0, secret_bytes, config, for_time)


def drift_timecodes(for_time: TimeLike, drift: int, interval: int = 30) -> List[int]:
    """
    Return every time-step counter touched by ``[t - drift, t + drift]``.

    Every second in the window is mapped to its step, so a drift that is not a
    multiple of ``interval`` still reaches the partial steps at either edge.
    A negative drift gives an empty window. Counters before the epoch are
    dropped.
    """
    t = to_timestamp(for_time)
    counters = {timecode(t + s, interval) for s in range(-drift, drift + 1)}
    return sorted(c for c in counters if c >= 0)


def _match_counter(
    token: str,
    counters: List[int],
    secret_bytes: bytes,
    config: OTPConfig,
) -> Optional[int]:
    for counter in counters:
        expected = generate_hotp(secret_bytes, counter, config.digits, config.algorithm)
        if constant_time_compare(token, expected):
            return counter
    return None


def verify_with_drift(
    token: str,
    drift: int,
    secret_bytes: bytes,
    config: OTPConfig = DEFAULT_CONFIG,
    for_time: Optional[TimeLike] = None,
) -> bool:
    """
    Accept ``token`` if it matches any step within ``drift`` seconds.

    Args:
        token:        Candidate code, as typed by the user.
        drift:        Allowed clock skew in seconds, either direction.
        secret_bytes: Raw secret bytes.
        config:       Digits, algorithm and interval.
        for_time:     Reference time (now if None).

    Raises:
        TypeError: If ``token`` is not a string.
    """
    if not check_token(token, config.digits):
        logger.debug("TOTP token rejected: shorter than %d digits", config.digits)
        return False
    counters = drift_timecodes(to_timestamp(for_time), drift, config.interval)
    return _match_counter(token, counters, secret_bytes, config) is not None


def verify_with_drift_and_prior(
    token: str,
    drift: int,
    prior: Optional[TimeLike],
    secret_bytes: bytes,
    config: OTPConfig = DEFAULT_CONFIG,
    for_time: Optional[TimeLike] = None,
) -> Optional[int]:
    """
    Drift-tolerant verification that refuses to accept a step twice.

    Args:
        token:        Candidate code.
        drift:        Allowed clock skew in seconds.
        prior:        Value returned by the last successful call for this
                      secret and consumer, or None on first use.
        secret_bytes: Raw secret bytes.
        config:       Digits, algorithm and interval.
        for_time:     Reference time (now if None).

    Returns:
        The Unix timestamp at which the matched step starts, to be stored as
        the next ``prior``; None when nothing newer than ``prior`` matches.
        A step starting at the epoch yields 0, so test the result against
        None rather than for truthiness.

    Raises:
        TypeError: If ``token`` is not a string.
    """
    if not check_token(token, config.digits):
        logger.debug("TOTP token rejected: shorter than %d digits", config.digits)
        return None
    counters = drift_timecodes(to_timestamp(for_time), drift, config.interval)
    if prior is not None:
        last = timecode(prior, config.interval)
        fresh = [c for c in counters if c > last]
        if len(fresh) < len(counters):
            logger.debug("Discarded %d step(s) at or before prior", len(counters) - len(fresh))
        counters = fresh
    matched = _match_counter(token, counters, secret_bytes, config)
    if matched is None:
        return None
    return matched * config.interval
