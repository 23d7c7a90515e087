"""
HOTP (HMAC-based One-Time Password) implementation following RFC 4226.
"""

import logging
from typing import Optional

from core.config import Code
from core.crypto import Algorithm, constant_time_compare, hmac_digest
from core.utils import validate_digits

logger = logging.getLogger(__name__)


def truncate(digest: bytes) -> int:
    """
    Dynamic truncation (RFC 4226 §5.3).

    Args:
        digest: HMAC output, at least 20 bytes.

    Returns:
        A 31-bit unsigned integer.
    """
    # Low nibble of the last byte selects the window; max 15, so offset + 3
    # stays inside a 20-byte SHA-1 digest.
    offset = digest[-1] & 0x0F
    # Four bytes big-endian, top bit of the first cleared: 0 <= result < 2**31.
    return (
        (digest[offset] & 0x7F) << 24
        | (digest[offset + 1] & 0xFF) << 16
        | (digest[offset + 2] & 0xFF) << 8
        | (digest[offset + 3] & 0xFF)
    )


def hotp_code(
    secret_bytes: bytes,
    counter: int,
    digits: int = 6,
    algorithm: Algorithm = Algorithm.SHA1,
) -> Code:
    """
    Return the HOTP :class:`Code` for ``counter``.

    Raises:
        ValueError: If ``digits`` is not a positive integer.
    """
    validate_digits(digits)
    digest = hmac_digest(secret_bytes, counter, algorithm)
    return Code(truncate(digest) % (10**digits), digits)


def generate_hotp(
    secret_bytes: bytes,
    counter: int,
    digits: int = 6,
    algorithm: Algorithm = Algorithm.SHA1,
) -> str:
    """
    Generate an HOTP code.

    Args:
        secret_bytes: Raw decoded secret bytes.
        counter:      Synchronisation counter value.
        digits:       Number of OTP digits.
        algorithm:    HMAC algorithm.

    Returns:
        Zero-padded OTP string of exactly ``digits`` characters.
    """
    return str(hotp_code(secret_bytes, counter, digits, algorithm))


def check_token(token: str, digits: int) -> bool:
    """
    Enforce the token input contract shared by every verifier.

    Returns False for strings that cannot possibly match (too short).

    Raises:
        TypeError: If ``token`` is not a string. Numeric tokens lose their
            leading zeros, so they are a caller bug rather than a wrong guess.
    """
    if not isinstance(token, str):
        raise TypeError(
            f"OTP token must be a string, got {type(token).__name__}"
        )
    return len(token) >= digits


def validate_hotp(
    token: str,
    secret_bytes: bytes,
    counter: int,
    digits: int = 6,
    algorithm: Algorithm = Algorithm.SHA1,
    look_ahead: int = 0,
) -> Optional[int]:
    """
    Validate an HOTP token and return the synchronised counter value.

    Args:
        token:        Token to validate.
        secret_bytes: Raw secret bytes.
        counter:      Current counter.
        digits:       Expected OTP length.
        algorithm:    HMAC algorithm.
        look_ahead:   Max steps to search ahead for resync.

    Returns:
        The next counter to use if valid, or None if invalid.

    Raises:
        TypeError: If ``token`` is not a string.
    """
    if not check_token(token, digits):
        logger.debug("HOTP token rejected: shorter than %d digits", digits)
        return None
    for i in range(look_ahead + 1):
        expected = generate_hotp(secret_bytes, counter + i, digits, algorithm)
        if constant_time_compare(token, expected):
            return counter + i + 1
    return None
