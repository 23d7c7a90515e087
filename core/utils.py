"""
Utility helpers for otpkit.

Secret encoding lives here, outside the OTP algorithm: the generators and
verifiers only ever see decoded bytes.
"""

import base64
import binascii
import re
import secrets


BASE32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
MIN_SECRET_LENGTH = 16  # 80 bits, the RFC 4226 minimum


# ── Base32 ────────────────────────────────────────────────────────────────────

def normalize_secret(secret: str) -> str:
    """
    Normalise a base32 secret: strip spaces, uppercase, add padding.

    Args:
        secret: Raw user-supplied secret string.

    Returns:
        Uppercase base32 string with correct padding.

    Raises:
        ValueError: If the string contains invalid base32 characters.
    """
    secret = secret.strip().upper().replace(" ", "").replace("-", "")
    secret = secret.rstrip("=")
    # Base32 alphabet: A-Z and 2-7
    if not re.fullmatch(r"[A-Z2-7]*", secret):
        raise ValueError("Secret contains invalid base32 characters.")
    # Pad to multiple of 8
    pad = (8 - len(secret) % 8) % 8
    return secret + "=" * pad


def decode_secret(secret: str) -> bytes:
    """
    Decode a base32-encoded secret string to raw bytes.

    Case-insensitive; padding is optional.

    Raises:
        ValueError: On invalid base32 input.
    """
    try:
        return base64.b32decode(normalize_secret(secret), casefold=True)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base32 secret: {exc}") from exc


def encode_secret(raw: bytes) -> str:
    """Encode raw bytes as a base32 string (no padding)."""
    return base64.b32encode(raw).decode("ascii").rstrip("=")


def random_secret(length: int = 32) -> str:
    """
    Return a random base32 secret of ``length`` characters.

    Raises:
        ValueError: If ``length`` is below :data:`MIN_SECRET_LENGTH`.
    """
    if length < MIN_SECRET_LENGTH:
        raise ValueError(
            f"Secrets should be at least {MIN_SECRET_LENGTH} characters (80 bits)."
        )
    return "".join(secrets.choice(BASE32_ALPHABET) for _ in range(length))


# ── Display ──────────────────────────────────────────────────────────────────

def format_otp(code: str, group: int = 3) -> str:
    """
    Format an OTP code with spaces for readability.

    Example::

        >>> format_otp("123456")
        "123 456"
    """
    return " ".join(code[i : i + group] for i in range(0, len(code), group))


# ── Validation ────────────────────────────────────────────────────────────────

def validate_digits(digits: int) -> None:
    if isinstance(digits, bool) or not isinstance(digits, int) or digits < 1:
        raise ValueError(f"Digits must be a positive integer, got {digits!r}.")


def validate_interval(interval: int) -> None:
    if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
        raise ValueError(f"Interval must be a positive number of seconds, got {interval!r}.")
