"""
Keyed-hash primitives for otpkit.

HMAC      : SHA-1 / SHA-256 / SHA-512 over an 8-byte big-endian counter
Comparison: constant-time string equality
"""

import hashlib
import hmac
import struct
from enum import Enum
from typing import Union


class Algorithm(str, Enum):
    """Supported HMAC algorithms."""

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @classmethod
    def coerce(cls, value: Union["Algorithm", str]) -> "Algorithm":
        """Accept an :class:`Algorithm` or a name such as ``"sha256"``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper().replace("-", ""))
        except ValueError:
            raise ValueError(
                f"Unsupported algorithm '{value}'. Supported: SHA1, SHA256, SHA512."
            )


_ALG_MAP: dict[Algorithm, str] = {
    Algorithm.SHA1: "sha1",
    Algorithm.SHA256: "sha256",
    Algorithm.SHA512: "sha512",
}

# ── Constants ────────────────────────────────────────────────────────────────

COUNTER_SIZE = 8            # RFC 4226 §5.2: 8-byte moving factor
MAX_COUNTER = 2**64 - 1

DIGEST_SIZES: dict[Algorithm, int] = {
    alg: hashlib.new(name).digest_size for alg, name in _ALG_MAP.items()
}


# ── Counter encoding ─────────────────────────────────────────────────────────

def counter_to_bytes(counter: int) -> bytes:
    """
    Encode ``counter`` as 8 unsigned big-endian bytes.

    Raises:
        ValueError: If the counter does not fit in an unsigned 64-bit integer.
    """
    if counter < 0 or counter > MAX_COUNTER:
        raise ValueError(f"Counter must be in [0, 2**64), got {counter}")
    return struct.pack(">Q", counter)


# ── HMAC ─────────────────────────────────────────────────────────────────────

def hmac_digest(
    secret_bytes: bytes,
    counter: int,
    algorithm: Algorithm = Algorithm.SHA1,
) -> bytes:
    """
    Compute HMAC(secret, counter) with the selected hash.

    An empty secret is accepted; rejecting weak secrets is left to whoever
    manages them.

    Args:
        secret_bytes: Raw decoded secret, used as the HMAC key.
        counter:      Moving factor (HOTP counter or TOTP time step).
        algorithm:    HMAC algorithm.

    Returns:
        Digest of 20, 32 or 64 bytes for SHA1, SHA256 or SHA512.
    """
    alg_name = _ALG_MAP[Algorithm.coerce(algorithm)]
    return hmac.new(secret_bytes, counter_to_bytes(counter), alg_name).digest()


def constant_time_compare(a: str, b: str) -> bool:
    """Return True if *a* == *b* in constant time (timing-safe)."""
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))
