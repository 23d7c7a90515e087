"""
Generator configuration and the code value type.
"""

from dataclasses import dataclass

from core.crypto import Algorithm
from core.utils import validate_digits, validate_interval


DEFAULT_DIGITS = 6
DEFAULT_INTERVAL = 30


@dataclass(frozen=True)
class OTPConfig:
    """
    Immutable settings shared by generation and verification.

    Attributes:
        digits:    Length of the rendered code.
        algorithm: HMAC algorithm; names like ``"sha256"`` are accepted.
        interval:  TOTP time step in seconds (ignored for HOTP).

    Raises:
        ValueError: On a non-positive ``digits`` or ``interval`` or an unknown
            algorithm.
    """

    digits: int = DEFAULT_DIGITS
    algorithm: Algorithm = Algorithm.SHA1
    interval: int = DEFAULT_INTERVAL

    def __post_init__(self) -> None:
        validate_digits(self.digits)
        validate_interval(self.interval)
        # frozen: bypass __setattr__ to normalise the algorithm once
        object.__setattr__(self, "algorithm", Algorithm.coerce(self.algorithm))


DEFAULT_CONFIG = OTPConfig()


@dataclass(frozen=True)
class Code:
    """
    A generated one-time password.

    ``value`` is the canonical magnitude in ``[0, 10**digits)``; the padded
    string and the plain integer are both renderings of it.
    """

    value: int
    digits: int

    def __str__(self) -> str:
        return str(self.value).zfill(self.digits)

    def __int__(self) -> int:
        return self.value
