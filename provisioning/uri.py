"""
Build and parse otpauth:// URIs as defined by the Google Authenticator Key URI Format.

Reference: https://github.com/google/google-authenticator/wiki/Key-Uri-Format
"""

import urllib.parse
from dataclasses import dataclass
from typing import Optional

from core.config import DEFAULT_CONFIG, DEFAULT_DIGITS, DEFAULT_INTERVAL, OTPConfig
from core.crypto import Algorithm
from core.utils import normalize_secret

URI_DIGITS = (6, 7, 8)


@dataclass
class OTPAuthURI:
    """Parsed representation of an otpauth:// URI."""

    otp_type: str           # "totp" or "hotp"
    secret: str             # base32 secret as it appeared in the URI
    account_name: str
    issuer: Optional[str]
    config: OTPConfig
    counter: Optional[int]  # HOTP only


def _escape(text: str) -> str:
    return urllib.parse.quote(text, safe="")


def build_otpauth_uri(
    secret: str,
    account_name: str,
    config: OTPConfig = DEFAULT_CONFIG,
    issuer: Optional[str] = None,
    counter: Optional[int] = None,
) -> str:
    """
    Build an otpauth:// URI for provisioning an authenticator app.

    Only non-default settings are written: ``algorithm`` when not SHA1,
    ``digits`` when not 6, ``period`` when not 30.

    Args:
        secret:       Base32 secret, written verbatim.
        account_name: Account label, e.g. ``alice@example.com``.
        config:       Digits, algorithm and interval.
        issuer:       Provider name; also prefixes the label as ``issuer:``.
        counter:      Initial HOTP counter. When given the URI is of type
                      ``hotp`` and carries no period.

    Returns:
        The provisioning URI.
    """
    otp_type = "totp" if counter is None else "hotp"

    label = _escape(account_name)
    params: dict = {}
    if issuer is not None:
        label = f"{_escape(issuer)}:{label}"
        params["issuer"] = issuer
    if config.algorithm != Algorithm.SHA1:
        params["algorithm"] = config.algorithm.value
    if config.digits != DEFAULT_DIGITS:
        params["digits"] = str(config.digits)
    if counter is not None:
        params["counter"] = str(counter)
    elif config.interval != DEFAULT_INTERVAL:
        params["period"] = str(config.interval)

    query = f"secret={secret}"
    if params:
        query += "&" + urllib.parse.urlencode(params, quote_via=urllib.parse.quote)
    return f"otpauth://{otp_type}/{label}?{query}"


def parse_otpauth_uri(uri: str) -> OTPAuthURI:
    """
    Parse and validate an ``otpauth://`` URI.

    Args:
        uri: Full otpauth URI string.

    Returns:
        Populated :class:`OTPAuthURI` dataclass.

    Raises:
        ValueError: If the URI is malformed or contains invalid values.
    """
    uri = uri.strip()

    parsed = urllib.parse.urlparse(uri)

    if parsed.scheme.lower() != "otpauth":
        raise ValueError(f"Expected 'otpauth' scheme, got '{parsed.scheme}'.")

    otp_type = parsed.netloc.lower()
    if otp_type not in ("totp", "hotp"):
        raise ValueError(f"Unknown OTP type '{otp_type}'. Expected totp or hotp.")

    # Label is the path component (strip leading slash)
    raw_label = parsed.path.lstrip("/")
    if not raw_label:
        raise ValueError("Missing label in otpauth URI.")

    # Extract issuer and account from label  "Issuer:AccountName". A literal
    # colon is the separator; escaped colons belong to the issuer. Labels
    # without one may still use "%3A" as the separator.
    if ":" in raw_label:
        parts = [urllib.parse.unquote(p) for p in raw_label.split(":", 1)]
    else:
        parts = urllib.parse.unquote(raw_label).split(":", 1)

    label_issuer: Optional[str] = None
    if len(parts) == 2:
        label_issuer, account_name = parts
        # Key URI format allows spaces after the colon
        account_name = account_name.lstrip()
    else:
        account_name = parts[0]

    params = dict(urllib.parse.parse_qsl(parsed.query))

    secret = params.get("secret", "")
    if not secret:
        raise ValueError("Missing 'secret' parameter in otpauth URI.")
    normalize_secret(secret)  # raises on characters outside the base32 alphabet

    issuer = params.get("issuer", label_issuer)
    if label_issuer and issuer.strip() != label_issuer.strip():
        raise ValueError("Issuer in label and 'issuer' parameter must be equal.")

    algorithm = Algorithm.coerce(params.get("algorithm", Algorithm.SHA1.value))

    try:
        digits = int(params.get("digits", DEFAULT_DIGITS))
    except ValueError:
        raise ValueError("'digits' must be an integer.")
    if digits not in URI_DIGITS:
        raise ValueError("'digits' may only be 6, 7 or 8.")

    interval = DEFAULT_INTERVAL
    counter: Optional[int] = None

    if otp_type == "totp":
        try:
            interval = int(params.get("period", DEFAULT_INTERVAL))
        except ValueError:
            raise ValueError("'period' must be an integer.")
    else:
        raw_counter = params.get("counter")
        if raw_counter is None:
            raise ValueError("HOTP URI requires a 'counter' parameter.")
        try:
            counter = int(raw_counter)
        except ValueError:
            raise ValueError("'counter' must be an integer.")
        if counter < 0:
            raise ValueError("'counter' must be non-negative.")

    return OTPAuthURI(
        otp_type=otp_type,
        secret=secret,
        account_name=account_name,
        issuer=issuer,
        config=OTPConfig(digits=digits, algorithm=algorithm, interval=interval),
        counter=counter,
    )
