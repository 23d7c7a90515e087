"""Tests for provisioning.uri (build and parse)."""

import urllib.parse

import pytest

from core.config import OTPConfig
from core.crypto import Algorithm
from provisioning.uri import build_otpauth_uri, parse_otpauth_uri

SECRET = "JBSWY3DPEHPK3PXP"


def query_of(uri: str) -> dict:
    return urllib.parse.parse_qs(urllib.parse.urlparse(uri).query)


# ── Builder ───────────────────────────────────────────────────────────────────

def test_build_without_issuer() -> None:
    uri = build_otpauth_uri(SECRET, "mark@percival")
    assert uri == "otpauth://totp/mark%40percival?secret=JBSWY3DPEHPK3PXP"


def test_build_default_digits_omitted() -> None:
    assert "digits" not in query_of(build_otpauth_uri(SECRET, "mark@percival"))


def test_build_non_default_digits() -> None:
    uri = build_otpauth_uri(SECRET, "mark@percival", OTPConfig(digits=8))
    assert query_of(uri)["digits"] == ["8"]


def test_build_with_issuer() -> None:
    uri = build_otpauth_uri(SECRET, "mark@percival", issuer="FooCo")
    assert uri.startswith("otpauth://totp/FooCo:")
    params = query_of(uri)
    assert params["secret"] == [SECRET]
    assert params["issuer"] == ["FooCo"]


def test_build_custom_interval() -> None:
    uri = build_otpauth_uri(SECRET, "mark@percival", OTPConfig(interval=60))
    assert query_of(uri)["period"] == ["60"]


def test_build_default_interval_omitted() -> None:
    assert "period" not in query_of(build_otpauth_uri(SECRET, "mark@percival"))


def test_build_custom_digest() -> None:
    uri = build_otpauth_uri(SECRET, "mark@percival", OTPConfig(algorithm="sha256"))
    assert query_of(uri)["algorithm"] == ["SHA256"]


def test_build_default_digest_omitted() -> None:
    assert "algorithm" not in query_of(build_otpauth_uri(SECRET, "mark@percival"))


def test_build_parameter_order() -> None:
    config = OTPConfig(digits=8, algorithm=Algorithm.SHA512, interval=60)
    uri = build_otpauth_uri(SECRET, "alice", config, issuer="Acme")
    assert uri == (
        "otpauth://totp/Acme:alice?secret=JBSWY3DPEHPK3PXP"
        "&issuer=Acme&algorithm=SHA512&digits=8&period=60"
    )


def test_build_escapes_label_and_issuer() -> None:
    uri = build_otpauth_uri(SECRET, "alice smith", issuer="Big Co/Ltd")
    assert uri == (
        "otpauth://totp/Big%20Co%2FLtd:alice%20smith"
        "?secret=JBSWY3DPEHPK3PXP&issuer=Big%20Co%2FLtd"
    )


def test_build_secret_verbatim() -> None:
    uri = build_otpauth_uri("jbswy3dpehpk3pxp", "alice")
    assert "secret=jbswy3dpehpk3pxp" in uri


def test_build_hotp_uri() -> None:
    uri = build_otpauth_uri(SECRET, "bob", OTPConfig(interval=60), counter=10)
    assert uri.startswith("otpauth://hotp/")
    params = query_of(uri)
    assert params["counter"] == ["10"]
    assert "period" not in params


def test_build_roundtrip() -> None:
    config = OTPConfig(digits=8, algorithm=Algorithm.SHA256, interval=60)
    uri = build_otpauth_uri(SECRET, "alice@example.com", config, issuer="Example")
    parsed = parse_otpauth_uri(uri)
    assert parsed.account_name == "alice@example.com"
    assert parsed.issuer == "Example"
    assert parsed.secret == SECRET
    assert parsed.config == config


@pytest.mark.parametrize("issuer", ["A:B", "Foo ", " Big Co/Ltd", "50%"])
def test_build_roundtrip_awkward_issuer(issuer: str) -> None:
    parsed = parse_otpauth_uri(build_otpauth_uri(SECRET, "alice", issuer=issuer))
    assert parsed.issuer == issuer
    assert parsed.account_name == "alice"


def test_build_roundtrip_colon_in_account() -> None:
    parsed = parse_otpauth_uri(build_otpauth_uri(SECRET, "a:b", issuer="Acme"))
    assert parsed.issuer == "Acme"
    assert parsed.account_name == "a:b"


def test_parse_space_after_label_colon() -> None:
    parsed = parse_otpauth_uri("otpauth://totp/Example:%20alice?secret=JBSWY3DPEHPK3PXP")
    assert parsed.issuer == "Example"
    assert parsed.account_name == "alice"


# ── Valid TOTP URIs ───────────────────────────────────────────────────────────

def test_parse_basic_totp() -> None:
    uri = "otpauth://totp/Example%3Aalice%40example.com?secret=JBSWY3DPEHPK3PXP&issuer=Example"
    result = parse_otpauth_uri(uri)
    assert result.otp_type == "totp"
    assert result.account_name == "alice@example.com"
    assert result.issuer == "Example"
    assert result.secret == SECRET
    assert result.config == OTPConfig()
    assert result.counter is None


def test_parse_totp_with_sha256() -> None:
    uri = (
        "otpauth://totp/Issuer%3Auser?secret=JBSWY3DPEHPK3PXP"
        "&algorithm=SHA256&digits=8&period=60"
    )
    result = parse_otpauth_uri(uri)
    assert result.config.algorithm == Algorithm.SHA256
    assert result.config.digits == 8
    assert result.config.interval == 60


def test_parse_totp_no_issuer() -> None:
    result = parse_otpauth_uri("otpauth://totp/myaccount?secret=JBSWY3DPEHPK3PXP")
    assert result.account_name == "myaccount"
    assert result.issuer is None


def test_parse_totp_issuer_from_label() -> None:
    result = parse_otpauth_uri("otpauth://totp/GitHub:john?secret=JBSWY3DPEHPK3PXP")
    assert result.issuer == "GitHub"
    assert result.account_name == "john"


# ── Valid HOTP URIs ───────────────────────────────────────────────────────────

def test_parse_hotp() -> None:
    result = parse_otpauth_uri("otpauth://hotp/Example%3Aeve?secret=JBSWY3DPEHPK3PXP&counter=5")
    assert result.otp_type == "hotp"
    assert result.counter == 5


# ── Error cases ───────────────────────────────────────────────────────────────

def test_parse_wrong_scheme() -> None:
    with pytest.raises(ValueError, match="scheme"):
        parse_otpauth_uri("http://totp/acc?secret=ABC")


def test_parse_unknown_type() -> None:
    with pytest.raises(ValueError, match="OTP type"):
        parse_otpauth_uri("otpauth://steam/acc?secret=JBSWY3DPEHPK3PXP")


def test_parse_missing_secret() -> None:
    with pytest.raises(ValueError, match="secret"):
        parse_otpauth_uri("otpauth://totp/acc")


def test_parse_invalid_secret() -> None:
    with pytest.raises(ValueError, match="base32"):
        parse_otpauth_uri("otpauth://totp/acc?secret=NOT-BASE32!")


def test_parse_invalid_algorithm() -> None:
    with pytest.raises(ValueError, match="algorithm"):
        parse_otpauth_uri("otpauth://totp/acc?secret=JBSWY3DPEHPK3PXP&algorithm=MD5")


def test_parse_invalid_digits() -> None:
    with pytest.raises(ValueError):
        parse_otpauth_uri("otpauth://totp/acc?secret=JBSWY3DPEHPK3PXP&digits=5")


def test_parse_invalid_period() -> None:
    with pytest.raises(ValueError):
        parse_otpauth_uri("otpauth://totp/acc?secret=JBSWY3DPEHPK3PXP&period=0")


def test_parse_mismatched_issuer() -> None:
    with pytest.raises(ValueError, match="Issuer"):
        parse_otpauth_uri("otpauth://totp/GitHub:john?secret=JBSWY3DPEHPK3PXP&issuer=GitLab")


def test_parse_hotp_missing_counter() -> None:
    with pytest.raises(ValueError, match="counter"):
        parse_otpauth_uri("otpauth://hotp/acc?secret=JBSWY3DPEHPK3PXP")
