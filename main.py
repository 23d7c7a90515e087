"""
otpkit – command-line entry point.

Usage
-----
    python main.py now --secret JBSWY3DPEHPK3PXP

Or, if installed as a package:
    otpkit now --secret JBSWY3DPEHPK3PXP
"""

import logging
import sys
from typing import Optional

import click
from rich.console import Console

from core.config import OTPConfig
from core.crypto import Algorithm
from core.hotp import generate_hotp
from core.totp import generate_totp, remaining_seconds
from core.utils import decode_secret, format_otp, random_secret
from core.verify import verify_with_drift, verify_with_drift_and_prior
from provisioning.uri import build_otpauth_uri

logger = logging.getLogger("otpkit")
console = Console(highlight=False)


# ── Logging setup ─────────────────────────────────────────────────────────────

def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


# ── Shared options ────────────────────────────────────────────────────────────

def _secret_option(func):
    return click.option(
        "--secret",
        "-s",
        envvar="OTPKIT_SECRET",
        required=True,
        help="Base32 secret (or set OTPKIT_SECRET).",
    )(func)


def _config_options(func):
    func = click.option(
        "--interval", "-i", type=int, default=30, show_default=True,
        help="TOTP time step in seconds.",
    )(func)
    func = click.option(
        "--digest", "-d",
        type=click.Choice([a.value for a in Algorithm], case_sensitive=False),
        default=Algorithm.SHA1.value, show_default=True,
        help="HMAC algorithm.",
    )(func)
    func = click.option(
        "--digits", "-n", type=int, default=6, show_default=True,
        help="Number of digits in the code.",
    )(func)
    return func


def _decode(secret: str) -> bytes:
    try:
        return decode_secret(secret)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--secret")


def _config(digits: int, digest: str, interval: int) -> OTPConfig:
    try:
        return OTPConfig(digits=digits, algorithm=digest, interval=interval)
    except ValueError as exc:
        raise click.UsageError(str(exc))


# ── Commands ──────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """otpkit – HOTP / TOTP one-time passwords."""
    _configure_logging(verbose)


@cli.command()
@_secret_option
@_config_options
def now(secret: str, digits: int, digest: str, interval: int) -> None:
    """Print the current TOTP code."""
    config = _config(digits, digest, interval)
    code = generate_totp(_decode(secret), config)
    console.print(
        f"[bold]{format_otp(code)}[/bold]  "
        f"[dim]({remaining_seconds(config.interval)}s left)[/dim]"
    )


@cli.command()
@_secret_option
@_config_options
@click.option("--time", "-t", "for_time", type=float, required=True,
              help="Unix timestamp.")
def at(secret: str, digits: int, digest: str, interval: int, for_time: float) -> None:
    """Print the TOTP code at a given Unix timestamp."""
    config = _config(digits, digest, interval)
    console.print(generate_totp(_decode(secret), config, for_time))


@cli.command()
@_secret_option
@_config_options
@click.option("--counter", "-c", type=click.IntRange(min=0), required=True,
              help="HOTP counter.")
def hotp(secret: str, digits: int, digest: str, interval: int, counter: int) -> None:
    """Print the HOTP code for a counter."""
    config = _config(digits, digest, interval)
    console.print(generate_hotp(_decode(secret), counter, config.digits, config.algorithm))


@cli.command()
@click.argument("token")
@_secret_option
@_config_options
@click.option("--drift", type=int, default=0, show_default=True,
              help="Allowed clock skew in seconds.")
@click.option("--prior", type=int, default=None,
              help="Timestamp returned by the last accepted verification.")
@click.option("--replay-safe", is_flag=True,
              help="Print the accepted step timestamp for use as --prior.")
@click.option("--time", "-t", "for_time", type=float, default=None,
              help="Reference Unix timestamp (default: now).")
def verify(
    token: str,
    secret: str,
    digits: int,
    digest: str,
    interval: int,
    drift: int,
    prior: Optional[int],
    replay_safe: bool,
    for_time: Optional[float],
) -> None:
    """Verify TOKEN. Exits 0 when accepted, 1 when rejected."""
    config = _config(digits, digest, interval)
    secret_bytes = _decode(secret)

    if replay_safe or prior is not None:
        accepted = verify_with_drift_and_prior(
            token, drift, prior, secret_bytes, config, for_time
        )
        if accepted is None:
            console.print("[red]rejected[/red]")
            sys.exit(1)
        logger.debug("Store %d as --prior for the next verification", accepted)
        console.print(f"[green]accepted[/green] {accepted}")
        return

    if not verify_with_drift(token, drift, secret_bytes, config, for_time):
        console.print("[red]rejected[/red]")
        sys.exit(1)
    console.print("[green]accepted[/green]")


@cli.command()
@_secret_option
@_config_options
@click.option("--name", required=True, help="Account name, e.g. alice@example.com.")
@click.option("--issuer", default=None, help="Provider name.")
@click.option("--counter", type=click.IntRange(min=0), default=None,
              help="Initial counter; produces an HOTP URI.")
def uri(
    secret: str,
    digits: int,
    digest: str,
    interval: int,
    name: str,
    issuer: Optional[str],
    counter: Optional[int],
) -> None:
    """Print the otpauth:// provisioning URI."""
    config = _config(digits, digest, interval)
    _decode(secret)
    click.echo(build_otpauth_uri(secret, name, config, issuer=issuer, counter=counter))


@cli.command()
@click.option("--length", "-l", type=int, default=32, show_default=True,
              help="Number of base32 characters.")
def secret(length: int) -> None:
    """Print a new random base32 secret."""
    try:
        click.echo(random_secret(length))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--length")


# ── Main ──────────────────────────────────────────────────────────────────────

def main() -> None:
    cli()


if __name__ == "__main__":
    main()
