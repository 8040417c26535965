"""
Command-line interface for the WEBSERVICES client.
"""

from __future__ import annotations

import json
import logging

import click

from wwsvc.client.client import WebwareClient
from wwsvc.common.config import Config
from wwsvc.common.crypto import http_date, sign
from wwsvc.common.exceptions import WebwareError
from wwsvc.common.logging_utils import setup_logger
from wwsvc.common.models import ClientConfig
from wwsvc.common.params import Parameters

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_params(values: tuple[str, ...]) -> Parameters:
    params = Parameters()
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            msg = f"Parameter must look like KEY=VALUE, got {item!r}"
            raise click.BadParameter(msg, param_hint="--param")
        params.param(key, value)
    return params


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Log level (default: from WWSVC_LOG_LEVEL env or INFO)",
)
def cli(log_level: str | None) -> None:
    """WEBSERVICES client CLI"""
    setup_logger("wwsvc", log_level or Config().LOG_LEVEL)


@cli.command("sign")
@click.option("--secret", required=True, help="Application secret")
@click.option("--ticket", default=None, help="Service pass, omitted before REGISTER")
@click.option(
    "--timestamp",
    default=None,
    help="IMF-fixdate to sign (default: now)",
)
def sign_request(secret: str, ticket: str | None, timestamp: str | None) -> None:
    """Print the request hash for a secret, service pass and timestamp"""
    timestamp = timestamp or http_date()
    click.echo(f"WWSVC-TS: {timestamp}")
    click.echo(f"WWSVC-HASH: {sign(secret, ticket, timestamp)}")


@cli.command()
@click.argument("function")
@click.option(
    "-p",
    "--param",
    "params",
    multiple=True,
    help="Function parameter as KEY=VALUE, may be repeated",
)
@click.option("--method", default=Config().DEFAULT_METHOD, show_default=True, help="HTTP method")
@click.option("--revision", default=1, show_default=True, type=int, help="Function revision")
@click.option("--url", default=None, help="WEBWARE base URL (default: WWSVC_URL env)")
@click.option("--vendor-hash", default=None, help="Vendor hash (default: WWSVC_VENDOR_HASH env)")
@click.option("--app-hash", default=None, help="Application hash (default: WWSVC_APP_HASH env)")
@click.option("--secret", default=None, help="Application secret (default: WWSVC_SECRET env)")
@click.option(
    "--app-revision",
    default=None,
    type=int,
    help="Application revision (default: WWSVC_REVISION env)",
)
@click.option("--insecure", is_flag=True, help="Skip TLS certificate verification")
def call(
    function: str,
    params: tuple[str, ...],
    method: str,
    revision: int,
    url: str | None,
    vendor_hash: str | None,
    app_hash: str | None,
    secret: str | None,
    app_revision: int | None,
    insecure: bool,  # noqa: FBT001
) -> None:
    """Register, call FUNCTION, print the JSON result and deregister"""
    parameters = _parse_params(params)
    try:
        config = ClientConfig.from_env(
            base_url=url,
            vendor_hash=vendor_hash,
            app_hash=app_hash,
            secret=secret,
            revision=app_revision,
            tls_mode="insecure" if insecure else None,
        )
        with WebwareClient(config) as client, client.registered():
            result = client.request(method, function, revision, parameters)
    except WebwareError as e:
        raise click.ClickException(str(e)) from e

    click.echo(json.dumps(result, indent=2, ensure_ascii=False))
    logging.getLogger(__name__).debug("Call to %s finished", function)


if __name__ == "__main__":
    cli()
