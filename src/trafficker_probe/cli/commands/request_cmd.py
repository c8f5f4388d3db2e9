"""
CLI command for probing a JSON request/response endpoint.
"""
import asyncio
import json
import sys
from typing import Any, Optional

import click

from ...config import ProbeSettings
from ...exceptions import InvalidRequestError
from ...request import RequestProbe
from ..utils import echo_fail, error_exit

DEFAULT_BODY = '{"hello": "dsad"}'


def _parse_body(ctx: click.Context, param: click.Parameter, value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}")


@click.command("request")
@click.option(
    "--url",
    "-u",
    default=None,
    help="HTTP endpoint (default: $PROBE_HTTP_URL or http://localhost:8080/api/probe)",
)
@click.option(
    "--body",
    "-b",
    default=DEFAULT_BODY,
    show_default=True,
    callback=_parse_body,
    help="JSON request body",
)
@click.pass_obj
def request(settings: ProbeSettings, url: Optional[str], body: Any):
    """
    POST a JSON body once and report the response and elapsed time.

    Exits with status 1 if the endpoint answers with a non-2xx status, the
    body is not JSON, or no response arrives.
    """
    try:
        outcome = asyncio.run(RequestProbe(settings).send(body, url))
    except KeyboardInterrupt:
        click.echo("\n\nProbe cancelled by user.")
        sys.exit(1)
    except InvalidRequestError as e:
        error_exit(f"Error: {e}")

    if outcome.success:
        click.echo(json.dumps(outcome.response_body, indent=2))
    else:
        echo_fail(f"{outcome.error_kind}: {outcome.error}")
    click.echo(f"Request took {outcome.elapsed_ms:.2f} ms")

    if not outcome.success:
        sys.exit(1)
