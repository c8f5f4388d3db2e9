"""
CLI command for probing a WebSocket echo endpoint.
"""
import asyncio
import sys
from typing import Optional

import click

from ...config import ProbeSettings
from ...exceptions import ProbeError
from ...stream import StreamEchoProbe
from ..utils import echo_pass, error_exit


@click.command("echo")
@click.option(
    "--url",
    "-u",
    default=None,
    help="WebSocket endpoint (default: $PROBE_WS_URL or ws://127.0.0.1:8080/ws)",
)
@click.option(
    "--verify",
    "payload",
    default=None,
    help="Send PAYLOAD once and require the identical payload back",
)
@click.option(
    "--max-messages",
    "-n",
    default=None,
    type=click.IntRange(min=1),
    help="Stop after echoing this many inbound messages",
)
@click.pass_obj
def echo(
    settings: ProbeSettings,
    url: Optional[str],
    payload: Optional[str],
    max_messages: Optional[int],
):
    """
    Connect to a WebSocket endpoint and bounce every message back.

    \b
    Examples:
        # Echo server pushes until it closes the connection
        trafficker-probe echo

        # One round trip against an echo server
        trafficker-probe echo --verify ping --url ws://localhost:9000/ws
    """
    try:
        asyncio.run(_echo_async(settings, url, payload, max_messages))
    except KeyboardInterrupt:
        click.echo("\n\nProbe cancelled by user.")
        sys.exit(1)
    except ProbeError as e:
        error_exit(f"Error: {e}")


async def _echo_async(
    settings: ProbeSettings,
    url: Optional[str],
    payload: Optional[str],
    max_messages: Optional[int],
):
    probe = StreamEchoProbe(settings)
    await probe.connect(url)
    try:
        if payload is not None:
            echoed = await probe.verify_round_trip(payload)
            echo_pass(f"received {echoed!r} back from {probe.session.address}")

        if payload is None or max_messages is not None:
            count = await probe.run(max_messages)
            click.echo(f"Echoed {count} message(s); session {probe.session.state.value}")
    finally:
        await probe.close()
