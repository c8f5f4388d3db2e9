import click

from .. import __version__
from ..common.logging_config import setup_colored_logging
from ..config import ProbeSettings, parse_timeout_ms
from .commands.echo_cmd import echo
from .commands.request_cmd import request


@click.group(context_settings=dict(help_option_names=['-h', '--help']))
@click.version_option(
    __version__, "-v", "--version", help="Show the probe version and exit."
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level (default: $PROBE_LOG_LEVEL or INFO)",
)
@click.option(
    "--timeout-ms",
    default=None,
    help="Handshake/response timeout in milliseconds, 'none' to wait forever "
    "(default: $PROBE_TIMEOUT_MS or 30000)",
)
@click.pass_context
def cli(ctx: click.Context, log_level, timeout_ms):
    """Conformance probes for a WebSocket echo endpoint and a JSON HTTP endpoint."""
    try:
        settings = ProbeSettings.from_env()
    except ValueError as e:
        raise click.UsageError(str(e))

    if log_level:
        settings.log_level = log_level.upper()
    if timeout_ms is not None:
        try:
            settings.timeout_ms = parse_timeout_ms(timeout_ms, "--timeout-ms")
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--timeout-ms")

    setup_colored_logging(level=settings.log_level)
    ctx.obj = settings


cli.add_command(echo)
cli.add_command(request)


def main():
    cli()


if __name__ == "__main__":
    main()
