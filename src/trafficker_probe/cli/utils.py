"""Output helpers shared by the CLI commands."""

import sys
from typing import NoReturn

import click


def error_exit(message: str, code: int = 1) -> NoReturn:
    """Print `message` in red on stderr and exit with `code`."""
    click.echo(click.style(message, fg="red"), err=True)
    sys.exit(code)


def echo_pass(message: str) -> None:
    click.echo(click.style(f"PASS: {message}", fg="green"))


def echo_fail(message: str) -> None:
    click.echo(click.style(f"FAIL: {message}", fg="red"), err=True)
