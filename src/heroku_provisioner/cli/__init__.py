"""CLI application for heroku-provisioner."""

from __future__ import annotations

import logging
import os
import sys

import typer

from heroku_provisioner import __version__

app = typer.Typer(
    name="heroku-provisioner",
    no_args_is_help=True,
    add_completion=False,
)

LOG_ENV_VAR = "HEROKU_LOG"
_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"heroku-provisioner {__version__}")
        raise typer.Exit


def _log_level(verbose: int) -> int | None:
    """Pick the package log level from ``HEROKU_LOG`` or the ``-v`` count."""
    env_level = os.environ.get(LOG_ENV_VAR, "").strip().upper()
    if env_level:
        if env_level not in _VALID_LEVELS:
            print(
                f"WARNING: invalid {LOG_ENV_VAR} level '{env_level}', "
                f"expected one of {', '.join(_VALID_LEVELS)}; defaulting to INFO",
                file=sys.stderr,
            )
            return logging.INFO
        return getattr(logging, env_level)
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return None


def _configure_logging(verbose: int) -> None:
    level = _log_level(verbose)
    if level is None:
        return
    logging.basicConfig(level=logging.WARNING, format=_LOG_FORMAT, stream=sys.stderr, force=True)
    logging.getLogger("heroku_provisioner").setLevel(level)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase log verbosity (-v info, -vv debug including HTTP traffic).",
    ),
) -> None:
    """Terraform-style infrastructure-as-code for Heroku."""
    _ = version
    _configure_logging(verbose)
    ctx.obj = {"verbose": verbose}


# Commands register themselves on ``app``.
from heroku_provisioner.cli import commands as _commands  # noqa: E402, F401
