"""Turn exceptions into one clean stderr message and exit code 1."""

from __future__ import annotations

import typer

from heroku_provisioner.config.loader import ConfigError
from heroku_provisioner.core.credentials import CredentialError
from heroku_provisioner.core.ids import InvalidIdentifierError
from heroku_provisioner.core.state import StateFileError
from heroku_provisioner.engine.errors import (
    ApplyCanceled,
    ApplyError,
    RemoteAPIError,
    StalePlanError,
    StateLockError,
    UnsupportedChangeError,
    ValidationError,
)

# First match wins.
_PREFIXES: tuple[tuple[type[Exception], str], ...] = (
    (ConfigError, "Configuration error"),
    (CredentialError, "Credentials error"),
    (StalePlanError, "Plan is stale"),
    (StateLockError, "State locked"),
    (StateFileError, "Unreadable state"),
    (ApplyError, "Apply failed"),
    (RemoteAPIError, "Heroku API error"),
    (UnsupportedChangeError, "Unsupported change"),
    (InvalidIdentifierError, "Invalid identifier"),
)


def _partial_result(exc: ApplyError) -> str | None:
    s = exc.result.summary()
    done = [
        f"{s[action]} {verb}"
        for action, verb in (("create", "added"), ("update", "changed"), ("delete", "destroyed"))
        if s[action]
    ]
    return f"  Partial result: {', '.join(done)}." if done else None


def _messages(exc: Exception) -> list[str]:
    if isinstance(exc, ValidationError):
        return ["Validation failed:", *(f"  - {e}" for e in exc.errors)]
    if isinstance(exc, ApplyCanceled):
        return ["Apply canceled."]
    prefix = next((p for cls, p in _PREFIXES if isinstance(exc, cls)), "Error")
    lines = [f"{prefix}: {exc}"]
    if isinstance(exc, ApplyError) and (partial := _partial_result(exc)):
        lines.append(partial)
    return lines


def handle_error(exc: Exception, *, color: bool = True) -> int:
    """Print *exc* to stderr without a traceback; always returns 1."""
    fg = typer.colors.RED if color else None
    for line in _messages(exc):
        typer.echo(typer.style(line, fg=fg), err=True)
    return 1
