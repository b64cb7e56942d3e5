"""Credential resolution for the Heroku Platform API.

Credentials come from the first source that yields them:

1. the ``api.heroku.com`` machine entry of a netrc file (``NETRC_PATH`` or
   ``~/.netrc``; ``~/_netrc`` on Windows), as written by ``heroku login``
2. explicit configuration (YAML ``provider`` section, ``HEROKU_EMAIL`` /
   ``HEROKU_API_KEY`` environment variables)

A missing netrc file is not an error. A netrc file that cannot be read or
parsed is logged and skipped.
"""

from __future__ import annotations

import logging
import netrc
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, SecretStr

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

API_HOSTNAME = "api.heroku.com"
NETRC_PATH_ENV = "NETRC_PATH"


class CredentialError(Exception):
    """Raised when no usable credentials can be found."""


class CredentialFileError(CredentialError):
    """Raised when a credentials file exists but cannot be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Error reading credentials file {path}: {reason}")
        self.path = path


class Credentials(BaseModel):
    """Connection context for the Heroku API.

    Attributes:
        email: Account identity. ``None`` when only a token is known, in which
            case the client authenticates with a bearer token.
        api_key: API token.
        headers: Extra HTTP headers sent with every request.
    """

    model_config = ConfigDict(frozen=True)

    email: str | None = None
    api_key: SecretStr
    headers: dict[str, str] = Field(default_factory=dict)


def default_netrc_path(env: Mapping[str, str] | None = None) -> Path:
    """Return the netrc path from ``NETRC_PATH`` or the platform default."""
    env = os.environ if env is None else env
    override = env.get(NETRC_PATH_ENV)
    if override:
        return Path(override).expanduser()
    filename = "_netrc" if sys.platform == "win32" else ".netrc"
    return Path.home() / filename


def read_netrc_login(path: Path, host: str = API_HOSTNAME) -> tuple[str, str] | None:
    """Return ``(login, password)`` for *host* from the netrc file at *path*.

    Returns ``None`` if the file does not exist, is a directory, or has no
    entry for *host*.

    Raises:
        CredentialFileError: The file exists but cannot be read or parsed.
    """
    try:
        if not path.exists() or path.is_dir():
            return None
        parsed = netrc.netrc(str(path))
    except netrc.NetrcParseError as exc:
        raise CredentialFileError(path, str(exc)) from exc
    except OSError as exc:
        raise CredentialFileError(path, exc.strerror or str(exc)) from exc

    entry = parsed.authenticators(host)
    if entry is None:
        return None
    login, _account, password = entry
    if not password:
        return None
    return login, password


def resolve_credentials(
    *,
    email: str | None = None,
    api_key: str | None = None,
    headers: Mapping[str, str] | None = None,
    netrc_path: Path | None = None,
) -> Credentials:
    """Resolve credentials from netrc, falling back to explicit values.

    Args:
        email: Explicitly configured account email.
        api_key: Explicitly configured API key.
        headers: Extra headers to attach to the connection context.
        netrc_path: netrc file to read; defaults to :func:`default_netrc_path`.

    Raises:
        CredentialError: Neither source provided an API key.
    """
    extra_headers = dict(headers or {})
    path = netrc_path if netrc_path is not None else default_netrc_path()

    try:
        found = read_netrc_login(path)
    except CredentialFileError as exc:
        logger.warning("%s; falling back to configured credentials", exc)
        found = None

    if found is not None:
        login, password = found
        logger.debug("Using credentials for %s from %s", API_HOSTNAME, path)
        return Credentials(email=login, api_key=SecretStr(password), headers=extra_headers)

    logger.debug("No netrc entry for %s in %s; using configured credentials", API_HOSTNAME, path)
    if not api_key:
        raise CredentialError(
            f"No Heroku credentials found: add a '{API_HOSTNAME}' entry to {path} "
            "(run `heroku login`) or set HEROKU_API_KEY"
        )
    return Credentials(email=email or None, api_key=SecretStr(api_key), headers=extra_headers)
