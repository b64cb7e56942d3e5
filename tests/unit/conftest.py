"""Shared fixtures for unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from heroku_provisioner.config import load
from heroku_provisioner.core import HerokuProvider
from heroku_provisioner.engine.handlers import EngineContext

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from heroku_provisioner.config.schema import Config

_HEROKU_ENV_VARS = (
    "HEROKU_EMAIL",
    "HEROKU_API_KEY",
    "HEROKU_HEADERS",
    "HEROKU_API_URL",
    "HEROKU_URL",
    "HEROKU_DEBUG_HTTP",
    "HEROKU_LOG",
    "NETRC_PATH",
)


@pytest.fixture(autouse=True)
def _clean_heroku_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove HEROKU_* env vars so unit tests don't leak account config."""
    for var in _HEROKU_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def mock_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def ctx(mock_client: MagicMock) -> EngineContext:
    return EngineContext(provider=HerokuProvider.from_client(mock_client))


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    """Factory fixture: write YAML + optional .env, return loaded Config."""

    def _make(yaml_str: str, *, dotenv: str | None = None) -> Config:
        (tmp_path / "config.yaml").write_text(yaml_str)
        if dotenv is not None:
            (tmp_path / ".env").write_text(dotenv)
        return load(tmp_path / "config.yaml")

    return _make
