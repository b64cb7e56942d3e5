"""Shared fixtures for e2e tests against the live Heroku Platform API.

These tests create and delete real apps and pipelines. They only run with
``HEROKU_E2E=1`` and usable credentials in the netrc file or
``HEROKU_API_KEY``.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import pytest

from heroku_provisioner.config.schema import Config, ProviderConfig
from heroku_provisioner.core import (
    CredentialError,
    HerokuAPIError,
    HerokuClient,
    build_client,
    resolve_credentials,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Generator
    from pathlib import Path

logger = logging.getLogger(__name__)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    _ = config
    if os.environ.get("HEROKU_E2E") == "1":
        return
    skip = pytest.mark.skip(reason="set HEROKU_E2E=1 to run against Heroku")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session")
def heroku_client() -> HerokuClient:
    try:
        credentials = resolve_credentials(api_key=os.environ.get("HEROKU_API_KEY"))
    except CredentialError as exc:
        pytest.skip(str(exc))
    return build_client(credentials)


@pytest.fixture
def suffix() -> str:
    return uuid4().hex[:8]


@pytest.fixture
def cleanup(heroku_client: HerokuClient) -> Generator[list[str]]:
    """Paths to DELETE after the test, in order, if they still exist."""
    paths: list[str] = []
    yield paths
    for path in paths:
        try:
            heroku_client.delete(path)
        except HerokuAPIError as exc:
            logger.debug("Cleanup of %s skipped: %s", path, exc)


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    def _make(**sections: Any) -> Config:
        return Config(
            provider=ProviderConfig(api_key=os.environ.get("HEROKU_API_KEY")),
            state_path=tmp_path / "state.json",
            **sections,
        )

    return _make
