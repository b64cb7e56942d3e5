"""Tests for the private space handler."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from heroku_provisioner.core import ResourceInstance
from heroku_provisioner.engine.errors import UnsupportedChangeError
from heroku_provisioner.engine.handlers import EngineContext
from heroku_provisioner.engine.space_handler import SpaceHandler
from heroku_provisioner.resources.space import SpaceResource

_SPACE = {
    "id": "space-id-1",
    "name": "acme-prod",
    "team": {"name": "acme"},
    "region": {"name": "virginia"},
    "shield": False,
    "state": "allocated",
}


def _prior(**attrs: Any) -> ResourceInstance:
    base = {
        "id": "space-id-1",
        "name": "acme-prod",
        "team": "acme",
        "region": "virginia",
        "shield": False,
        "state": "allocated",
    }
    base.update(attrs)
    return ResourceInstance(
        address="heroku_space.acme-prod",
        resource_type="heroku_space",
        name="acme-prod",
        attributes=base,
    )


@pytest.fixture
def handler() -> SpaceHandler:
    return SpaceHandler()


def test_create_sends_region_when_set(
    ctx: EngineContext, handler: SpaceHandler, mock_client: MagicMock
) -> None:
    mock_client.post.return_value = {**_SPACE, "state": "allocating"}
    mock_client.get.return_value = _SPACE

    result = handler.create(ctx, SpaceResource(name="acme-prod", team="acme", region="virginia"))

    mock_client.post.assert_called_once_with(
        "/spaces", {"name": "acme-prod", "team": "acme", "shield": False, "region": "virginia"}
    )
    assert result["team"] == "acme"
    assert result["region"] == "virginia"


def test_create_without_region(
    ctx: EngineContext, handler: SpaceHandler, mock_client: MagicMock
) -> None:
    mock_client.post.return_value = _SPACE
    mock_client.get.return_value = _SPACE

    handler.create(ctx, SpaceResource(name="acme-prod", team="acme"))

    body = mock_client.post.call_args.args[1]
    assert "region" not in body


def test_update_rejects_shield_change(
    ctx: EngineContext, handler: SpaceHandler, mock_client: MagicMock
) -> None:
    desired = SpaceResource(name="acme-prod", team="acme", region="virginia", shield=True)

    with pytest.raises(UnsupportedChangeError, match="shield"):
        handler.update(ctx, desired, _prior())
    mock_client.patch.assert_not_called()


def test_update_without_changes_only_reads(
    ctx: EngineContext, handler: SpaceHandler, mock_client: MagicMock
) -> None:
    mock_client.get.return_value = _SPACE
    desired = SpaceResource(name="acme-prod", team="acme", region="virginia")

    result = handler.update(ctx, desired, _prior(state="allocating"))

    mock_client.patch.assert_not_called()
    assert result["state"] == "allocated"


def test_delete(ctx: EngineContext, handler: SpaceHandler, mock_client: MagicMock) -> None:
    handler.delete(ctx, _prior())
    mock_client.delete.assert_called_once_with("/spaces/space-id-1")
