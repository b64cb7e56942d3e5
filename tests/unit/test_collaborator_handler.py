"""Tests for the CollaboratorHandler."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from heroku_provisioner.core import HerokuNotFoundError, ResourceInstance
from heroku_provisioner.engine.collaborator_handler import CollaboratorHandler
from heroku_provisioner.engine.handlers import EngineContext
from heroku_provisioner.resources.collaborator import CollaboratorResource


@pytest.fixture
def handler() -> CollaboratorHandler:
    return CollaboratorHandler()


def _prior(resource_id: str = "web:dev@example.com") -> ResourceInstance:
    app, email = resource_id.split(":", 1)
    return ResourceInstance(
        address="heroku_collaborator.dev",
        resource_type="heroku_collaborator",
        name="dev",
        attributes={"id": resource_id, "app": app, "email": email},
    )


def test_create_adds_silently(
    ctx: EngineContext, handler: CollaboratorHandler, mock_client: MagicMock
) -> None:
    mock_client.get.return_value = {"user": {"email": "dev@example.com"}}

    desired = CollaboratorResource(name="dev", app="web", email="dev@example.com")
    result = handler.create(ctx, desired)

    mock_client.post.assert_called_once_with(
        "/apps/web/collaborators", {"user": "dev@example.com", "silent": True}
    )
    assert result == {"id": "web:dev@example.com", "app": "web", "email": "dev@example.com"}


def test_read_uses_composite_id(
    ctx: EngineContext, handler: CollaboratorHandler, mock_client: MagicMock
) -> None:
    mock_client.get.return_value = {"user": {"email": "dev@example.com"}}

    assert handler.read(ctx, _prior()) is not None
    mock_client.get.assert_called_once_with("/apps/web/collaborators/dev@example.com")


def test_read_removed_collaborator(
    ctx: EngineContext, handler: CollaboratorHandler, mock_client: MagicMock
) -> None:
    mock_client.get.side_effect = HerokuNotFoundError(404, "not found")
    assert handler.read(ctx, _prior()) is None


def test_update_same_identity_is_noop(
    ctx: EngineContext, handler: CollaboratorHandler, mock_client: MagicMock
) -> None:
    prior = _prior()
    desired = CollaboratorResource(name="dev", app="web", email="dev@example.com")

    assert handler.update(ctx, desired, prior) == prior.attributes
    mock_client.post.assert_not_called()
    mock_client.delete.assert_not_called()


def test_update_new_email_replaces(
    ctx: EngineContext, handler: CollaboratorHandler, mock_client: MagicMock
) -> None:
    mock_client.get.return_value = {"user": {"email": "ops@example.com"}}
    desired = CollaboratorResource(name="dev", app="web", email="ops@example.com")

    result = handler.update(ctx, desired, _prior())

    mock_client.delete.assert_called_once_with("/apps/web/collaborators/dev@example.com")
    mock_client.post.assert_called_once()
    assert result["id"] == "web:ops@example.com"


def test_delete_ignores_missing(
    ctx: EngineContext, handler: CollaboratorHandler, mock_client: MagicMock
) -> None:
    mock_client.delete.side_effect = HerokuNotFoundError(404, "not found")
    handler.delete(ctx, _prior())


def test_mixed_case_email_matches_recorded_identity(
    ctx: EngineContext, handler: CollaboratorHandler, mock_client: MagicMock
) -> None:
    desired = CollaboratorResource(name="dev", app="web", email="Dev@Example.COM")

    assert desired.email == "dev@example.com"
    assert handler.update(ctx, desired, _prior()) == _prior().attributes
    mock_client.delete.assert_not_called()


def test_read_lowercases_reported_email(
    ctx: EngineContext, handler: CollaboratorHandler, mock_client: MagicMock
) -> None:
    mock_client.get.return_value = {"user": {"email": "Dev@Example.com"}}

    result = handler.read(ctx, _prior())

    assert result == {"id": "web:dev@example.com", "app": "web", "email": "dev@example.com"}
