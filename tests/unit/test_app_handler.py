"""Tests for the AppHandler."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from heroku_provisioner.core import HerokuNotFoundError, ResourceInstance
from heroku_provisioner.engine.app_handler import AppHandler
from heroku_provisioner.engine.errors import UnsupportedChangeError
from heroku_provisioner.engine.handlers import EngineContext
from heroku_provisioner.resources.app import AppResource


def _app_body(**overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "id": "app-id-1",
        "name": "web",
        "region": {"id": "r1", "name": "us"},
        "build_stack": {"id": "s1", "name": "heroku-24"},
        "team": None,
        "space": None,
        "maintenance": False,
        "web_url": "https://web.herokuapp.com/",
        "git_url": "https://git.heroku.com/web.git",
    }
    body.update(overrides)
    return body


@pytest.fixture
def handler() -> AppHandler:
    return AppHandler()


@pytest.fixture
def app_body() -> dict[str, Any]:
    return _app_body()


@pytest.fixture
def mock_client(app_body: dict[str, Any]) -> MagicMock:
    client = MagicMock()

    def get(path: str) -> Any:
        if path.endswith("/buildpack-installations"):
            return [
                {"ordinal": 1, "buildpack": {"name": "heroku/nodejs", "url": "x"}},
                {"ordinal": 0, "buildpack": {"name": None, "url": "https://example.com/bp"}},
            ]
        return app_body

    client.get.side_effect = get
    client.post.return_value = app_body
    return client


def _prior(**attrs: Any) -> ResourceInstance:
    base = {
        "id": "app-id-1",
        "name": "web",
        "region": "us",
        "stack": "heroku-24",
        "team": None,
        "space": None,
        "maintenance": False,
        "buildpacks": ["https://example.com/bp", "heroku/nodejs"],
    }
    base.update(attrs)
    return ResourceInstance(
        address="heroku_app.web", resource_type="heroku_app", name="web", attributes=base
    )


class TestCreate:
    def test_personal_app(
        self, ctx: EngineContext, handler: AppHandler, mock_client: MagicMock
    ) -> None:
        result = handler.create(ctx, AppResource(name="web", region="us"))

        mock_client.post.assert_called_once_with("/apps", {"name": "web", "region": "us"})
        mock_client.patch.assert_not_called()
        mock_client.put.assert_not_called()
        assert result["id"] == "app-id-1"
        assert result["region"] == "us"
        assert result["stack"] == "heroku-24"
        assert result["buildpacks"] == ["https://example.com/bp", "heroku/nodejs"]

    def test_team_app_uses_team_endpoint(
        self, ctx: EngineContext, handler: AppHandler, mock_client: MagicMock
    ) -> None:
        handler.create(ctx, AppResource(name="web", team="acme", space="acme-prod"))

        mock_client.post.assert_called_once_with(
            "/teams/apps", {"name": "web", "team": "acme", "space": "acme-prod"}
        )

    def test_maintenance_and_buildpacks(
        self, ctx: EngineContext, handler: AppHandler, mock_client: MagicMock
    ) -> None:
        desired = AppResource(name="web", maintenance=True, buildpacks=["heroku/python"])

        handler.create(ctx, desired)

        mock_client.patch.assert_called_once_with("/apps/app-id-1", {"maintenance": True})
        mock_client.put.assert_called_once_with(
            "/apps/app-id-1/buildpack-installations",
            {"updates": [{"buildpack": "heroku/python"}]},
        )


class TestRead:
    def test_returns_attributes(self, ctx: EngineContext, handler: AppHandler) -> None:
        result = handler.read(ctx, _prior())

        assert result is not None
        assert result["name"] == "web"
        assert result["web_url"] == "https://web.herokuapp.com/"

    def test_returns_none_when_deleted(
        self, ctx: EngineContext, handler: AppHandler, mock_client: MagicMock
    ) -> None:
        mock_client.get.side_effect = HerokuNotFoundError(404, "Couldn't find that app.")
        assert handler.read(ctx, _prior()) is None


class TestUpdate:
    def test_maintenance_and_stack(
        self, ctx: EngineContext, handler: AppHandler, mock_client: MagicMock
    ) -> None:
        desired = AppResource(name="web", region="us", stack="heroku-22", maintenance=True)

        handler.update(ctx, desired, _prior())

        mock_client.patch.assert_called_once_with(
            "/apps/app-id-1", {"maintenance": True, "build_stack": "heroku-22"}
        )
        mock_client.put.assert_not_called()

    def test_buildpacks_replaced_when_changed(
        self, ctx: EngineContext, handler: AppHandler, mock_client: MagicMock
    ) -> None:
        handler.update(ctx, AppResource(name="web", buildpacks=["heroku/go"]), _prior())

        mock_client.patch.assert_not_called()
        mock_client.put.assert_called_once_with(
            "/apps/app-id-1/buildpack-installations", {"updates": [{"buildpack": "heroku/go"}]}
        )

    def test_region_change_is_rejected(
        self, ctx: EngineContext, handler: AppHandler, mock_client: MagicMock
    ) -> None:
        with pytest.raises(UnsupportedChangeError, match="region"):
            handler.update(ctx, AppResource(name="web", region="eu"), _prior())
        mock_client.patch.assert_not_called()


class TestDelete:
    def test_deletes_by_id(
        self, ctx: EngineContext, handler: AppHandler, mock_client: MagicMock
    ) -> None:
        handler.delete(ctx, _prior())
        mock_client.delete.assert_called_once_with("/apps/app-id-1")

    def test_already_gone(
        self, ctx: EngineContext, handler: AppHandler, mock_client: MagicMock
    ) -> None:
        mock_client.delete.side_effect = HerokuNotFoundError(404, "Couldn't find that app.")
        handler.delete(ctx, _prior())


class TestValidate:
    def test_space_and_region_conflict(self, ctx: EngineContext, handler: AppHandler) -> None:
        errors = handler.validate(ctx, AppResource(name="web", region="us", space="acme-prod"))
        assert len(errors) == 1
        assert "space" in errors[0]

    def test_plain_app_is_valid(self, ctx: EngineContext, handler: AppHandler) -> None:
        assert handler.validate(ctx, AppResource(name="web")) == []
