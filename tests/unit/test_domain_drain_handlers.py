"""Tests for the domain and log drain handlers."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from heroku_provisioner.core import HerokuNotFoundError, ResourceInstance
from heroku_provisioner.engine.domain_handler import DomainHandler
from heroku_provisioner.engine.drain_handler import DrainHandler
from heroku_provisioner.engine.handlers import EngineContext
from heroku_provisioner.resources.domain import DomainResource
from heroku_provisioner.resources.drain import DrainResource

_DOMAIN = {
    "id": "dom-id-1",
    "hostname": "www.example.com",
    "cname": "www.example.com.herokudns.com",
    "sni_endpoint": {"id": "sni-1", "name": "tokyo-1"},
}

_DRAIN = {"id": "drain-id-1", "url": "syslog+tls://logs.example.com:6514", "token": "d.abc"}


def _domain_prior(**attrs: str) -> ResourceInstance:
    base = {"id": "dom-id-1", "app": "web", "hostname": "www.example.com", "sni_endpoint": None}
    base.update(attrs)
    return ResourceInstance(
        address="heroku_domain.www", resource_type="heroku_domain", name="www", attributes=base
    )


def _drain_prior() -> ResourceInstance:
    return ResourceInstance(
        address="heroku_drain.logs",
        resource_type="heroku_drain",
        name="logs",
        attributes={"id": "drain-id-1", "app": "web", "url": _DRAIN["url"]},
    )


class TestDomainHandler:
    @pytest.fixture
    def handler(self) -> DomainHandler:
        return DomainHandler()

    def test_create(
        self, ctx: EngineContext, handler: DomainHandler, mock_client: MagicMock
    ) -> None:
        mock_client.post.return_value = _DOMAIN
        mock_client.get.return_value = _DOMAIN
        desired = DomainResource(
            name="www", app="web", hostname="www.example.com", sni_endpoint="tokyo-1"
        )

        result = handler.create(ctx, desired)

        mock_client.post.assert_called_once_with(
            "/apps/web/domains", {"hostname": "www.example.com", "sni_endpoint": "tokyo-1"}
        )
        assert result["cname"] == "www.example.com.herokudns.com"
        assert result["sni_endpoint"] == "tokyo-1"

    def test_sni_endpoint_updated_in_place(
        self, ctx: EngineContext, handler: DomainHandler, mock_client: MagicMock
    ) -> None:
        mock_client.get.return_value = _DOMAIN
        desired = DomainResource(
            name="www", app="web", hostname="www.example.com", sni_endpoint="tokyo-1"
        )

        handler.update(ctx, desired, _domain_prior())

        mock_client.patch.assert_called_once_with(
            "/apps/web/domains/dom-id-1", {"sni_endpoint": "tokyo-1"}
        )
        mock_client.delete.assert_not_called()

    def test_new_hostname_replaces(
        self, ctx: EngineContext, handler: DomainHandler, mock_client: MagicMock
    ) -> None:
        mock_client.post.return_value = {**_DOMAIN, "id": "dom-id-2"}
        mock_client.get.return_value = {**_DOMAIN, "id": "dom-id-2"}
        desired = DomainResource(name="www", app="web", hostname="api.example.com")

        result = handler.update(ctx, desired, _domain_prior())

        mock_client.delete.assert_called_once_with("/apps/web/domains/dom-id-1")
        assert result["id"] == "dom-id-2"

    def test_read_removed(
        self, ctx: EngineContext, handler: DomainHandler, mock_client: MagicMock
    ) -> None:
        mock_client.get.side_effect = HerokuNotFoundError(404, "not found")
        assert handler.read(ctx, _domain_prior()) is None


class TestDrainHandler:
    @pytest.fixture
    def handler(self) -> DrainHandler:
        return DrainHandler()

    def test_create(
        self, ctx: EngineContext, handler: DrainHandler, mock_client: MagicMock
    ) -> None:
        mock_client.post.return_value = _DRAIN
        mock_client.get.return_value = _DRAIN

        result = handler.create(ctx, DrainResource(name="logs", app="web", url=_DRAIN["url"]))

        mock_client.post.assert_called_once_with("/apps/web/log-drains", {"url": _DRAIN["url"]})
        assert result["token"] == "d.abc"

    def test_update_replaces(
        self, ctx: EngineContext, handler: DrainHandler, mock_client: MagicMock
    ) -> None:
        new_url = "https://logs.example.com/ingest"
        mock_client.post.return_value = {**_DRAIN, "id": "drain-id-2", "url": new_url}
        mock_client.get.return_value = {**_DRAIN, "id": "drain-id-2", "url": new_url}

        desired = DrainResource(name="logs", app="web", url=new_url)

        result = handler.update(ctx, desired, _drain_prior())

        mock_client.delete.assert_called_once_with("/apps/web/log-drains/drain-id-1")
        assert result["url"] == new_url

    def test_delete_ignores_missing(
        self, ctx: EngineContext, handler: DrainHandler, mock_client: MagicMock
    ) -> None:
        mock_client.delete.side_effect = HerokuNotFoundError(404, "not found")
        handler.delete(ctx, _drain_prior())
