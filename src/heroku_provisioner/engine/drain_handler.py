"""Log drain handler implementing CRUD via the Heroku log-drains API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from heroku_provisioner.engine.handlers import (
    ResourceHandler,
    ignore_not_found,
    read_or_none,
    remote_call,
)

if TYPE_CHECKING:
    from heroku_provisioner.core.client import HerokuClient
    from heroku_provisioner.core.state import ResourceInstance
    from heroku_provisioner.engine.handlers import EngineContext
    from heroku_provisioner.resources.drain import DrainResource


class DrainHandler(ResourceHandler["DrainResource"]):
    """CRUD handler for log drains. Drains are immutable; updates replace them."""

    def _read_attrs(self, client: HerokuClient, app: str, drain_id: str) -> dict[str, Any]:
        drain = client.get(f"/apps/{app}/log-drains/{drain_id}")
        return {
            "id": drain["id"],
            "app": app,
            "url": drain["url"],
            "token": drain.get("token"),
        }

    def create(self, ctx: EngineContext, desired: DrainResource) -> dict[str, Any]:
        client = ctx.client
        with remote_call(desired.address, "add log drain"):
            drain = client.post(f"/apps/{desired.app}/log-drains", {"url": desired.url})
            return self._read_attrs(client, desired.app, drain["id"])

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> dict[str, Any] | None:
        app = prior.attributes.get("app", "")
        drain_id = prior.resource_id or ""
        with remote_call(prior.address, "read log drain"):
            return read_or_none(lambda: self._read_attrs(ctx.client, app, drain_id))

    def update(
        self, ctx: EngineContext, desired: DrainResource, prior: ResourceInstance
    ) -> dict[str, Any]:
        self.delete(ctx, prior)
        return self.create(ctx, desired)

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        app = prior.attributes.get("app", "")
        drain_id = prior.resource_id or ""
        with remote_call(prior.address, "remove log drain"):
            ignore_not_found(lambda: ctx.client.delete(f"/apps/{app}/log-drains/{drain_id}"))
