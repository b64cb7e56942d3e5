"""Domain handler implementing CRUD via the Heroku domains API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from heroku_provisioner.engine.handlers import (
    ResourceHandler,
    changed_fields,
    ignore_not_found,
    read_or_none,
    remote_call,
)

if TYPE_CHECKING:
    from heroku_provisioner.core.client import HerokuClient
    from heroku_provisioner.core.state import ResourceInstance
    from heroku_provisioner.engine.handlers import EngineContext
    from heroku_provisioner.resources.domain import DomainResource


class DomainHandler(ResourceHandler["DomainResource"]):
    """CRUD handler for custom domains.

    The SNI endpoint can be switched in place; a new hostname or app replaces
    the domain.
    """

    def _read_attrs(self, client: HerokuClient, app: str, domain_id: str) -> dict[str, Any]:
        domain = client.get(f"/apps/{app}/domains/{domain_id}")
        return {
            "id": domain["id"],
            "app": app,
            "hostname": domain["hostname"],
            "cname": domain.get("cname"),
            "sni_endpoint": (domain.get("sni_endpoint") or {}).get("name"),
        }

    def create(self, ctx: EngineContext, desired: DomainResource) -> dict[str, Any]:
        body: dict[str, Any] = {"hostname": desired.hostname, "sni_endpoint": desired.sni_endpoint}
        client = ctx.client
        with remote_call(desired.address, f"add domain '{desired.hostname}'"):
            domain = client.post(f"/apps/{desired.app}/domains", body)
            return self._read_attrs(client, desired.app, domain["id"])

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> dict[str, Any] | None:
        app = prior.attributes.get("app", "")
        domain_id = prior.resource_id or ""
        with remote_call(prior.address, "read domain"):
            return read_or_none(lambda: self._read_attrs(ctx.client, app, domain_id))

    def update(
        self, ctx: EngineContext, desired: DomainResource, prior: ResourceInstance
    ) -> dict[str, Any]:
        if changed_fields(desired, prior, ("app", "hostname")):
            self.delete(ctx, prior)
            return self.create(ctx, desired)

        domain_id = prior.resource_id or ""
        client = ctx.client
        with remote_call(desired.address, f"update domain '{desired.hostname}'"):
            client.patch(
                f"/apps/{desired.app}/domains/{domain_id}",
                {"sni_endpoint": desired.sni_endpoint},
            )
            return self._read_attrs(client, desired.app, domain_id)

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        app = prior.attributes.get("app", "")
        domain_id = prior.resource_id or ""
        with remote_call(prior.address, "remove domain"):
            ignore_not_found(lambda: ctx.client.delete(f"/apps/{app}/domains/{domain_id}"))
