"""Collaborator handler implementing CRUD via the Heroku collaborators API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from heroku_provisioner.core.ids import build_composite_id, parse_composite_id
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
    from heroku_provisioner.resources.collaborator import CollaboratorResource


class CollaboratorHandler(ResourceHandler["CollaboratorResource"]):
    """CRUD handler for app collaborators, identified by ``<app>:<email>``."""

    def _read_attrs(self, client: HerokuClient, app: str, email: str) -> dict[str, Any]:
        collaborator = client.get(f"/apps/{app}/collaborators/{email}")
        user_email = (collaborator.get("user") or {}).get("email", email).lower()
        return {
            "id": build_composite_id(app, user_email),
            "app": app,
            "email": user_email,
        }

    def create(self, ctx: EngineContext, desired: CollaboratorResource) -> dict[str, Any]:
        client = ctx.client
        with remote_call(desired.address, f"add collaborator '{desired.email}'"):
            client.post(
                f"/apps/{desired.app}/collaborators",
                {"user": desired.email, "silent": True},
            )
            return self._read_attrs(client, desired.app, desired.email)

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> dict[str, Any] | None:
        app, email = parse_composite_id(prior.resource_id or "")
        with remote_call(prior.address, f"read collaborator '{email}'"):
            return read_or_none(lambda: self._read_attrs(ctx.client, app, email))

    def update(
        self,
        ctx: EngineContext,
        desired: CollaboratorResource,
        prior: ResourceInstance,
    ) -> dict[str, Any]:
        """No-op while the identity is unchanged; otherwise replace."""
        if prior.resource_id == build_composite_id(desired.app, desired.email):
            return dict(prior.attributes)
        self.delete(ctx, prior)
        return self.create(ctx, desired)

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        app, email = parse_composite_id(prior.resource_id or "")
        with remote_call(prior.address, f"remove collaborator '{email}'"):
            ignore_not_found(lambda: ctx.client.delete(f"/apps/{app}/collaborators/{email}"))
