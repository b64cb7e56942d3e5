"""Space handler implementing CRUD via the Heroku spaces API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from heroku_provisioner.engine.handlers import (
    ResourceHandler,
    changed_fields,
    ignore_not_found,
    read_or_none,
    reject_changes,
    remote_call,
)

if TYPE_CHECKING:
    from heroku_provisioner.core.client import HerokuClient
    from heroku_provisioner.core.state import ResourceInstance
    from heroku_provisioner.engine.handlers import EngineContext
    from heroku_provisioner.resources.space import SpaceResource

logger = logging.getLogger(__name__)


class SpaceHandler(ResourceHandler["SpaceResource"]):
    """CRUD handler for private spaces."""

    _FIXED_FIELDS = ("team", "region", "shield")

    def _read_attrs(self, client: HerokuClient, space_id: str) -> dict[str, Any]:
        space = client.get(f"/spaces/{space_id}")
        return {
            "id": space["id"],
            "name": space["name"],
            "team": (space.get("team") or {}).get("name"),
            "region": (space.get("region") or {}).get("name"),
            "shield": space.get("shield", False),
            "state": space.get("state"),
        }

    def create(self, ctx: EngineContext, desired: SpaceResource) -> dict[str, Any]:
        body: dict[str, Any] = {
            "name": desired.name,
            "team": desired.team,
            "shield": desired.shield,
        }
        if desired.region is not None:
            body["region"] = desired.region
        client = ctx.client
        with remote_call(desired.address, "create space"):
            space = client.post("/spaces", body)
            logger.info("Space %s is %s", desired.name, space.get("state", "allocating"))
            return self._read_attrs(client, space["id"])

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> dict[str, Any] | None:
        space_id = prior.resource_id or prior.name
        with remote_call(prior.address, "read space"):
            return read_or_none(lambda: self._read_attrs(ctx.client, space_id))

    def update(
        self, ctx: EngineContext, desired: SpaceResource, prior: ResourceInstance
    ) -> dict[str, Any]:
        reject_changes(desired, prior, self._FIXED_FIELDS)
        space_id = prior.resource_id or desired.name
        client = ctx.client
        with remote_call(desired.address, "rename space"):
            if changed_fields(desired, prior, ("name",)):
                client.patch(f"/spaces/{space_id}", {"name": desired.name})
            return self._read_attrs(client, space_id)

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        space_id = prior.resource_id or prior.name
        with remote_call(prior.address, "delete space"):
            ignore_not_found(lambda: ctx.client.delete(f"/spaces/{space_id}"))
