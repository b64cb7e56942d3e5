"""App handler implementing CRUD via the Heroku apps API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from heroku_provisioner.engine.handlers import (
    ResourceHandler,
    ignore_not_found,
    read_or_none,
    reject_changes,
    remote_call,
)

if TYPE_CHECKING:
    from heroku_provisioner.core.client import HerokuClient
    from heroku_provisioner.core.state import ResourceInstance
    from heroku_provisioner.engine.handlers import EngineContext
    from heroku_provisioner.resources.app import AppResource

logger = logging.getLogger(__name__)


def _name_of(obj: dict[str, Any] | None) -> str | None:
    """Heroku embeds related objects as ``{"id": ..., "name": ...}`` or null."""
    return obj.get("name") if obj else None


def _buildpack_ref(installation: dict[str, Any]) -> str:
    buildpack = installation.get("buildpack") or {}
    return buildpack.get("name") or buildpack.get("url", "")


class AppHandler(ResourceHandler["AppResource"]):
    """CRUD handler for Heroku apps."""

    _FIXED_FIELDS = ("region", "team", "space")

    def _read_attrs(self, client: HerokuClient, app_id: str) -> dict[str, Any]:
        """Extract app attributes matching AppResource model_dump output."""
        app = client.get(f"/apps/{app_id}")
        installations = client.get(f"/apps/{app['id']}/buildpack-installations") or []
        installations.sort(key=lambda i: i.get("ordinal", 0))
        return {
            "id": app["id"],
            "name": app["name"],
            "region": _name_of(app.get("region")),
            "stack": _name_of(app.get("build_stack")),
            "team": _name_of(app.get("team")),
            "space": _name_of(app.get("space")),
            "maintenance": app.get("maintenance", False),
            "buildpacks": [_buildpack_ref(i) for i in installations],
            "web_url": app.get("web_url"),
            "git_url": app.get("git_url"),
        }

    def _set_buildpacks(self, client: HerokuClient, app_id: str, buildpacks: list[str]) -> None:
        updates = [{"buildpack": bp} for bp in buildpacks]
        client.put(f"/apps/{app_id}/buildpack-installations", {"updates": updates})

    def validate(self, ctx: EngineContext, desired: AppResource) -> list[str]:
        _ = ctx
        errors: list[str] = []
        if desired.space is not None and desired.region is not None:
            errors.append(
                f"App '{desired.name}' sets both space and region; "
                "apps in a space run in the space's region"
            )
        return errors

    def create(self, ctx: EngineContext, desired: AppResource) -> dict[str, Any]:
        """Create an app, using the team apps endpoint for team or space apps."""
        body: dict[str, Any] = {"name": desired.name}
        if desired.stack is not None:
            body["stack"] = desired.stack
        if desired.region is not None:
            body["region"] = desired.region

        path = "/apps"
        if desired.team is not None or desired.space is not None:
            path = "/teams/apps"
            if desired.team is not None:
                body["team"] = desired.team
            if desired.space is not None:
                body["space"] = desired.space

        client = ctx.client
        with remote_call(desired.address, "create app"):
            app = client.post(path, body)
            app_id = app["id"]
            if desired.maintenance:
                client.patch(f"/apps/{app_id}", {"maintenance": True})
            if desired.buildpacks is not None:
                self._set_buildpacks(client, app_id, desired.buildpacks)
            return self._read_attrs(client, app_id)

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> dict[str, Any] | None:
        """Read an app. Returns None if it was deleted outside of management."""
        app_id = prior.resource_id or prior.name
        with remote_call(prior.address, "read app"):
            return read_or_none(lambda: self._read_attrs(ctx.client, app_id))

    def update(
        self, ctx: EngineContext, desired: AppResource, prior: ResourceInstance
    ) -> dict[str, Any]:
        """Update maintenance mode, build stack and buildpacks in place."""
        reject_changes(desired, prior, self._FIXED_FIELDS)
        app_id = prior.resource_id or desired.name

        body: dict[str, Any] = {}
        if desired.maintenance != prior.attributes.get("maintenance"):
            body["maintenance"] = desired.maintenance
        if desired.stack is not None and desired.stack != prior.attributes.get("stack"):
            body["build_stack"] = desired.stack

        client = ctx.client
        with remote_call(desired.address, "update app"):
            if body:
                logger.debug("Patching app %s: %s", desired.name, sorted(body))
                client.patch(f"/apps/{app_id}", body)
            if desired.buildpacks is not None and desired.buildpacks != prior.attributes.get(
                "buildpacks"
            ):
                self._set_buildpacks(client, app_id, desired.buildpacks)
            return self._read_attrs(client, app_id)

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        """Delete an app."""
        app_id = prior.resource_id or prior.name
        with remote_call(prior.address, "delete app"):
            ignore_not_found(lambda: ctx.client.delete(f"/apps/{app_id}"))
