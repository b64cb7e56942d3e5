"""App feature handler implementing CRUD via the Heroku app-features API."""

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
    from heroku_provisioner.resources.app_feature import AppFeatureResource


class AppFeatureHandler(ResourceHandler["AppFeatureResource"]):
    """CRUD handler for app features.

    Features always exist on an app, so create and update both PATCH the
    ``enabled`` flag and delete switches the feature off.
    """

    def _read_attrs(self, client: HerokuClient, app: str, feature: str) -> dict[str, Any]:
        info = client.get(f"/apps/{app}/features/{feature}")
        return {
            "id": build_composite_id(app, feature),
            "app": app,
            "feature": info.get("name", feature),
            "enabled": info.get("enabled", False),
        }

    def _set(self, client: HerokuClient, app: str, feature: str, enabled: bool) -> None:
        client.patch(f"/apps/{app}/features/{feature}", {"enabled": enabled})

    def create(self, ctx: EngineContext, desired: AppFeatureResource) -> dict[str, Any]:
        client = ctx.client
        with remote_call(desired.address, f"set feature '{desired.feature}'"):
            self._set(client, desired.app, desired.feature, desired.enabled)
            return self._read_attrs(client, desired.app, desired.feature)

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> dict[str, Any] | None:
        app, feature = parse_composite_id(prior.resource_id or "")
        with remote_call(prior.address, f"read feature '{feature}'"):
            return read_or_none(lambda: self._read_attrs(ctx.client, app, feature))

    def update(
        self, ctx: EngineContext, desired: AppFeatureResource, prior: ResourceInstance
    ) -> dict[str, Any]:
        old_id = prior.resource_id or ""
        if old_id != build_composite_id(desired.app, desired.feature):
            self.delete(ctx, prior)
        return self.create(ctx, desired)

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        app, feature = parse_composite_id(prior.resource_id or "")
        with remote_call(prior.address, f"disable feature '{feature}'"):
            ignore_not_found(lambda: self._set(ctx.client, app, feature, False))
