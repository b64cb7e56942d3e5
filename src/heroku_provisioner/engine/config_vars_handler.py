"""Config vars handler implementing CRUD via the Heroku config-vars API.

There is no create or delete endpoint for config vars: every operation is a
single ``PATCH /apps/{app}/config-vars`` carrying the minimal patch computed
by :func:`~heroku_provisioner.engine.config_vars.diff_config_vars`. Only the
keys declared on the resource are managed; anything else set on the app is
left alone.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from heroku_provisioner.engine.config_vars import diff_config_vars
from heroku_provisioner.engine.handlers import (
    PlanContext,
    ResourceHandler,
    ignore_not_found,
    read_or_none,
    remote_call,
)
from heroku_provisioner.resources.config_vars import ConfigVarsResource

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from heroku_provisioner.core.client import HerokuClient
    from heroku_provisioner.core.state import ResourceInstance
    from heroku_provisioner.engine.handlers import EngineContext

logger = logging.getLogger(__name__)


def _pick(remote: Mapping[str, str], keys: Iterable[str]) -> dict[str, str]:
    return {k: remote[k] for k in keys if k in remote}


def _claimed_elsewhere(ctx: EngineContext, address: str, app: str) -> set[str]:
    """Keys that other config-vars resources of the running plan declare on *app*."""
    if ctx.plan is None:
        return set()
    return {
        key
        for other in ctx.plan.desired_of_type(ConfigVarsResource.resource_type)
        if isinstance(other, ConfigVarsResource)
        and other.address != address
        and other.app == app
        for key in (*other.public, *other.private)
    }


class ConfigVarsHandler(ResourceHandler["ConfigVarsResource"]):
    """CRUD handler for the config vars of a Heroku app.

    A key handed over to another resource (a rename, or a key moved between
    resources of the same app) is never unset by its previous owner.
    """

    def _release(
        self, ctx: EngineContext, address: str, app: str, patch: dict[str, str | None]
    ) -> dict[str, str | None]:
        kept = {k for k, v in patch.items() if v is None} & _claimed_elsewhere(ctx, address, app)
        if kept:
            logger.debug("%s: leaving %s to their new owner", address, sorted(kept))
        return {k: v for k, v in patch.items() if k not in kept}

    def _patch(self, client: HerokuClient, app: str, patch: dict[str, str | None]) -> None:
        if not patch:
            logger.debug("Config vars of %s already converged; nothing to send", app)
            return
        # Values may be secrets: log names only.
        logger.debug("Patching config vars of %s: %s", app, sorted(patch))
        client.patch(f"/apps/{app}/config-vars", patch)

    def _read_attrs(
        self,
        client: HerokuClient,
        app: str,
        public_keys: Iterable[str],
        private_keys: Iterable[str],
    ) -> dict[str, Any]:
        """Read the managed subset of the app's config vars."""
        app_info = client.get(f"/apps/{app}")
        remote = client.get(f"/apps/{app}/config-vars") or {}
        return {
            "id": app_info["id"],
            "app": app,
            "public": _pick(remote, public_keys),
            "private": _pick(remote, private_keys),
        }

    def validate_plan(
        self,
        ctx: EngineContext,
        desired: ConfigVarsResource,
        plan_ctx: PlanContext,
    ) -> list[str]:
        _ = ctx
        errors: list[str] = []
        mine = set(desired.public) | set(desired.private)
        for other in plan_ctx.desired_of_type(ConfigVarsResource.resource_type):
            if other.address == desired.address or not isinstance(other, ConfigVarsResource):
                continue
            if other.app != desired.app:
                continue
            shared = sorted(mine & (set(other.public) | set(other.private)))
            # Report each overlapping pair once.
            if shared and desired.address < other.address:
                errors.append(
                    f"{desired.address} and {other.address} both manage config vars "
                    f"of app '{desired.app}': {', '.join(shared)}"
                )
        return errors

    def create(self, ctx: EngineContext, desired: ConfigVarsResource) -> dict[str, Any]:
        """Set the declared config vars (update-as-create)."""
        patch = diff_config_vars({}, {}, desired.public, desired.private)
        client = ctx.client
        with remote_call(desired.address, f"set config vars of app '{desired.app}'"):
            self._patch(client, desired.app, patch)
            return self._read_attrs(client, desired.app, desired.public, desired.private)

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> dict[str, Any] | None:
        """Read the managed config vars. Returns None if the app is gone."""
        app = prior.attributes.get("app", "")
        public_keys = prior.attributes.get("public", {}).keys()
        private_keys = prior.attributes.get("private", {}).keys()
        with remote_call(prior.address, f"read config vars of app '{app}'"):
            return read_or_none(
                lambda: self._read_attrs(ctx.client, app, public_keys, private_keys)
            )

    def update(
        self,
        ctx: EngineContext,
        desired: ConfigVarsResource,
        prior: ResourceInstance,
    ) -> dict[str, Any]:
        """Send one patch with only the added, changed and removed keys."""
        old_public = prior.attributes.get("public", {})
        old_private = prior.attributes.get("private", {})
        old_app = prior.attributes.get("app", desired.app)
        client = ctx.client

        if old_app != desired.app:
            # Moving to another app: release the old app's vars, then set anew.
            self.delete(ctx, prior)
            return self.create(ctx, desired)

        patch = self._release(
            ctx,
            desired.address,
            desired.app,
            diff_config_vars(old_public, old_private, desired.public, desired.private),
        )
        with remote_call(desired.address, f"update config vars of app '{desired.app}'"):
            self._patch(client, desired.app, patch)
            return self._read_attrs(client, desired.app, desired.public, desired.private)

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        """Unset every managed config var. A deleted app counts as done."""
        app = prior.attributes.get("app", "")
        released = diff_config_vars(
            prior.attributes.get("public", {}), prior.attributes.get("private", {}), {}, {}
        )
        patch = self._release(ctx, prior.address, app, released)
        with remote_call(prior.address, f"unset config vars of app '{app}'"):
            ignore_not_found(lambda: self._patch(ctx.client, app, patch))
