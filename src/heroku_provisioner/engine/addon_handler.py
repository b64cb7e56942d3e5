"""Add-on and add-on attachment handlers."""

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
    from heroku_provisioner.engine.handlers import EngineContext, PlanContext
    from heroku_provisioner.resources.addon import AddonAttachmentResource, AddonResource

logger = logging.getLogger(__name__)


class AddonHandler(ResourceHandler["AddonResource"]):
    """CRUD handler for add-ons.

    The plan can be changed in place. Provisioning ``config`` is create-only
    and is echoed back from state since the API does not return it.
    """

    def _read_attrs(
        self, client: HerokuClient, addon_id: str, config: dict[str, str]
    ) -> dict[str, Any]:
        addon = client.get(f"/addons/{addon_id}")
        return {
            "id": addon["id"],
            "name": addon["name"],
            "app": (addon.get("app") or {}).get("name"),
            "plan": (addon.get("plan") or {}).get("name"),
            "config": dict(config),
            "config_vars": list(addon.get("config_vars") or []),
            "provider_id": addon.get("provider_id"),
        }

    def create(self, ctx: EngineContext, desired: AddonResource) -> dict[str, Any]:
        body: dict[str, Any] = {"plan": desired.plan, "name": desired.name}
        if desired.config:
            body["config"] = desired.config
        client = ctx.client
        with remote_call(desired.address, f"provision add-on '{desired.plan}'"):
            addon = client.post(f"/apps/{desired.app}/addons", body)
            return self._read_attrs(client, addon["id"], desired.config)

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> dict[str, Any] | None:
        addon_id = prior.resource_id or prior.name
        config = prior.attributes.get("config", {})
        with remote_call(prior.address, "read add-on"):
            return read_or_none(lambda: self._read_attrs(ctx.client, addon_id, config))

    def update(
        self, ctx: EngineContext, desired: AddonResource, prior: ResourceInstance
    ) -> dict[str, Any]:
        reject_changes(desired, prior, ("app", "config"))
        addon_id = prior.resource_id or desired.name
        client = ctx.client
        with remote_call(desired.address, f"change add-on plan to '{desired.plan}'"):
            if changed_fields(desired, prior, ("plan",)):
                client.patch(f"/apps/{desired.app}/addons/{addon_id}", {"plan": desired.plan})
            return self._read_attrs(client, addon_id, desired.config)

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        addon_id = prior.resource_id or prior.name
        app = prior.attributes.get("app")
        path = f"/apps/{app}/addons/{addon_id}" if app else f"/addons/{addon_id}"
        with remote_call(prior.address, "deprovision add-on"):
            ignore_not_found(lambda: ctx.client.delete(path))


class AddonAttachmentHandler(ResourceHandler["AddonAttachmentResource"]):
    """CRUD handler for add-on attachments.

    Attachments cannot be modified; any change detaches and re-attaches.
    """

    def _read_attrs(self, client: HerokuClient, attachment_id: str) -> dict[str, Any]:
        attachment = client.get(f"/addon-attachments/{attachment_id}")
        return {
            "id": attachment["id"],
            "app": (attachment.get("app") or {}).get("name"),
            "addon": (attachment.get("addon") or {}).get("name"),
            "attachment_name": attachment.get("name"),
        }

    def validate_plan(
        self,
        ctx: EngineContext,
        desired: AddonAttachmentResource,
        plan_ctx: PlanContext,
    ) -> list[str]:
        _ = ctx
        owner = plan_ctx.get_attr(desired.addon, "app", resource_type="heroku_addon")
        if owner == desired.app:
            return [
                f"{desired.address}: add-on '{desired.addon}' already belongs to "
                f"app '{desired.app}'"
            ]
        return []

    def create(self, ctx: EngineContext, desired: AddonAttachmentResource) -> dict[str, Any]:
        body: dict[str, Any] = {"app": desired.app, "addon": desired.addon}
        if desired.attachment_name is not None:
            body["name"] = desired.attachment_name
        client = ctx.client
        with remote_call(desired.address, f"attach add-on '{desired.addon}'"):
            attachment = client.post("/addon-attachments", body)
            return self._read_attrs(client, attachment["id"])

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> dict[str, Any] | None:
        attachment_id = prior.resource_id or ""
        with remote_call(prior.address, "read add-on attachment"):
            return read_or_none(lambda: self._read_attrs(ctx.client, attachment_id))

    def update(
        self,
        ctx: EngineContext,
        desired: AddonAttachmentResource,
        prior: ResourceInstance,
    ) -> dict[str, Any]:
        logger.info("Re-attaching %s", desired.address)
        self.delete(ctx, prior)
        return self.create(ctx, desired)

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        attachment_id = prior.resource_id or ""
        with remote_call(prior.address, "detach add-on"):
            ignore_not_found(lambda: ctx.client.delete(f"/addon-attachments/{attachment_id}"))
