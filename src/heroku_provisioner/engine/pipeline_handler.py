"""Pipeline and pipeline coupling handlers."""

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
    from heroku_provisioner.resources.pipeline import PipelineCouplingResource, PipelineResource


class PipelineHandler(ResourceHandler["PipelineResource"]):
    """CRUD handler for pipelines."""

    def _read_attrs(self, client: HerokuClient, pipeline_id: str) -> dict[str, Any]:
        pipeline = client.get(f"/pipelines/{pipeline_id}")
        return {"id": pipeline["id"], "name": pipeline["name"]}

    def create(self, ctx: EngineContext, desired: PipelineResource) -> dict[str, Any]:
        client = ctx.client
        with remote_call(desired.address, "create pipeline"):
            pipeline = client.post("/pipelines", {"name": desired.name})
            return self._read_attrs(client, pipeline["id"])

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> dict[str, Any] | None:
        pipeline_id = prior.resource_id or prior.name
        with remote_call(prior.address, "read pipeline"):
            return read_or_none(lambda: self._read_attrs(ctx.client, pipeline_id))

    def update(
        self, ctx: EngineContext, desired: PipelineResource, prior: ResourceInstance
    ) -> dict[str, Any]:
        pipeline_id = prior.resource_id or desired.name
        client = ctx.client
        with remote_call(desired.address, "rename pipeline"):
            if changed_fields(desired, prior, ("name",)):
                client.patch(f"/pipelines/{pipeline_id}", {"name": desired.name})
            return self._read_attrs(client, pipeline_id)

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        pipeline_id = prior.resource_id or prior.name
        with remote_call(prior.address, "delete pipeline"):
            ignore_not_found(lambda: ctx.client.delete(f"/pipelines/{pipeline_id}"))


class PipelineCouplingHandler(ResourceHandler["PipelineCouplingResource"]):
    """CRUD handler for pipeline couplings.

    The API reports the coupled app and pipeline by ID only, so the names
    given in configuration are carried over from state. The stage can be
    changed in place; a different app or pipeline replaces the coupling.
    """

    def _read_attrs(
        self, client: HerokuClient, coupling_id: str, app: str, pipeline: str
    ) -> dict[str, Any]:
        coupling = client.get(f"/pipeline-couplings/{coupling_id}")
        return {
            "id": coupling["id"],
            "app": app,
            "pipeline": pipeline,
            "stage": coupling["stage"],
            "app_id": (coupling.get("app") or {}).get("id"),
            "pipeline_id": (coupling.get("pipeline") or {}).get("id"),
        }

    def create(self, ctx: EngineContext, desired: PipelineCouplingResource) -> dict[str, Any]:
        client = ctx.client
        with remote_call(desired.address, f"couple app '{desired.app}'"):
            pipeline_id = client.get(f"/pipelines/{desired.pipeline}")["id"]
            coupling = client.post(
                "/pipeline-couplings",
                {"app": desired.app, "pipeline": pipeline_id, "stage": desired.stage},
            )
            return self._read_attrs(client, coupling["id"], desired.app, desired.pipeline)

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> dict[str, Any] | None:
        coupling_id = prior.resource_id or ""
        app = prior.attributes.get("app", "")
        pipeline = prior.attributes.get("pipeline", "")
        with remote_call(prior.address, "read pipeline coupling"):
            return read_or_none(lambda: self._read_attrs(ctx.client, coupling_id, app, pipeline))

    def update(
        self,
        ctx: EngineContext,
        desired: PipelineCouplingResource,
        prior: ResourceInstance,
    ) -> dict[str, Any]:
        if changed_fields(desired, prior, ("app", "pipeline")):
            self.delete(ctx, prior)
            return self.create(ctx, desired)

        coupling_id = prior.resource_id or ""
        client = ctx.client
        with remote_call(desired.address, f"move app '{desired.app}' to {desired.stage}"):
            client.patch(f"/pipeline-couplings/{coupling_id}", {"stage": desired.stage})
            return self._read_attrs(client, coupling_id, desired.app, desired.pipeline)

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        coupling_id = prior.resource_id or ""
        with remote_call(prior.address, "remove pipeline coupling"):
            ignore_not_found(lambda: ctx.client.delete(f"/pipeline-couplings/{coupling_id}"))
