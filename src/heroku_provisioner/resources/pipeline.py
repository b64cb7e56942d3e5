"""Pipeline and pipeline coupling resource models."""

from __future__ import annotations

from typing import Annotated, ClassVar, Literal

from pydantic import Field

from heroku_provisioner.resources.base import Resource
from heroku_provisioner.resources.markers import Ref

PipelineStage = Literal["review", "development", "staging", "production"]


class PipelineResource(Resource):
    """A Heroku pipeline. ``name`` is the pipeline name on Heroku."""

    resource_type: ClassVar[str] = "heroku_pipeline"
    plan_priority: ClassVar[int] = 10

    name: str = Field(pattern=r"^[a-z][a-z0-9-]{2,29}$")


class PipelineCouplingResource(Resource):
    """Couples an app to a pipeline stage."""

    resource_type: ClassVar[str] = "heroku_pipeline_coupling"
    plan_priority: ClassVar[int] = 40

    app: Annotated[str, Ref("heroku_app")]
    pipeline: Annotated[str, Ref("heroku_pipeline")]
    stage: PipelineStage
