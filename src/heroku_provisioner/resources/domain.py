"""Custom domain resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import Field

from heroku_provisioner.resources.base import Resource
from heroku_provisioner.resources.markers import Ref


class DomainResource(Resource):
    """A custom hostname routed to an app."""

    resource_type: ClassVar[str] = "heroku_domain"
    plan_priority: ClassVar[int] = 40

    app: Annotated[str, Ref("heroku_app")]
    hostname: str = Field(min_length=1)
    sni_endpoint: str | None = None
