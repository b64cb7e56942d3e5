"""Heroku app resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import Field

from heroku_provisioner.resources.base import Resource
from heroku_provisioner.resources.markers import Ref


class AppResource(Resource):
    """A Heroku app.

    ``name`` is the app name on Heroku. Apps that belong to a team or live in
    a private space are created through the team apps endpoint. ``region``,
    ``team`` and ``space`` are fixed at creation time.

    ``buildpacks`` is only managed when set; ``None`` leaves whatever Heroku
    detected in place.
    """

    resource_type: ClassVar[str] = "heroku_app"
    plan_priority: ClassVar[int] = 10

    name: str = Field(pattern=r"^[a-z][a-z0-9-]{1,28}[a-z0-9]$")
    region: str | None = None
    stack: str | None = None
    team: str | None = None
    space: Annotated[str | None, Ref("heroku_space")] = None
    maintenance: bool = False
    buildpacks: list[str] | None = None
