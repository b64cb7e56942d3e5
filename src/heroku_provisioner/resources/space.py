"""Private space resource model."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from heroku_provisioner.resources.base import Resource


class SpaceResource(Resource):
    """A Heroku private space owned by a team.

    ``team``, ``region`` and ``shield`` are fixed at creation time. Spaces are
    planned before apps so that apps can be created inside them.
    """

    resource_type: ClassVar[str] = "heroku_space"
    plan_priority: ClassVar[int] = 0

    name: str = Field(pattern=r"^[a-z][a-z0-9-]{2,29}$")
    team: str
    region: str | None = None
    shield: bool = False
