"""Add-on and add-on attachment resource models."""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import Field

from heroku_provisioner.resources.base import Resource
from heroku_provisioner.resources.markers import Ref


class AddonResource(Resource):
    """An add-on provisioned on an app.

    ``name`` is the globally unique add-on name on Heroku. ``config`` holds
    provisioning options; they are only sent at creation time.
    """

    resource_type: ClassVar[str] = "heroku_addon"
    plan_priority: ClassVar[int] = 30

    name: str = Field(pattern=r"^[a-zA-Z][a-zA-Z0-9_-]+$")
    app: Annotated[str, Ref("heroku_app")]
    plan: str = Field(pattern=r"^[a-z0-9-]+(:[a-z0-9-]+)?$")
    config: dict[str, str] = Field(default_factory=dict)


class AddonAttachmentResource(Resource):
    """Attaches an existing add-on to another app.

    ``attachment_name`` is the prefix of the config vars the attachment
    exposes (e.g. ``DATABASE`` gives ``DATABASE_URL``).
    """

    resource_type: ClassVar[str] = "heroku_addon_attachment"
    plan_priority: ClassVar[int] = 40

    app: Annotated[str, Ref("heroku_app")]
    addon: Annotated[str, Ref("heroku_addon")]
    attachment_name: str | None = Field(default=None, pattern=r"^[A-Z][A-Z0-9_]*$")
