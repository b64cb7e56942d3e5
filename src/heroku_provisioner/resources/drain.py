"""Log drain resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import Field

from heroku_provisioner.resources.base import Resource
from heroku_provisioner.resources.markers import Ref


class DrainResource(Resource):
    """A log drain forwarding an app's logs to a syslog or HTTPS endpoint."""

    resource_type: ClassVar[str] = "heroku_drain"
    plan_priority: ClassVar[int] = 40

    app: Annotated[str, Ref("heroku_app")]
    url: str = Field(pattern=r"^(syslog\+tls|syslog|https?)://.+")
