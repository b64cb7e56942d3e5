"""App feature resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar

from heroku_provisioner.resources.base import Resource
from heroku_provisioner.resources.markers import Ref


class AppFeatureResource(Resource):
    """A Heroku Labs feature toggled on an app (e.g. ``preboot``).

    Identified by the composite ID ``<app>:<feature>``.
    """

    resource_type: ClassVar[str] = "heroku_app_feature"

    app: Annotated[str, Ref("heroku_app")]
    feature: str
    enabled: bool = True
