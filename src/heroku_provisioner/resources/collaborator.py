"""App collaborator resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import AfterValidator, Field

from heroku_provisioner.resources.base import Resource
from heroku_provisioner.resources.markers import Ref


class CollaboratorResource(Resource):
    """Grants a user access to a personal app.

    Identified by the composite ID ``<app>:<email>``; there is nothing to
    update in place.
    """

    resource_type: ClassVar[str] = "heroku_collaborator"
    plan_priority: ClassVar[int] = 40

    app: Annotated[str, Ref("heroku_app")]
    # Heroku reports emails lower-cased.
    email: Annotated[str, Field(pattern=r"^[^@\s:]+@[^@\s]+$"), AfterValidator(str.lower)]
