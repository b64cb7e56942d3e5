"""App config vars resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar, Self

from pydantic import Field, model_validator

from heroku_provisioner.resources.base import Resource
from heroku_provisioner.resources.markers import Compare, Ref, Sensitive


class ConfigVarsResource(Resource):
    """Config vars managed on a Heroku app.

    Variables are split into a ``public`` group and a ``private`` group whose
    values are masked in plan output. Both groups are merged into a single
    update call, so a variable name may appear in only one of them. Config
    vars set on the app outside this resource are left untouched.
    """

    resource_type: ClassVar[str] = "heroku_app_config_vars"
    plan_priority: ClassVar[int] = 20

    app: Annotated[str, Ref("heroku_app")]
    public: Annotated[dict[str, str], Compare("exact")] = Field(default_factory=dict)
    private: Annotated[dict[str, str], Compare("exact"), Sensitive()] = Field(
        default_factory=dict
    )

    @model_validator(mode="after")
    def _no_shared_keys(self) -> Self:
        shared = sorted(set(self.public) & set(self.private))
        if shared:
            msg = f"Config vars declared as both public and private: {', '.join(shared)}"
            raise ValueError(msg)
        return self
