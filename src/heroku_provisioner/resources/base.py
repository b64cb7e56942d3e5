"""Common base for declared Heroku resources."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

from heroku_provisioner.resources.markers import ResourceRef, collect_ref_specs


class Resource(BaseModel):
    """Desired state for one Heroku object; handlers do the talking to Heroku.

    Apps, add-ons, pipelines and spaces use ``name`` as their Heroku name.
    Everything else (config vars, domains, couplings...) is an association and
    ``name`` is just the label that makes its address unique.

    ``plan_priority`` breaks ties between independent resources: lower goes
    first on create and last on delete.
    """

    model_config = ConfigDict(extra="forbid")

    resource_type: ClassVar[str]
    plan_priority: ClassVar[int] = 100

    name: str = Field(pattern=r"^[a-zA-Z0-9_-]+$")
    depends_on: list[str] = []

    def references(self) -> list[ResourceRef]:
        return collect_ref_specs(self)

    def reference_names(self) -> list[str]:
        return [ref.name for ref in self.references()]

    @computed_field
    @property
    def address(self) -> str:
        return f"{self.resource_type}.{self.name}"
