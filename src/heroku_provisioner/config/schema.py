"""Configuration models for YAML-based provisioning."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from heroku_provisioner.core.client import API_URL
from heroku_provisioner.resources.addon import (
    AddonAttachmentResource,  # noqa: TC001
    AddonResource,  # noqa: TC001
)
from heroku_provisioner.resources.app import (
    AppResource,  # noqa: TC001
)
from heroku_provisioner.resources.app_feature import (
    AppFeatureResource,  # noqa: TC001
)
from heroku_provisioner.resources.base import Resource  # noqa: TC001
from heroku_provisioner.resources.collaborator import (
    CollaboratorResource,  # noqa: TC001
)
from heroku_provisioner.resources.config_vars import (
    ConfigVarsResource,  # noqa: TC001
)
from heroku_provisioner.resources.domain import (
    DomainResource,  # noqa: TC001
)
from heroku_provisioner.resources.drain import (
    DrainResource,  # noqa: TC001
)
from heroku_provisioner.resources.pipeline import (
    PipelineCouplingResource,  # noqa: TC001
    PipelineResource,  # noqa: TC001
)
from heroku_provisioner.resources.space import (
    SpaceResource,  # noqa: TC001
)


class ProviderConfig(BaseSettings):
    """Heroku provider connection settings.

    Fields can be set via YAML (constructor kwargs) or environment variables
    with the ``HEROKU_`` prefix.  Constructor kwargs take precedence.

    ``api_key`` is typically provided via a netrc file or the
    ``HEROKU_API_KEY`` environment variable rather than YAML to avoid
    committing secrets to version control. ``headers`` are extra HTTP headers
    sent with every API request.
    """

    model_config = SettingsConfigDict(env_prefix="HEROKU_")

    email: str | None = None
    api_key: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    url: str = API_URL
    debug_http: bool = False


def _none_to_list(v: Any) -> Any:
    return v if v is not None else []


class Config(BaseModel):
    """Provisioning configuration, validated straight from the YAML document."""

    model_config = ConfigDict(extra="forbid")

    provider: ProviderConfig
    state_path: Path = Path(".heroku-state.json")
    spaces: Annotated[list[SpaceResource], BeforeValidator(_none_to_list)] = []
    pipelines: Annotated[list[PipelineResource], BeforeValidator(_none_to_list)] = []
    apps: Annotated[list[AppResource], BeforeValidator(_none_to_list)] = []
    config_vars: Annotated[list[ConfigVarsResource], BeforeValidator(_none_to_list)] = []
    app_features: Annotated[list[AppFeatureResource], BeforeValidator(_none_to_list)] = []
    collaborators: Annotated[list[CollaboratorResource], BeforeValidator(_none_to_list)] = []
    addons: Annotated[list[AddonResource], BeforeValidator(_none_to_list)] = []
    addon_attachments: Annotated[
        list[AddonAttachmentResource],
        BeforeValidator(_none_to_list),
    ] = []
    domains: Annotated[list[DomainResource], BeforeValidator(_none_to_list)] = []
    drains: Annotated[list[DrainResource], BeforeValidator(_none_to_list)] = []
    pipeline_couplings: Annotated[
        list[PipelineCouplingResource],
        BeforeValidator(_none_to_list),
    ] = []
    config_dir: Path = Path()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def resources(self) -> list[Resource]:
        """All declared resources. Ordering is not significant."""
        return [
            *self.spaces,
            *self.pipelines,
            *self.apps,
            *self.config_vars,
            *self.app_features,
            *self.collaborators,
            *self.addons,
            *self.addon_attachments,
            *self.domains,
            *self.drains,
            *self.pipeline_couplings,
        ]
