"""Built-in Heroku resource types."""

from __future__ import annotations

from heroku_provisioner.engine.addon_handler import AddonAttachmentHandler, AddonHandler
from heroku_provisioner.engine.app_feature_handler import AppFeatureHandler
from heroku_provisioner.engine.app_handler import AppHandler
from heroku_provisioner.engine.collaborator_handler import CollaboratorHandler
from heroku_provisioner.engine.config_vars_handler import ConfigVarsHandler
from heroku_provisioner.engine.domain_handler import DomainHandler
from heroku_provisioner.engine.drain_handler import DrainHandler
from heroku_provisioner.engine.pipeline_handler import PipelineCouplingHandler, PipelineHandler
from heroku_provisioner.engine.registry import ResourceTypeRegistry
from heroku_provisioner.engine.space_handler import SpaceHandler
from heroku_provisioner.resources.addon import AddonAttachmentResource, AddonResource
from heroku_provisioner.resources.app import AppResource
from heroku_provisioner.resources.app_feature import AppFeatureResource
from heroku_provisioner.resources.collaborator import CollaboratorResource
from heroku_provisioner.resources.config_vars import ConfigVarsResource
from heroku_provisioner.resources.domain import DomainResource
from heroku_provisioner.resources.drain import DrainResource
from heroku_provisioner.resources.pipeline import PipelineCouplingResource, PipelineResource
from heroku_provisioner.resources.space import SpaceResource


_BUILTIN = (
    (SpaceResource, SpaceHandler),
    (AppResource, AppHandler),
    (ConfigVarsResource, ConfigVarsHandler),
    (AppFeatureResource, AppFeatureHandler),
    (CollaboratorResource, CollaboratorHandler),
    (AddonResource, AddonHandler),
    (AddonAttachmentResource, AddonAttachmentHandler),
    (DomainResource, DomainHandler),
    (DrainResource, DrainHandler),
    (PipelineResource, PipelineHandler),
    (PipelineCouplingResource, PipelineCouplingHandler),
)


def default_registry() -> ResourceTypeRegistry:
    """A new registry serving every built-in Heroku resource type."""
    registry = ResourceTypeRegistry()
    for model, handler_cls in _BUILTIN:
        registry.register(model, handler_cls())
    return registry
