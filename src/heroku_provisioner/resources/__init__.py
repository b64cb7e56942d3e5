"""Heroku resource definitions."""

from heroku_provisioner.resources.addon import AddonAttachmentResource, AddonResource
from heroku_provisioner.resources.app import AppResource
from heroku_provisioner.resources.app_feature import AppFeatureResource
from heroku_provisioner.resources.collaborator import CollaboratorResource
from heroku_provisioner.resources.config_vars import ConfigVarsResource
from heroku_provisioner.resources.domain import DomainResource
from heroku_provisioner.resources.drain import DrainResource
from heroku_provisioner.resources.pipeline import PipelineCouplingResource, PipelineResource
from heroku_provisioner.resources.space import SpaceResource

__all__ = [
    "AddonAttachmentResource",
    "AddonResource",
    "AppFeatureResource",
    "AppResource",
    "CollaboratorResource",
    "ConfigVarsResource",
    "DomainResource",
    "DrainResource",
    "PipelineCouplingResource",
    "PipelineResource",
    "SpaceResource",
]
