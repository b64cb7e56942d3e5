"""Plan and apply engine for Heroku resources."""

from heroku_provisioner.engine.config_vars import (
    ConfigVarConflictError,
    ConfigVarPatch,
    diff_config_vars,
    merge_config_vars,
)
from heroku_provisioner.engine.engine import HerokuEngine
from heroku_provisioner.engine.errors import (
    ApplyCanceled,
    ApplyError,
    DependencyCycleError,
    DuplicateAddressError,
    EngineError,
    RemoteAPIError,
    StalePlanError,
    StateLockError,
    UnknownResourceTypeError,
    UnsupportedChangeError,
    ValidationError,
)
from heroku_provisioner.engine.handlers import EngineContext, PlanContext, ResourceHandler
from heroku_provisioner.engine.registry import ResourceTypeRegistration, ResourceTypeRegistry
from heroku_provisioner.engine.types import Action, ApplyResult, Plan, PlanMetadata, ResourceChange

__all__ = [
    "Action",
    "ApplyCanceled",
    "ApplyError",
    "ApplyResult",
    "ConfigVarConflictError",
    "ConfigVarPatch",
    "DependencyCycleError",
    "DuplicateAddressError",
    "EngineContext",
    "EngineError",
    "HerokuEngine",
    "Plan",
    "PlanContext",
    "PlanMetadata",
    "RemoteAPIError",
    "ResourceChange",
    "ResourceHandler",
    "ResourceTypeRegistration",
    "ResourceTypeRegistry",
    "StalePlanError",
    "StateLockError",
    "UnknownResourceTypeError",
    "UnsupportedChangeError",
    "ValidationError",
    "diff_config_vars",
    "merge_config_vars",
]
