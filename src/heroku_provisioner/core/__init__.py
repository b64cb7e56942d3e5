"""Core infrastructure components for Heroku Provisioner."""

from heroku_provisioner.core.client import (
    HerokuAPIError,
    HerokuClient,
    HerokuNotFoundError,
    build_client,
)
from heroku_provisioner.core.credentials import (
    CredentialError,
    CredentialFileError,
    Credentials,
    resolve_credentials,
)
from heroku_provisioner.core.ids import (
    InvalidIdentifierError,
    build_composite_id,
    parse_composite_id,
)
from heroku_provisioner.core.provider import HerokuProvider
from heroku_provisioner.core.state import ResourceInstance, State, StateFileError

__all__ = [
    "CredentialError",
    "CredentialFileError",
    "Credentials",
    "HerokuAPIError",
    "HerokuClient",
    "HerokuNotFoundError",
    "HerokuProvider",
    "InvalidIdentifierError",
    "ResourceInstance",
    "State",
    "StateFileError",
    "build_client",
    "build_composite_id",
    "parse_composite_id",
    "resolve_credentials",
]
