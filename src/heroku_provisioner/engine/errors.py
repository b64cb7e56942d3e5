"""Exceptions raised by the plan/apply engine and the resource handlers."""

from __future__ import annotations

from typing import Any


class EngineError(Exception):
    pass


class UnknownResourceTypeError(EngineError):
    def __init__(self, resource_type: str) -> None:
        self.resource_type = resource_type
        super().__init__(f"Unknown resource type: {resource_type}")


class DuplicateAddressError(EngineError):
    """Two declared resources resolve to the same ``<type>.<name>`` address."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Duplicate resource address: {address}")


class DependencyCycleError(EngineError):
    def __init__(self, addresses: list[str]) -> None:
        self.addresses = addresses
        detail = f": {', '.join(addresses)}" if addresses else ""
        super().__init__(f"Dependency cycle detected{detail}")


class StalePlanError(EngineError):
    """State moved on between plan and apply."""


class StateLockError(EngineError):
    """The state lock could not be taken or released."""


class ValidationError(EngineError):
    """Offline checks failed; ``errors`` holds one message per problem."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Validation failed:\n" + "\n".join(f"  - {e}" for e in errors))


class RemoteAPIError(EngineError):
    """A Heroku API call made on behalf of *address* failed.

    ``status_code`` is the HTTP status when the API answered at all; the
    original ``HerokuAPIError`` is the ``__cause__``.
    """

    def __init__(self, address: str, message: str, *, status_code: int | None = None) -> None:
        self.address = address
        self.message = message
        self.status_code = status_code
        super().__init__(f"{address}: {message}")


class UnsupportedChangeError(EngineError):
    """A field Heroku only accepts at creation time was changed."""

    def __init__(self, address: str, field: str) -> None:
        self.address = address
        self.field = field
        super().__init__(
            f"{address}: '{field}' cannot be changed in place; "
            "remove the resource and declare a new one"
        )


class ApplyError(EngineError):
    """Apply stopped at *address*.

    ``result`` lists the changes that were applied (and saved to state)
    before the failure.
    """

    def __init__(self, *, applied: list[Any], address: str, message: str) -> None:
        from heroku_provisioner.engine.types import ApplyResult

        self.result = ApplyResult(applied=applied)
        self.address = address
        super().__init__(f"Apply failed on {address}: {message}")


class ApplyCanceled(EngineError):
    """Apply was interrupted (Ctrl-C)."""
