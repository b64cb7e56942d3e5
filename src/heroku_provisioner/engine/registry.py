"""Which model and handler serve each ``resource_type``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from heroku_provisioner.engine.errors import UnknownResourceTypeError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from heroku_provisioner.engine.handlers import ResourceHandler
    from heroku_provisioner.resources.base import Resource


@dataclass(frozen=True)
class ResourceTypeRegistration:
    resource_type: str
    model: type[Resource]
    handler: ResourceHandler[Any]


class ResourceTypeRegistry:
    def __init__(self) -> None:
        self._by_type: dict[str, ResourceTypeRegistration] = {}

    def register(self, model: type[Resource], handler: ResourceHandler[Any]) -> None:
        """Serve *model*'s ``resource_type`` with *handler*; each type registers once."""
        resource_type = getattr(model, "resource_type", None)
        if not resource_type or not isinstance(resource_type, str):
            raise ValueError(f"{model.__name__} has no resource_type")
        if resource_type in self._by_type:
            raise ValueError(f"Resource type already registered: {resource_type}")
        self._by_type[resource_type] = ResourceTypeRegistration(resource_type, model, handler)

    def get(self, resource_type: str) -> ResourceTypeRegistration:
        if resource_type not in self._by_type:
            raise UnknownResourceTypeError(resource_type)
        return self._by_type[resource_type]

    def __contains__(self, resource_type: object) -> bool:
        return resource_type in self._by_type

    def __iter__(self) -> Iterator[ResourceTypeRegistration]:
        return (self._by_type[t] for t in sorted(self._by_type))
