"""Handler base class and the helpers the Heroku handlers share."""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from heroku_provisioner.core.client import HerokuAPIError, HerokuNotFoundError
from heroku_provisioner.core.state import ResourceInstance
from heroku_provisioner.engine.errors import RemoteAPIError, UnsupportedChangeError
from heroku_provisioner.resources.base import Resource

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    from heroku_provisioner.core import HerokuClient, HerokuProvider
    from heroku_provisioner.core.state import State

R = TypeVar("R", bound=Resource)
T = TypeVar("T")


@dataclass(frozen=True)
class EngineContext:
    """What handlers get on every call.

    During apply, ``plan`` holds the resources the running plan declares, so a
    handler can tell what the other resources are about to own.
    """

    provider: HerokuProvider
    plan: PlanContext | None = None

    @property
    def client(self) -> HerokuClient:
        """API client, built on first use."""
        return self.provider.client


class PlanContext:
    """Desired resources and recorded state, looked up by name.

    A declared resource shadows the state entry at the same address. Names
    may repeat across resource types, so lookups take an optional type.
    """

    def __init__(self, all_desired: Mapping[str, Resource], state: State) -> None:
        self._desired = dict(all_desired)
        self._addresses = set(all_desired) | set(state.resources)
        self._by_name: dict[str, list[Resource | ResourceInstance]] = {}
        for r in self._desired.values():
            self._by_name.setdefault(r.name, []).append(r)
        for addr, inst in state.resources.items():
            if addr not in self._desired:
                self._by_name.setdefault(inst.name, []).append(inst)

    def address_exists(self, address: str) -> bool:
        return address in self._addresses

    def get_attr(self, name: str, attr: str, *, resource_type: str | None = None) -> Any:
        """Attribute of the first resource called *name*, or ``None``."""
        for item in self._by_name.get(name, []):
            if resource_type is None or item.resource_type == resource_type:
                if isinstance(item, ResourceInstance):
                    return item.attributes.get(attr)
                return getattr(item, attr, None)
        return None

    def desired_of_type(self, resource_type: str) -> list[Resource]:
        return [r for _, r in sorted(self._desired.items()) if r.resource_type == resource_type]


class ResourceHandler(Generic[R]):
    """Translates one resource type into Heroku API calls.

    ``read``, ``create``, ``update`` and ``delete`` must be overridden;
    ``create``/``update``/``read`` return the attributes to record in state.
    The two validation hooks run offline and return error messages.
    """

    def validate(self, ctx: EngineContext, desired: R) -> list[str]:
        _ = ctx, desired
        return []

    def validate_plan(self, ctx: EngineContext, desired: R, plan_ctx: PlanContext) -> list[str]:
        """Checks that need the other declared resources or the state."""
        _ = ctx, desired, plan_ctx
        return []

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> dict[str, Any] | None:
        """Current attributes, or ``None`` when the object is gone."""
        raise NotImplementedError

    def create(self, ctx: EngineContext, desired: R) -> dict[str, Any]:
        raise NotImplementedError

    def update(self, ctx: EngineContext, desired: R, prior: ResourceInstance) -> dict[str, Any]:
        raise NotImplementedError

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        raise NotImplementedError


# -- Helpers shared by the Heroku handlers -------------------------------------


@contextlib.contextmanager
def remote_call(address: str, action: str) -> Iterator[None]:
    """Re-raise API failures as :class:`RemoteAPIError` naming the resource."""
    try:
        yield
    except HerokuAPIError as exc:
        raise RemoteAPIError(
            address, f"{action} failed: {exc.message}", status_code=exc.status_code
        ) from exc


def read_or_none(fn: Callable[[], T]) -> T | None:
    """Run a read call, mapping a 404 to ``None``."""
    try:
        return fn()
    except HerokuNotFoundError:
        return None


def ignore_not_found(fn: Callable[[], Any]) -> None:
    """Run a delete call; an object that is already gone counts as deleted."""
    with contextlib.suppress(HerokuNotFoundError):
        fn()


def changed_fields(desired: Resource, prior: ResourceInstance, fields: tuple[str, ...]) -> set[str]:
    """Names in *fields* whose desired value differs from the stored attribute."""
    return {f for f in fields if getattr(desired, f) != prior.attributes.get(f)}


def reject_changes(
    desired: Resource, prior: ResourceInstance, fixed_fields: tuple[str, ...]
) -> None:
    """Raise if any field that is fixed at creation time was changed."""
    for field in fixed_fields:
        value = getattr(desired, field)
        if value is not None and value != prior.attributes.get(field):
            raise UnsupportedChangeError(desired.address, field)
