"""The apply graph.

Each non-noop change becomes a ``ChangeOperation``. Creates and updates run
dependencies first, deletes run dependents first, and a ``PhaseBarrier`` makes
every create/update finish before the first delete.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from heroku_provisioner.core.state import ResourceInstance
from heroku_provisioner.engine.graph import DependencyGraph
from heroku_provisioner.engine.types import Action

if TYPE_CHECKING:
    from heroku_provisioner.core.state import State
    from heroku_provisioner.engine.handlers import EngineContext
    from heroku_provisioner.engine.registry import ResourceTypeRegistry
    from heroku_provisioner.engine.types import Plan, ResourceChange
    from heroku_provisioner.resources.base import Resource

logger = logging.getLogger(__name__)

BARRIER_KEY = "__engine__.apply_barrier"
_DONE = {Action.CREATE: "Created", Action.UPDATE: "Updated"}


class Operation(Protocol):
    key: str
    deps: list[str]
    change: ResourceChange | None

    def run(self, *, ctx: EngineContext, state: State, registry: ResourceTypeRegistry) -> bool:
        """Apply the operation; return True when *state* was modified."""


@dataclass
class PhaseBarrier:
    key: str
    deps: list[str] = field(default_factory=list)
    change: ResourceChange | None = None

    def run(self, *, ctx: EngineContext, state: State, registry: ResourceTypeRegistry) -> bool:
        _ = ctx, state, registry
        return False


@dataclass
class ChangeOperation:
    key: str
    change: ResourceChange
    deps: list[str] = field(default_factory=list)

    def run(self, *, ctx: EngineContext, state: State, registry: ResourceTypeRegistry) -> bool:
        change = self.change
        reg = registry.get(change.resource_type)

        if change.action is Action.DELETE:
            reg.handler.delete(ctx, state.resources[change.address])
            del state.resources[change.address]
            logger.info("Destroyed %s", change.address)
            return True

        desired = self._desired(reg.model)
        if change.action is Action.CREATE:
            attrs = reg.handler.create(ctx, desired)
            inst = ResourceInstance(
                address=change.address, resource_type=change.resource_type, name=desired.name
            )
            state.resources[change.address] = inst
        else:
            inst = state.resources[change.address]
            attrs = reg.handler.update(ctx, desired, inst)
        inst.record(attrs, desired.depends_on)
        logger.info("%s %s (id=%s)", _DONE[change.action], change.address, inst.resource_id)
        return True

    def _desired(self, model: type[Resource]) -> Resource:
        if self.change.desired is None:
            raise ValueError(
                f"{self.change.address}: plan has no desired values to {self.change.action.value}"
            )
        desired = model.model_validate(self.change.desired)
        if desired.address != self.change.address:
            raise ValueError(f"{self.change.address}: desired values describe {desired.address}")
        return desired


def _change_deps(change: ResourceChange) -> list[str]:
    deps = (change.desired or {}).get("depends_on") or []
    if not isinstance(deps, list) or not all(isinstance(d, str) for d in deps):
        raise ValueError(f"{change.address}: depends_on must be a list of addresses")
    return deps


def build_operations(plan: Plan, state: State) -> dict[str, Operation]:
    ops: dict[str, Operation] = {}
    for change in plan.changes:
        if change.action is Action.NOOP:
            continue
        if change.address in ops or change.address == BARRIER_KEY:
            raise ValueError(f"Address appears twice in plan: {change.address}")
        ops[change.address] = ChangeOperation(key=change.address, change=change)

    upserts = {k for k, op in ops.items() if op.change and op.change.action is not Action.DELETE}
    deletes = set(ops) - upserts

    for key in upserts:
        op = ops[key]
        assert op.change is not None
        op.deps.extend(d for d in _change_deps(op.change) if d in upserts)

    for key in deletes:
        inst = state.resources.get(key)
        if inst is None:
            raise ValueError(f"{key}: planned for delete but not in state")
        for dep in inst.dependencies:
            if dep in deletes:
                ops[dep].deps.append(key)

    if upserts and deletes:
        ops[BARRIER_KEY] = PhaseBarrier(key=BARRIER_KEY, deps=sorted(upserts))
        for key in deletes:
            ops[key].deps.append(BARRIER_KEY)
    return ops


def order_operations(plan: Plan, state: State, registry: ResourceTypeRegistry) -> list[Operation]:
    """Deterministic run order for *plan* against *state*."""
    ops = build_operations(plan, state)
    priorities = {
        key: registry.get(op.change.resource_type).model.plan_priority
        for key, op in ops.items()
        if op.change is not None
    }
    graph = DependencyGraph(ops, {k: op.deps for k, op in ops.items()}, priorities=priorities)
    return [ops[k] for k in graph.topological_order()]
