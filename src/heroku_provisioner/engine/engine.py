"""Plan/apply engine."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal

from heroku_provisioner import __version__
from heroku_provisioner.core.state import State, compute_state_digest
from heroku_provisioner.engine.diff import classify_change, config_digest
from heroku_provisioner.engine.errors import (
    ApplyCanceled,
    ApplyError,
    DuplicateAddressError,
    StalePlanError,
    ValidationError,
)
from heroku_provisioner.engine.graph import DependencyGraph
from heroku_provisioner.engine.handlers import EngineContext, PlanContext
from heroku_provisioner.engine.lock import StateLock
from heroku_provisioner.engine.operations import order_operations
from heroku_provisioner.engine.types import Action, ApplyResult, Plan, PlanMetadata, ResourceChange
from heroku_provisioner.resources.markers import collect_sensitive_fields

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ResourceChange, Literal["start", "done"]], None]

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from heroku_provisioner.core import HerokuProvider
    from heroku_provisioner.engine.registry import ResourceTypeRegistry
    from heroku_provisioner.resources.base import Resource


def resolve_dependencies(desired_by_addr: dict[str, Resource]) -> dict[str, list[str]]:
    """``depends_on`` plus one edge per ``Ref`` that names a declared resource.

    An untyped ``Ref`` matches every declared resource with that name.
    """
    by_name: dict[str, list[Resource]] = {}
    for r in desired_by_addr.values():
        by_name.setdefault(r.name, []).append(r)

    deps: dict[str, list[str]] = {}
    for addr, r in desired_by_addr.items():
        edges = list(r.depends_on)
        for ref in r.references():
            for target in by_name.get(ref.name, []):
                if ref.resource_type not in (None, target.resource_type):
                    continue
                if target.address != addr and target.address not in edges:
                    edges.append(target.address)
        deps[addr] = edges
    return deps


class HerokuEngine:
    """Plans and applies declared Heroku resources against a local state file.

    Every public method that can write state holds the state lock for its
    whole duration. A plan remembers the state lineage, serial and digest it
    was computed from; applying it against anything else raises
    ``StalePlanError``.
    """

    def __init__(
        self,
        *,
        provider: HerokuProvider,
        state_path: Path,
        registry: ResourceTypeRegistry,
        lock_timeout: float = 30.0,
    ) -> None:
        self._provider = provider
        self._state_path = state_path
        self._registry = registry
        self._lock_timeout = lock_timeout

    @property
    def state_path(self) -> Path:
        return self._state_path

    def _ctx(self, plan_ctx: PlanContext | None = None) -> EngineContext:
        return EngineContext(provider=self._provider, plan=plan_ctx)

    def _lock(self) -> StateLock:
        return StateLock(self._state_path, timeout=self._lock_timeout)

    def _persist(self, state: State) -> None:
        state.bump()
        state.save(self._state_path)

    def _load_state(self) -> State:
        state = State.load_or_create(self._state_path)
        logger.debug("Loaded state serial=%d with %d resources", state.serial, len(state.resources))
        return state

    # -- refresh -----------------------------------------------------------

    def _refresh_in_place(self, state: State) -> bool:
        ctx = self._ctx()
        changed = False
        for address, inst in list(state.resources.items()):
            attrs = self._registry.get(inst.resource_type).handler.read(ctx, inst)
            if attrs is None:
                logger.info("%s is gone from Heroku; removing it from state", address)
                del state.resources[address]
                changed = True
            elif attrs != inst.attributes:
                inst.record(attrs)
                changed = True
        logger.debug("Refresh finished (changed=%s)", changed)
        return changed

    def refresh(self, *, persist: bool = False) -> tuple[State, State]:
        """Re-read every managed object; returns ``(before, after)``."""
        with self._lock():
            state = self._load_state()
            before = state.model_copy(deep=True)
            if self._refresh_in_place(state) and persist:
                self._persist(state)
            return before, state

    # -- validation --------------------------------------------------------

    def _index_desired(self, resources: Iterable[Resource]) -> dict[str, Resource]:
        desired_by_addr: dict[str, Resource] = {}
        for r in resources:
            self._registry.get(r.resource_type)
            if r.address in desired_by_addr:
                raise DuplicateAddressError(r.address)
            desired_by_addr[r.address] = r
        return desired_by_addr

    def _validate(self, desired_by_addr: dict[str, Resource], state: State) -> None:
        ctx = self._ctx()
        plan_ctx = PlanContext(desired_by_addr, state)
        errors: list[str] = []
        for r in desired_by_addr.values():
            errors.extend(self._registry.get(r.resource_type).handler.validate(ctx, r))
        for r in desired_by_addr.values():
            handler = self._registry.get(r.resource_type).handler
            errors.extend(handler.validate_plan(ctx, r, plan_ctx))
        errors.extend(
            f"Resource '{r.address}' depends on unknown address '{dep}'"
            for r in desired_by_addr.values()
            for dep in r.depends_on
            if not plan_ctx.address_exists(dep)
        )
        if errors:
            raise ValidationError(errors)

    def validate(self, resources: Sequence[Resource]) -> None:
        """Offline checks only: no API calls and no lock."""
        self._validate(self._index_desired(resources), self._load_state())

    # -- plan --------------------------------------------------------------

    def _priority(self, resource_type: str) -> int:
        return self._registry.get(resource_type).model.plan_priority

    def _delete_changes(self, state: State, addrs: set[str]) -> list[ResourceChange]:
        graph = DependencyGraph(
            addrs,
            {a: state.resources[a].dependencies for a in addrs},
            priorities={a: self._priority(state.resources[a].resource_type) for a in addrs},
        )
        changes = []
        for addr in graph.reverse_topological_order():
            inst = state.resources[addr]
            model = self._registry.get(inst.resource_type).model
            changes.append(
                ResourceChange(
                    address=addr,
                    resource_type=inst.resource_type,
                    action=Action.DELETE,
                    prior=dict(inst.attributes),
                    sensitive=collect_sensitive_fields(model),
                )
            )
        return changes

    def _upsert_changes(
        self, desired_by_addr: dict[str, Resource], state: State
    ) -> list[ResourceChange]:
        deps = resolve_dependencies(desired_by_addr)
        graph = DependencyGraph(
            desired_by_addr,
            deps,
            priorities={a: r.plan_priority for a, r in desired_by_addr.items()},
        )
        return [
            classify_change(desired_by_addr[addr], state.resources.get(addr), deps[addr])
            for addr in graph.topological_order()
        ]

    def plan(
        self, resources: Sequence[Resource], *, destroy: bool = False, refresh: bool = True
    ) -> Plan:
        logger.info(
            "Planning %d resources (destroy=%s, refresh=%s)", len(resources), destroy, refresh
        )
        # A refresh may rewrite state, so only then is the lock needed.
        with self._lock() if refresh else contextlib.nullcontext():
            state = self._load_state()
            if refresh and self._refresh_in_place(state):
                self._persist(state)

            desired_by_addr = self._index_desired(resources)
            if destroy:
                changes = self._delete_changes(state, set(state.resources))
            else:
                self._validate(desired_by_addr, state)
                changes = self._upsert_changes(desired_by_addr, state)
                changes += self._delete_changes(state, set(state.resources) - set(desired_by_addr))

            plan = Plan(
                metadata=PlanMetadata(
                    created_at=datetime.now(UTC),
                    destroy=destroy,
                    refresh=refresh,
                    state_lineage=state.lineage,
                    state_serial=state.serial,
                    state_digest=compute_state_digest(state),
                    config_digest=config_digest([] if destroy else resources),
                    engine_version=__version__,
                ),
                changes=changes,
            )
            logger.info("Plan: %s", plan.summary())
            return plan

    # -- apply -------------------------------------------------------------

    def _state_for_plan(self, plan: Plan) -> State:
        if not self._state_path.exists():
            # First apply: adopt the lineage the plan was computed against.
            state = State(lineage=plan.metadata.state_lineage, serial=plan.metadata.state_serial)
        else:
            state = self._load_state()

        meta = plan.metadata
        for what, now, planned in (
            ("lineage", state.lineage, meta.state_lineage),
            ("serial", state.serial, meta.state_serial),
            ("digest", compute_state_digest(state), meta.state_digest),
        ):
            if now != planned:
                raise StalePlanError(f"State {what} changed since planning; run plan again")
        return state

    def _planned_resources(self, plan: Plan) -> dict[str, Resource]:
        """Resources the plan keeps or creates, rebuilt from their desired values."""
        return {
            c.address: self._registry.get(c.resource_type).model.model_validate(c.desired)
            for c in plan.changes
            if c.action is not Action.DELETE and c.desired is not None
        }

    def apply(self, plan: Plan, *, progress: ProgressCallback | None = None) -> ApplyResult:
        """Run *plan*, saving state after every operation that changed it.

        On failure the raised ``ApplyError`` carries what was applied so far.
        """
        with self._lock():
            state = self._state_for_plan(plan)
            ctx = self._ctx(PlanContext(self._planned_resources(plan), state))
            ops = order_operations(plan, state, self._registry)
            applied: list[ResourceChange] = []
            logger.info("Applying %d operations", len(ops))

            current = ""
            try:
                for op in ops:
                    current = op.key
                    if progress and op.change is not None:
                        progress(op.change, "start")
                    if not op.run(ctx=ctx, state=state, registry=self._registry):
                        continue
                    assert op.change is not None
                    self._persist(state)
                    applied.append(op.change)
                    if progress:
                        progress(op.change, "done")
            except KeyboardInterrupt as e:  # pragma: no cover
                raise ApplyCanceled("Apply canceled") from e
            except Exception as e:
                raise ApplyError(applied=applied, address=current, message=str(e)) from e

            return ApplyResult(applied=applied)
