"""Compare desired resources against recorded state."""

from __future__ import annotations

import hashlib
import json
import logging
from typing import TYPE_CHECKING, Any

from heroku_provisioner.engine.types import Action, ResourceChange
from heroku_provisioner.resources.markers import (
    CompareStrategy,
    collect_compare_strategies,
    collect_sensitive_fields,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from heroku_provisioner.core.state import ResourceInstance
    from heroku_provisioner.resources.base import Resource

logger = logging.getLogger(__name__)

# Part of the address; a different name is a different resource.
_IDENTITY_FIELDS = frozenset({"name"})


def values_differ(desired: Any, prior: Any, *, strategy: CompareStrategy | None = None) -> bool:
    """Whether *desired* differs from the recorded *prior* value.

    ``"exact"`` is plain inequality. ``"set"`` ignores list order and
    duplicates. The default (``"partial"``) only looks at keys that appear in
    a desired dict, so extra attributes Heroku reports are not drift.
    """
    match strategy:
        case "exact":
            return desired != prior
        case "set" if isinstance(desired, list) and isinstance(prior, list):
            return set(desired) != set(prior)
        case "set":
            return desired != prior
    if isinstance(desired, dict) and isinstance(prior, dict):
        return any(values_differ(v, prior.get(k)) for k, v in desired.items())
    return desired != prior


def field_diff(
    resource: Resource, planned: dict[str, Any], prior: dict[str, Any]
) -> dict[str, Any]:
    strategies = collect_compare_strategies(resource)
    return {
        key: {"from": prior.get(key), "to": value}
        for key, value in planned.items()
        if key not in _IDENTITY_FIELDS
        and values_differ(value, prior.get(key), strategy=strategies.get(key))
    }


def classify_change(
    resource: Resource, prior_inst: ResourceInstance | None, deps: list[str]
) -> ResourceChange:
    """Turn one desired resource into a create, update or no-op change."""
    planned = resource.model_dump(exclude_none=True, exclude={"address", "depends_on"})
    change = ResourceChange(
        address=resource.address,
        resource_type=resource.resource_type,
        action=Action.CREATE,
        desired={**planned, "depends_on": deps},
        planned=planned,
        sensitive=collect_sensitive_fields(resource),
    )
    if prior_inst is not None:
        change.prior = dict(prior_inst.attributes)
        change.diff = field_diff(resource, planned, change.prior) or None
        change.action = Action.UPDATE if change.diff else Action.NOOP
    logger.debug("%s: %s", resource.address, change.action.value)
    return change


def config_digest(resources: Iterable[Resource]) -> str:
    """Digest of the desired configuration a plan was computed from."""
    items = sorted(
        (
            {
                "address": r.address,
                "resource_type": r.resource_type,
                "planned": r.model_dump(exclude_none=True, exclude={"address", "depends_on"}),
            }
            for r in resources
        ),
        key=lambda item: item["address"],
    )
    payload = json.dumps(items, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
