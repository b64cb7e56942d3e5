"""Load a YAML configuration and run the engine against it.

Typical use::

    cfg = load("heroku-provisioner.yaml")
    p = plan(cfg)
    if p.has_changes():
        apply(p, cfg)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import SecretStr

from heroku_provisioner.config.loader import ConfigError, load_config, parse_headers
from heroku_provisioner.config.registry import default_registry
from heroku_provisioner.config.schema import Config, ProviderConfig
from heroku_provisioner.core.provider import HerokuProvider
from heroku_provisioner.core.state import State
from heroku_provisioner.engine.engine import HerokuEngine, ProgressCallback
from heroku_provisioner.engine.lock import StateLock
from heroku_provisioner.engine.types import Action, ResourceChange
from heroku_provisioner.resources.markers import collect_sensitive_fields

if TYPE_CHECKING:
    from pathlib import Path
    from typing import Any

    from heroku_provisioner.engine.registry import ResourceTypeRegistry
    from heroku_provisioner.engine.types import ApplyResult, Plan

__all__ = [
    "Config",
    "ConfigError",
    "ProviderConfig",
    "State",
    "apply",
    "drift",
    "load",
    "load_config",
    "parse_headers",
    "plan",
    "plan_and_apply",
    "refresh",
    "save_state",
    "validate",
]


def load(path: Path | str) -> Config:
    return load_config(path)


def _engine(config: Config) -> HerokuEngine:
    # Credentials resolve lazily on the first API call, so validate and
    # --no-refresh plans work without a netrc file.
    p = config.provider
    provider = HerokuProvider(
        email=p.email,
        api_key=SecretStr(p.api_key) if p.api_key else None,
        headers=p.headers,
        url=p.url,
        debug_http=p.debug_http,
    )
    return HerokuEngine(
        provider=provider, state_path=config.state_path, registry=default_registry()
    )


def validate(config: Config) -> None:
    """Offline checks; raises ``ValidationError`` listing every problem."""
    _engine(config).validate(config.resources)


def plan(config: Config, *, destroy: bool = False, refresh: bool = True) -> Plan:
    return _engine(config).plan(config.resources, destroy=destroy, refresh=refresh)


def apply(
    plan_obj: Plan, config: Config, *, progress: ProgressCallback | None = None
) -> ApplyResult:
    return _engine(config).apply(plan_obj, progress=progress)


def plan_and_apply(config: Config, *, destroy: bool = False, refresh: bool = True) -> ApplyResult:
    return apply(plan(config, destroy=destroy, refresh=refresh), config)


def refresh(config: Config) -> tuple[list[ResourceChange], State]:
    """Re-read every managed object without saving.

    Returns the drift found and the refreshed state; pass the state to
    :func:`save_state` to keep it.
    """
    before, after = _engine(config).refresh()
    return _drift_changes(before, after), after


def save_state(config: Config, state: State) -> None:
    with StateLock(config.state_path):
        state.bump()
        state.save(config.state_path)


def drift(config: Config) -> list[ResourceChange]:
    """Differences between the state file and what Heroku reports now."""
    return refresh(config)[0]


def _attr_diff(old: dict[str, Any], new: dict[str, Any]) -> dict[str, Any]:
    return {
        k: {"from": old.get(k), "to": new.get(k)}
        for k in sorted(old.keys() | new.keys())
        if old.get(k) != new.get(k)
    }


def _drift_changes(before: State, after: State) -> list[ResourceChange]:
    registry = default_registry()
    changes: list[ResourceChange] = []
    for addr, old in sorted(before.resources.items()):
        new = after.resources.get(addr)
        if new is not None and new.attributes == old.attributes:
            continue
        changes.append(
            ResourceChange(
                address=addr,
                resource_type=old.resource_type,
                action=Action.DELETE if new is None else Action.UPDATE,
                prior=dict(old.attributes),
                planned=None if new is None else dict(new.attributes),
                diff=None if new is None else _attr_diff(old.attributes, new.attributes),
                sensitive=_sensitive(registry, old.resource_type),
            )
        )
    return changes


def _sensitive(registry: ResourceTypeRegistry, resource_type: str) -> list[str]:
    if resource_type in registry:
        return collect_sensitive_fields(registry.get(resource_type).model)
    return []
