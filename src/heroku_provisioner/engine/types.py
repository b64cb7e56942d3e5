"""Plan, change and apply-result models shared by the engine and the CLI."""

from __future__ import annotations

import json
from collections import Counter
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from collections.abc import Iterable


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "no-op"


def _count_actions(changes: Iterable[ResourceChange]) -> dict[str, int]:
    seen = Counter(c.action.value for c in changes)
    return {a.value: seen.get(a.value, 0) for a in Action}


class PlanMetadata(BaseModel):
    """Where a plan came from; apply refuses plans whose state no longer matches."""

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    destroy: bool
    refresh: bool
    state_lineage: str
    state_serial: int
    state_digest: str
    config_digest: str
    engine_version: str


class ResourceChange(BaseModel):
    """What happens to one address.

    ``desired`` is the full resource dump (including resolved ``depends_on``),
    ``prior`` the attributes recorded in state and ``diff`` maps each changed
    field to ``{"from": ..., "to": ...}``. Values of fields listed in
    ``sensitive`` are never printed.
    """

    address: str
    resource_type: str
    action: Action
    desired: dict[str, Any] | None = None
    prior: dict[str, Any] | None = None
    planned: dict[str, Any] | None = None
    diff: dict[str, Any] | None = None
    sensitive: list[str] = Field(default_factory=list)

    @property
    def changed_keys(self) -> list[str]:
        return sorted(self.diff or {})


class Plan(BaseModel):
    metadata: PlanMetadata
    changes: list[ResourceChange]

    def summary(self) -> dict[str, int]:
        return _count_actions(self.changes)

    def has_changes(self) -> bool:
        return any(c.action is not Action.NOOP for c in self.changes)

    def save(self, path: Path) -> None:
        """Write the plan as JSON so ``apply --plan`` can pick it up later."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(self.model_dump(mode="json"), indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )

    @classmethod
    def load(cls, path: Path) -> Plan:
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))


class ApplyResult(BaseModel):
    applied: list[ResourceChange] = Field(default_factory=list)

    def summary(self) -> dict[str, int]:
        return _count_actions(self.applied)
