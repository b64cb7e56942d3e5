"""Local JSON state: what the provisioner last saw on Heroku, per address."""

import contextlib
import hashlib
import json
import logging
import os
import shutil
import tempfile
import uuid
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pydantic
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

STATE_FORMAT_VERSION = 1


class StateFileError(Exception):
    """The state file exists but cannot be used."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"{path}: {reason}")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _fingerprint(obj: Any) -> str:
    # default=str covers datetimes and paths nested in attributes
    text = json.dumps(obj, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def compute_attributes_hash(attrs: Mapping[str, Any]) -> str:
    """Key-order independent SHA256 of a resource's recorded attributes."""
    return _fingerprint(dict(attrs))


class ResourceInstance(BaseModel):
    """One managed Heroku object as recorded after the last create/update/read.

    ``attributes["id"]`` holds the platform UUID, or the composite ID for
    resources Heroku does not identify on its own (features, collaborators,
    config vars).
    """

    address: str
    resource_type: str
    name: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    attributes_hash: str = ""
    dependencies: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def resource_id(self) -> str | None:
        return self.attributes.get("id")

    def record(self, attrs: dict[str, Any], dependencies: Iterable[str] | None = None) -> None:
        """Replace the recorded attributes and stamp the update time."""
        self.attributes = attrs
        self.attributes_hash = compute_attributes_hash(attrs)
        if dependencies is not None:
            self.dependencies = list(dependencies)
        self.updated_at = _utcnow()


class State(BaseModel):
    """Everything the provisioner manages, keyed by address.

    ``serial`` goes up on every persisted change; ``lineage`` is fixed when
    the file is first created. Plans remember both so a plan computed against
    another state is refused at apply time.
    """

    version: int = STATE_FORMAT_VERSION
    serial: int = 0
    lineage: str = Field(default_factory=lambda: str(uuid.uuid4()))
    resources: dict[str, ResourceInstance] = Field(default_factory=dict)

    def bump(self) -> None:
        self.serial += 1

    def save(self, path: Path) -> None:
        """Write the state atomically, keeping the previous file as ``<path>.backup``."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with contextlib.suppress(FileNotFoundError):
            shutil.copyfile(path, backup_path(path))

        text = json.dumps(self.model_dump(mode="json"), indent=2, sort_keys=True) + "\n"
        _write_atomic(path, text)
        logger.debug(
            "Wrote state serial=%d (%d resources) to %s", self.serial, len(self.resources), path
        )

    @classmethod
    def load(cls, path: Path) -> "State":
        try:
            state = cls.model_validate_json(path.read_text(encoding="utf-8"))
        except pydantic.ValidationError as exc:
            raise StateFileError(path, f"invalid state file ({exc.error_count()} errors)") from exc
        if state.version > STATE_FORMAT_VERSION:
            raise StateFileError(
                path,
                f"state format version {state.version} is newer than supported "
                f"version {STATE_FORMAT_VERSION}",
            )
        logger.debug("Read state serial=%d from %s", state.serial, path)
        return state

    @classmethod
    def load_or_create(cls, path: Path) -> "State":
        if not path.exists():
            logger.debug("No state file at %s", path)
            return cls()
        return cls.load(path)


def backup_path(path: Path) -> Path:
    return path.with_name(path.name + ".backup")


def _write_atomic(path: Path, text: str) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
        tmp.replace(path)
    finally:
        with contextlib.suppress(FileNotFoundError):
            tmp.unlink()


def compute_state_digest(state: State) -> str:
    """Digest of everything a plan depends on.

    Timestamps are excluded; a refresh that only touches ``updated_at`` does
    not invalidate a saved plan.
    """
    return _fingerprint(
        {
            "version": state.version,
            "lineage": state.lineage,
            "serial": state.serial,
            "resources": [
                [a, i.resource_type, i.name, i.attributes_hash, sorted(i.dependencies)]
                for a, i in sorted(state.resources.items())
            ],
        }
    )
