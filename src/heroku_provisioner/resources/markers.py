"""``Annotated`` metadata understood by the engine.

``Ref`` turns a field into an implicit dependency, ``Compare`` picks how the
planner diffs it, ``Sensitive`` hides its value in plan output.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias, TypeVar

M = TypeVar("M")
CompareStrategy: TypeAlias = Literal["partial", "exact", "set"]


@dataclass(frozen=True, slots=True)
class Ref:
    """The field holds the name (or names) of another declared resource.

    With ``resource_type=None`` any resource of that name matches. Names not
    declared in the configuration are allowed and add no dependency, e.g. an
    app created outside the provisioner.
    """

    resource_type: str | None = None


@dataclass(frozen=True, slots=True)
class Compare:
    strategy: CompareStrategy


@dataclass(frozen=True, slots=True)
class Sensitive:
    pass


@dataclass(frozen=True, slots=True)
class ResourceRef:
    name: str
    resource_type: str | None = None


def _marked(model_or_cls: Any, marker_type: type[M]) -> Iterator[tuple[str, M]]:
    cls = model_or_cls if isinstance(model_or_cls, type) else type(model_or_cls)
    for field_name, info in cls.model_fields.items():
        for meta in info.metadata:
            if isinstance(meta, marker_type):
                yield field_name, meta
                break


def collect_ref_specs(resource: Any) -> list[ResourceRef]:
    refs: list[ResourceRef] = []
    for field_name, marker in _marked(resource, Ref):
        value = getattr(resource, field_name)
        if value is None:
            continue
        for name in value if isinstance(value, list) else [value]:
            refs.append(ResourceRef(name=name, resource_type=marker.resource_type))
    return refs


def collect_refs(resource: Any) -> list[str]:
    return [ref.name for ref in collect_ref_specs(resource)]


def collect_compare_strategies(resource_or_cls: Any) -> dict[str, CompareStrategy]:
    return {name: marker.strategy for name, marker in _marked(resource_or_cls, Compare)}


def collect_sensitive_fields(resource_or_cls: Any) -> list[str]:
    """Fields whose values plan output replaces with ``(sensitive value)``."""
    return [name for name, _ in _marked(resource_or_cls, Sensitive)]
