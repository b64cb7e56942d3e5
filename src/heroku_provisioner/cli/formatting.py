"""Plan and apply output rendering (Terraform-style)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NamedTuple

import typer

from heroku_provisioner.engine.types import Action

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from heroku_provisioner.engine.types import Plan, ResourceChange

SENSITIVE_PLACEHOLDER = "(sensitive value)"


class _ActionStyle(NamedTuple):
    color: str
    symbol: str
    progress_verb: str
    done_verb: str
    description: str


ACTION_STYLES: dict[str, _ActionStyle] = {
    "create": _ActionStyle("green", "+", "Creating", "Creation complete", "will be created"),
    "update": _ActionStyle("yellow", "~", "Updating", "Update complete", "will be updated"),
    "delete": _ActionStyle("red", "-", "Destroying", "Destroy complete", "will be destroyed"),
    "no-op": _ActionStyle("bright_black", " ", "", "", "is up-to-date"),
}


def styler(color: bool) -> Callable[..., str]:
    """Return ``typer.style`` when *color* is True, otherwise a passthrough."""
    if color:
        return typer.style
    return lambda text, **_kw: text


def _format_value(value: Any, *, sensitive: bool = False) -> str:
    if sensitive:
        return SENSITIVE_PLACEHOLDER
    if isinstance(value, str):
        return f'"{value}"'
    if value is None:
        return "null"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, list):
        return "[" + ", ".join(_format_value(v) for v in value) + "]"
    return str(value)


def _flatten(key: str, value: Any) -> Iterable[tuple[str, Any]]:
    """Yield ``(key, value)`` pairs, expanding one level of mapping as ``key.sub``."""
    if isinstance(value, dict) and value:
        for sub in sorted(value):
            yield f"{key}.{sub}", value[sub]
    else:
        yield key, value


def _map_diff(key: str, old: Any, new: Any) -> Iterable[tuple[str, Any, Any]]:
    """Per-key ``(key.sub, old, new)`` triples when both sides are mappings."""
    if not (isinstance(old, dict) and isinstance(new, dict)):
        yield key, old, new
        return
    for sub in sorted(set(old) | set(new)):
        if old.get(sub) != new.get(sub):
            yield f"{key}.{sub}", old.get(sub), new.get(sub)


def _change_lines(change: ResourceChange) -> list[tuple[str, str]]:
    """Displayable ``(key, formatted value)`` pairs; ``change.sensitive`` fields are masked."""
    hidden = set(change.sensitive)
    lines: list[tuple[str, str]] = []

    if change.action == Action.CREATE and change.planned:
        for field, value in change.planned.items():
            masked = field in hidden
            lines.extend((k, _format_value(v, sensitive=masked)) for k, v in _flatten(field, value))
    elif change.action == Action.UPDATE and change.diff:
        for field, d in change.diff.items():
            masked = field in hidden
            for k, old, new in _map_diff(field, d["from"], d["to"]):
                rendered_old = _format_value(old, sensitive=masked and old is not None)
                rendered_new = _format_value(new, sensitive=masked and new is not None)
                lines.append((k, f"{rendered_old} -> {rendered_new}"))
    elif change.action == Action.DELETE and change.prior:
        resource_id = change.prior.get("id")
        if resource_id is not None:
            lines.append(("id", _format_value(resource_id)))
    return lines


def format_change(change: ResourceChange, *, color: bool = True) -> str:
    """Render a single ResourceChange as a Terraform-style block."""
    style = styler(color)
    action_style = ACTION_STYLES[change.action.value]
    fg = action_style.color
    symbol = action_style.symbol

    name = change.address.split(".", 1)[1] if "." in change.address else change.address
    attrs = _change_lines(change)
    width = max((len(k) for k, _ in attrs), default=0)

    lines = [
        style(f"  # {change.address} {action_style.description}", bold=True, fg=fg),
        style(f'  {symbol} resource "{change.resource_type}" "{name}" {{', fg=fg),
        *[style(f"      {symbol} {k.ljust(width)} = {v}", fg=fg) for k, v in attrs],
        style("    }", fg=fg),
    ]
    return "\n".join(lines)


def format_changes(changes: list[ResourceChange], *, color: bool = True) -> str:
    """Render a list of changes as Terraform-style diff blocks."""
    blocks = [format_change(c, color=color) for c in changes if c.action != Action.NOOP]
    if not blocks:
        return "No changes. Resources are up-to-date."
    return "\n\n".join(blocks)


def format_plan(plan: Plan, *, color: bool = True) -> str:
    """Render the full plan output with per-change diff blocks."""
    return format_changes(plan.changes, color=color)


_PLAN_VERBS = ("to add", "to change", "to destroy")
_APPLY_VERBS = ("added", "changed", "destroyed")
_SUMMARY_COLORS = ("green", "yellow", "red")


def changes_summary(changes: list[ResourceChange]) -> dict[str, int]:
    """Count changes by action type (create/update/delete)."""
    summary = {"create": 0, "update": 0, "delete": 0}
    for c in changes:
        if c.action != Action.NOOP:
            summary[c.action.value] += 1
    return summary


def _format_counts(summary: dict[str, int], verbs: tuple[str, ...], *, color: bool) -> str:
    style = styler(color)
    counts = (summary.get("create", 0), summary.get("update", 0), summary.get("delete", 0))
    return ", ".join(
        style(f"{n} {verb}", fg=fg) if n else f"{n} {verb}"
        for n, verb, fg in zip(counts, verbs, _SUMMARY_COLORS, strict=True)
    )


def format_plan_summary(
    summary: dict[str, int], *, color: bool = True, header: str = "Plan"
) -> str:
    """Render ``Plan: 2 to add, 1 to change, 0 to destroy.``"""
    return f"{header}: {_format_counts(summary, _PLAN_VERBS, color=color)}."


def format_apply_summary(summary: dict[str, int], *, color: bool = True) -> str:
    """Render ``Apply complete! Resources: 2 added, 0 changed, 0 destroyed.``"""
    header = styler(color)("Apply complete!", fg="green", bold=True)
    return f"{header} Resources: {_format_counts(summary, _APPLY_VERBS, color=color)}."
