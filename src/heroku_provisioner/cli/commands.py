"""The ``plan``, ``apply``, ``destroy``, ``refresh``, ``drift`` and ``validate`` commands."""

from __future__ import annotations

import contextlib
import os
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Literal

import typer

from heroku_provisioner.cli import app
from heroku_provisioner.cli.errors import handle_error

if TYPE_CHECKING:
    from collections.abc import Iterator

    from heroku_provisioner.config.schema import Config
    from heroku_provisioner.engine.types import ApplyResult, Plan

DEFAULT_CONFIG = Path("heroku-provisioner.yaml")

ConfigPath = Annotated[
    Path,
    typer.Option("--config", "-c", help="Path to the configuration file."),
]
NoColor = Annotated[bool, typer.Option("--no-color", help="Disable colored output.")]
AutoApprove = Annotated[bool, typer.Option("--auto-approve", help="Skip interactive approval.")]
NoRefresh = Annotated[
    bool,
    typer.Option("--no-refresh", help="Plan against the state file without reading Heroku."),
]


def _use_color(no_color: bool) -> bool:
    return not (no_color or os.environ.get("NO_COLOR"))


@contextlib.contextmanager
def _exit_on_error(color: bool) -> Iterator[None]:
    """Print any failure inside the block and exit 1."""
    try:
        yield
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc


def _ask(question: str, canceled: str) -> None:
    try:
        typer.confirm(question, abort=True)
    except typer.Abort as e:
        typer.echo(canceled, err=True)
        raise typer.Exit(1) from e


def _load(ctx: typer.Context, path: Path) -> Config:
    from heroku_provisioner.config import load

    cfg = load(path)
    # -vv also logs every Heroku API request.
    if (ctx.obj or {}).get("verbose", 0) >= 2:
        cfg.provider.debug_http = True
    return cfg


def _apply_with_progress(plan_obj: Plan, cfg: Config, *, color: bool) -> ApplyResult:
    from rich.console import Console
    from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

    from heroku_provisioner.cli.formatting import ACTION_STYLES
    from heroku_provisioner.config import apply
    from heroku_provisioner.engine.types import ResourceChange

    total = sum(n for action, n in plan_obj.summary().items() if action != "no-op")
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=Console(no_color=not color),
    ) as bar:
        task = bar.add_task("Applying", total=total)

        def on_progress(change: ResourceChange, event: Literal["start", "done"]) -> None:
            style = ACTION_STYLES[change.action.value]
            if event == "start":
                bar.update(task, description=f"{change.address}: {style.progress_verb}...")
                return
            bar.console.print(f"  {change.address}: {style.done_verb}")
            bar.advance(task)

        return apply(plan_obj, cfg, progress=on_progress)


def _show_and_apply(
    plan_obj: Plan,
    cfg: Config,
    *,
    color: bool,
    auto_approve: bool,
    question: str,
    nothing_to_do: str,
) -> None:
    from heroku_provisioner.cli.formatting import (
        format_apply_summary,
        format_plan,
        format_plan_summary,
    )

    if not plan_obj.has_changes():
        typer.echo(nothing_to_do)
        raise typer.Exit(0)

    typer.echo(format_plan(plan_obj, color=color))
    typer.echo()
    typer.echo(format_plan_summary(plan_obj.summary(), color=color))
    typer.echo()
    if not auto_approve:
        _ask(question, "Apply canceled.")

    with _exit_on_error(color):
        result = _apply_with_progress(plan_obj, cfg, color=color)
    typer.echo()
    typer.echo(format_apply_summary(result.summary(), color=color))


@app.command()
def plan(
    ctx: typer.Context,
    config: ConfigPath = DEFAULT_CONFIG,
    out: Annotated[Path | None, typer.Option("--out", "-o", help="Save plan to file.")] = None,
    no_color: NoColor = False,
    no_refresh: NoRefresh = False,
) -> None:
    """Show what apply would change. Exits 2 when there is something to change."""
    from heroku_provisioner.cli.formatting import format_plan, format_plan_summary
    from heroku_provisioner.config import plan as plan_fn

    color = _use_color(no_color)
    with _exit_on_error(color):
        plan_obj = plan_fn(_load(ctx, config), refresh=not no_refresh)

    typer.echo(format_plan(plan_obj, color=color))
    typer.echo()
    typer.echo(format_plan_summary(plan_obj.summary(), color=color))
    if out is not None:
        plan_obj.save(out)
        typer.echo(f"\nPlan saved to {out}")
    if plan_obj.has_changes():
        raise typer.Exit(2)


@app.command(name="apply")
def apply_cmd(
    ctx: typer.Context,
    plan_file: Annotated[
        Path | None, typer.Argument(help="Plan saved with 'plan --out' to apply.")
    ] = None,
    config: ConfigPath = DEFAULT_CONFIG,
    auto_approve: AutoApprove = False,
    no_color: NoColor = False,
    no_refresh: NoRefresh = False,
) -> None:
    """Create, update and delete Heroku objects to match the configuration."""
    from heroku_provisioner.config import plan as plan_fn
    from heroku_provisioner.engine.types import Plan

    color = _use_color(no_color)
    with _exit_on_error(color):
        cfg = _load(ctx, config)
        plan_obj = Plan.load(plan_file) if plan_file else plan_fn(cfg, refresh=not no_refresh)

    _show_and_apply(
        plan_obj,
        cfg,
        color=color,
        auto_approve=auto_approve,
        question="Do you want to apply these changes?",
        nothing_to_do="No changes. Resources are up-to-date.",
    )


@app.command()
def destroy(
    ctx: typer.Context,
    config: ConfigPath = DEFAULT_CONFIG,
    auto_approve: AutoApprove = False,
    no_color: NoColor = False,
) -> None:
    """Delete every Heroku object recorded in the state file."""
    from heroku_provisioner.config import plan as plan_fn

    color = _use_color(no_color)
    with _exit_on_error(color):
        cfg = _load(ctx, config)
        plan_obj = plan_fn(cfg, destroy=True)

    _show_and_apply(
        plan_obj,
        cfg,
        color=color,
        auto_approve=auto_approve,
        question="Do you really want to destroy all resources?",
        nothing_to_do="No resources to destroy.",
    )


@app.command(name="refresh")
def refresh_cmd(
    ctx: typer.Context,
    config: ConfigPath = DEFAULT_CONFIG,
    auto_approve: AutoApprove = False,
    no_color: NoColor = False,
) -> None:
    """Re-read managed objects from Heroku and update the state file."""
    from heroku_provisioner.cli.formatting import (
        changes_summary,
        format_changes,
        format_plan_summary,
    )
    from heroku_provisioner.config import refresh as refresh_fn
    from heroku_provisioner.config import save_state

    color = _use_color(no_color)
    with _exit_on_error(color):
        cfg = _load(ctx, config)
        changes, state = refresh_fn(cfg)

    if not changes:
        typer.echo("No changes. State is up-to-date with Heroku.")
        raise typer.Exit(0)

    typer.echo(format_changes(changes, color=color))
    typer.echo()
    typer.echo(format_plan_summary(changes_summary(changes), color=color, header="Refresh"))
    typer.echo()
    if not auto_approve:
        _ask("Do you want to update the state file?", "Refresh canceled.")

    with _exit_on_error(color):
        save_state(cfg, state)
    n = len(state.resources)
    typer.echo(f"State refreshed. {n} resource{'' if n == 1 else 's'} tracked.")


@app.command()
def drift(
    ctx: typer.Context,
    config: ConfigPath = DEFAULT_CONFIG,
    no_color: NoColor = False,
) -> None:
    """Show objects that changed on Heroku since the last apply or refresh."""
    from heroku_provisioner.cli.formatting import format_changes
    from heroku_provisioner.config import drift as drift_fn

    color = _use_color(no_color)
    with _exit_on_error(color):
        changes = drift_fn(_load(ctx, config))

    if not changes:
        typer.echo("No drift detected. State is up-to-date with Heroku.")
        raise typer.Exit(0)
    typer.echo("Drift detected:\n")
    typer.echo(format_changes(changes, color=color))


@app.command()
def validate(
    ctx: typer.Context,
    config: ConfigPath = DEFAULT_CONFIG,
    no_color: NoColor = False,
) -> None:
    """Check the configuration offline; no credentials needed."""
    from heroku_provisioner.cli.formatting import styler
    from heroku_provisioner.config import validate as validate_fn

    color = _use_color(no_color)
    with _exit_on_error(color):
        validate_fn(_load(ctx, config))

    typer.echo(styler(color)("Configuration is valid.", fg="green"))
