from __future__ import annotations

import re

from heroku_provisioner.cli.formatting import (
    SENSITIVE_PLACEHOLDER,
    changes_summary,
    format_apply_summary,
    format_change,
    format_changes,
    format_plan,
    format_plan_summary,
)
from heroku_provisioner.engine.types import Action, Plan, PlanMetadata, ResourceChange

_META = PlanMetadata(
    destroy=False,
    refresh=True,
    state_lineage="lineage-1",
    state_serial=0,
    state_digest="digest",
    config_digest="cdigest",
    engine_version="0.1.0",
)


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _config_vars_update(**diff: dict[str, object]) -> ResourceChange:
    return ResourceChange(
        address="heroku_app_config_vars.web",
        resource_type="heroku_app_config_vars",
        action=Action.UPDATE,
        diff=diff,
        sensitive=["private"],
    )


class TestSummaries:
    def test_plan_summary(self) -> None:
        result = format_plan_summary({"create": 2, "update": 1, "delete": 3}, color=False)
        assert result == "Plan: 2 to add, 1 to change, 3 to destroy."

    def test_custom_header(self) -> None:
        result = format_plan_summary({"update": 1}, color=False, header="Refresh")
        assert result == "Refresh: 0 to add, 1 to change, 0 to destroy."

    def test_color_mode_contains_ansi(self) -> None:
        result = format_plan_summary({"create": 1, "update": 0, "delete": 0}, color=True)
        assert "\x1b[" in result
        assert "1 to add" in _strip_ansi(result)

    def test_apply_summary(self) -> None:
        result = format_apply_summary({"create": 1, "update": 2, "delete": 0}, color=False)
        assert result == "Apply complete! Resources: 1 added, 2 changed, 0 destroyed."

    def test_changes_summary_ignores_noop(self) -> None:
        changes = [
            ResourceChange(address="a.x", resource_type="a", action=Action.NOOP),
            ResourceChange(address="a.y", resource_type="a", action=Action.DELETE),
        ]
        assert changes_summary(changes) == {"create": 0, "update": 0, "delete": 1}


class TestFormatChange:
    def test_create_block(self) -> None:
        change = ResourceChange(
            address="heroku_app.web",
            resource_type="heroku_app",
            action=Action.CREATE,
            planned={"name": "web", "maintenance": False, "buildpacks": ["heroku/python"]},
        )
        out = format_change(change, color=False)
        assert out.splitlines() == [
            "  # heroku_app.web will be created",
            '  + resource "heroku_app" "web" {',
            '      + name        = "web"',
            "      + maintenance = false",
            '      + buildpacks  = ["heroku/python"]',
            "    }",
        ]

    def test_create_masks_each_private_key(self) -> None:
        change = ResourceChange(
            address="heroku_app_config_vars.web",
            resource_type="heroku_app_config_vars",
            action=Action.CREATE,
            planned={"private": {"B": "two", "A": "one"}},
            sensitive=["private"],
        )
        out = format_change(change, color=False)
        assert f"private.A = {SENSITIVE_PLACEHOLDER}" in out
        assert f"private.B = {SENSITIVE_PLACEHOLDER}" in out
        assert "one" not in out
        assert out.index("private.A") < out.index("private.B")

    def test_update_shows_only_changed_keys(self) -> None:
        change = _config_vars_update(
            public={"from": {"A": "1", "B": "2"}, "to": {"A": "1", "B": "3", "C": "4"}}
        )
        out = format_change(change, color=False)
        assert "# heroku_app_config_vars.web will be updated" in out
        assert 'public.B = "2" -> "3"' in out
        assert 'public.C = null -> "4"' in out
        assert "public.A" not in out

    def test_update_masks_private_but_shows_removal(self) -> None:
        change = _config_vars_update(
            private={"from": {"OLD": "x", "KEY": "a"}, "to": {"KEY": "b"}}
        )
        out = format_change(change, color=False)
        assert f"private.KEY = {SENSITIVE_PLACEHOLDER} -> {SENSITIVE_PLACEHOLDER}" in out
        assert f"private.OLD = {SENSITIVE_PLACEHOLDER} -> null" in out
        assert '"a"' not in out

    def test_delete_shows_id(self) -> None:
        change = ResourceChange(
            address="heroku_collaborator.alice",
            resource_type="heroku_collaborator",
            action=Action.DELETE,
            prior={"id": "web:alice@example.com", "app": "web"},
        )
        out = format_change(change, color=False)
        assert "# heroku_collaborator.alice will be destroyed" in out
        assert '- id = "web:alice@example.com"' in out
        assert "app" not in out.split("{", 1)[1]


class TestFormatPlan:
    def test_noop_only_plan(self) -> None:
        plan = Plan(
            metadata=_META,
            changes=[ResourceChange(address="a.x", resource_type="a", action=Action.NOOP)],
        )
        assert format_plan(plan, color=False) == "No changes. Resources are up-to-date."

    def test_blocks_separated_and_noop_hidden(self) -> None:
        changes = [
            ResourceChange(address="a.x", resource_type="a", action=Action.NOOP),
            ResourceChange(address="a.y", resource_type="a", action=Action.DELETE, prior={}),
            ResourceChange(address="a.z", resource_type="a", action=Action.DELETE, prior={}),
        ]
        out = format_changes(changes, color=False)
        assert "a.x" not in out
        assert "}\n\n  # a.z" in out
