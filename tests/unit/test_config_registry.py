"""Tests for the default resource type registry factory."""

from __future__ import annotations

import pytest

from heroku_provisioner.config.registry import default_registry
from heroku_provisioner.config.schema import Config
from heroku_provisioner.engine.addon_handler import AddonAttachmentHandler, AddonHandler
from heroku_provisioner.engine.app_handler import AppHandler
from heroku_provisioner.engine.config_vars_handler import ConfigVarsHandler
from heroku_provisioner.engine.pipeline_handler import PipelineCouplingHandler
from heroku_provisioner.resources import AppResource, ConfigVarsResource


class TestDefaultRegistry:
    @pytest.mark.parametrize(
        ("resource_type", "handler_cls"),
        [
            ("heroku_app", AppHandler),
            ("heroku_app_config_vars", ConfigVarsHandler),
            ("heroku_addon", AddonHandler),
            ("heroku_addon_attachment", AddonAttachmentHandler),
            ("heroku_pipeline_coupling", PipelineCouplingHandler),
        ],
    )
    def test_handler_for_type(self, resource_type: str, handler_cls: type) -> None:
        assert isinstance(default_registry().get(resource_type).handler, handler_cls)

    def test_models_registered(self) -> None:
        registry = default_registry()
        assert registry.get("heroku_app").model is AppResource
        assert registry.get("heroku_app_config_vars").model is ConfigVarsResource

    def test_every_config_section_is_registered(self) -> None:
        registry = default_registry()
        registered = {reg.resource_type for reg in registry}
        assert len(registered) == 11
        for field in Config.model_fields.values():
            args = getattr(field.annotation, "__args__", ())
            for model in args:
                resource_type = getattr(model, "resource_type", None)
                if isinstance(resource_type, str):
                    assert resource_type in registered

    def test_fresh_instance_each_call(self) -> None:
        assert default_registry() is not default_registry()
