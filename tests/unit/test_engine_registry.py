from typing import ClassVar

import pytest

from heroku_provisioner.engine.errors import UnknownResourceTypeError
from heroku_provisioner.engine.handlers import ResourceHandler
from heroku_provisioner.engine.registry import ResourceTypeRegistry
from heroku_provisioner.resources.base import Resource


class DummyResource(Resource):
    resource_type: ClassVar[str] = "dummy"
    value: int


class DummyHandler(ResourceHandler["DummyResource"]):
    pass


def test_registry_register_and_get() -> None:
    registry = ResourceTypeRegistry()
    handler = DummyHandler()

    registry.register(DummyResource, handler)
    reg = registry.get("dummy")

    assert reg.resource_type == "dummy"
    assert reg.model is DummyResource
    assert reg.handler is handler
    assert "dummy" in registry
    assert [r.resource_type for r in registry] == ["dummy"]


def test_registry_duplicate_registration() -> None:
    registry = ResourceTypeRegistry()
    registry.register(DummyResource, DummyHandler())
    with pytest.raises(ValueError):
        registry.register(DummyResource, DummyHandler())


def test_registry_unknown_type() -> None:
    with pytest.raises(UnknownResourceTypeError):
        ResourceTypeRegistry().get("heroku_missing")
