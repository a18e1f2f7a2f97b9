"""Tests for crema.registry — explicit controller discovery."""

import re

import pytest

from crema.controller import Controller
from crema.registry import ControllerRegistry, qualified_name


class TestControllerRegistry:
    def test_register_as_decorator(self) -> None:
        registry = ControllerRegistry()

        @registry.register
        class Forum(Controller):
            pass

        assert Forum in registry
        assert list(registry) == [Forum]
        assert len(registry) == 1

    def test_register_twice_is_noop(self) -> None:
        registry = ControllerRegistry()

        class Forum(Controller):
            pass

        registry.register(Forum)
        registry.register(Forum)
        assert len(registry) == 1

    def test_rejects_non_controllers(self) -> None:
        registry = ControllerRegistry()
        with pytest.raises(TypeError, match="Controller subclasses"):
            registry.register(object)  # type: ignore[arg-type]

    def test_unregister(self) -> None:
        registry = ControllerRegistry()

        class Forum(Controller):
            pass

        registry.register(Forum)
        registry.unregister(Forum)
        assert Forum not in registry
        registry.unregister(Forum)

    def test_iteration_keeps_registration_order(self) -> None:
        registry = ControllerRegistry()

        class B(Controller):
            pass

        class A(Controller):
            pass

        registry.register(B)
        registry.register(A)
        assert list(registry) == [B, A]


class TestFind:
    @pytest.fixture
    def registry(self) -> ControllerRegistry:
        registry = ControllerRegistry()

        class Forum(Controller):
            pass

        class Shop(Controller):
            pass

        registry.register(Forum)
        registry.register(Shop)
        return registry

    def test_by_bare_name(self, registry: ControllerRegistry) -> None:
        assert [c.__name__ for c in registry.find("Forum")] == ["Forum"]

    def test_by_qualified_name(self, registry: ControllerRegistry) -> None:
        shop = registry.find("Shop")[0]
        assert registry.find(qualified_name(shop)) == [shop]

    def test_by_regexp(self, registry: ControllerRegistry) -> None:
        found = registry.find(re.compile(r"\.(Forum|Shop)$"))
        assert [c.__name__ for c in found] == ["Forum", "Shop"]

    def test_nothing_found(self, registry: ControllerRegistry) -> None:
        assert registry.find("Missing") == []


class TestQualifiedName:
    def test_nested(self) -> None:
        class Outer(Controller):
            class Inner(Controller):
                pass

        assert qualified_name(Outer.Inner).endswith("Outer.Inner")
        assert qualified_name(Outer.Inner).startswith(__name__)
