"""Tests for wren.namespaces: Namespace loading and NamespaceRegistry."""

import types

import pytest

import wren_fixtures
from wren.controller import Controller
from wren.errors import ConfigurationError
from wren.namespaces import Namespace, NamespaceRegistry
from wren_fixtures import controllers


def _module(name: str, *classes: type) -> types.ModuleType:
    module = types.ModuleType(name)
    for cls in classes:
        cls.__module__ = name
        setattr(module, cls.__name__, cls)
    return module


class TestNamespaceLoading:
    def test_root_scope_is_module_itself(self) -> None:
        ns = Namespace(None, controllers)
        assert ns.name == ""
        assert ns.module is controllers

    def test_name_selects_submodule(self) -> None:
        ns = Namespace("controllers", wren_fixtures)
        assert ns.module is controllers

    def test_absolute_name_under_module(self) -> None:
        ns = Namespace("wren_fixtures.controllers", wren_fixtures)
        assert ns.module is controllers

    def test_name_only_imports_module(self) -> None:
        ns = Namespace("wren_fixtures.admin")
        assert ns.module.__name__ == "wren_fixtures.admin"

    def test_module_given_by_name(self) -> None:
        ns = Namespace("controllers", "wren_fixtures")
        assert ns.module is controllers

    def test_missing_module_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="wren_fixtures.nowhere"):
            Namespace("nowhere", wren_fixtures)

    def test_root_without_module_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="needs a module"):
            Namespace()

    def test_validity(self) -> None:
        assert Namespace("controllers", wren_fixtures).is_valid is True
        assert Namespace(None, controllers).is_valid is False
        assert Namespace("", controllers).is_valid is False


class TestNamespaceIndex:
    def test_controllers_are_compiled(self) -> None:
        ns = Namespace(None, controllers)
        names = sorted(c.name for c in ns.controllers)
        assert names == [
            "ErrorController",
            "ListController",
            "OptionsController",
            "SimpleController",
        ]

    def test_lookup_is_case_insensitive(self) -> None:
        ns = Namespace(None, controllers)
        assert ns.get_class("LISTCONTROLLER") is controllers.ListController
        assert ns.get_controller("listcontroller") is not None

    def test_non_controller_classes_are_indexed_but_not_compiled(self) -> None:
        ns = Namespace(None, controllers)
        assert ns.get_class("level") is controllers.Level
        assert ns.get_controller("level") is None

    def test_imported_classes_are_ignored(self) -> None:
        # controllers.py imports Controller and datetime
        ns = Namespace(None, controllers)
        assert ns.get_class("controller") is None
        assert ns.get_class("datetime") is None

    def test_case_collision_raises(self) -> None:
        class Report(Controller):
            pass

        class REPORT(Controller):  # noqa: N801
            pass

        module = _module("collide_scope", Report, REPORT)
        with pytest.raises(ConfigurationError, match="differ only in case"):
            Namespace(None, module)

    def test_bad_action_signature_surfaces_at_registration(self) -> None:
        class Broken(Controller):
            def load(self, data: dict) -> None:
                pass

        module = _module("broken_scope", Broken)
        with pytest.raises(ConfigurationError, match="unsupported type"):
            Namespace(None, module)


class TestNamespaceRegistry:
    def test_preserves_registration_order(self) -> None:
        registry = NamespaceRegistry()
        first = registry.register("admin", wren_fixtures)
        second = registry.register("controllers", wren_fixtures)
        assert list(registry) == [first, second]
        assert len(registry) == 2

    def test_add_existing_namespace(self) -> None:
        registry = NamespaceRegistry()
        ns = Namespace(None, controllers)
        assert registry.add(ns) is ns
        assert list(registry) == [ns]

    def test_register_after_freeze_raises(self) -> None:
        registry = NamespaceRegistry()
        registry.register(None, controllers)
        registry.freeze()
        assert registry.frozen is True
        with pytest.raises(ConfigurationError, match="after dispatching"):
            registry.register("admin", wren_fixtures)
        assert len(registry) == 1
