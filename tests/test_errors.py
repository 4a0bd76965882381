"""Tests for wren.errors: exception hierarchy and miss reasons."""

from wren.errors import ConfigurationError, DispatchMiss, WrenError


class TestHierarchy:
    def test_configuration_error_is_wren_error(self) -> None:
        assert issubclass(ConfigurationError, WrenError)

    def test_wren_error_is_exception(self) -> None:
        assert issubclass(WrenError, Exception)


class TestDispatchMiss:
    def test_reasons(self) -> None:
        assert {m.value for m in DispatchMiss} == {
            "malformed path",
            "prefix rejected",
            "controller not found",
            "action not found",
            "parameter binding failed",
        }
