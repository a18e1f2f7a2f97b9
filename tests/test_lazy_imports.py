"""Tests for the lazy top-level API in crema/__init__.py."""

import pytest

import crema


class TestLazyImports:
    @pytest.mark.parametrize("name", crema.__all__)
    def test_every_export_resolves(self, name: str) -> None:
        assert getattr(crema, name) is not None

    def test_same_objects_as_submodules(self) -> None:
        from crema.app import App
        from crema.controller import Controller
        from crema.errors import NotFound

        assert crema.App is App
        assert crema.Controller is Controller
        assert crema.NotFound is NotFound

    def test_unknown_attribute(self) -> None:
        with pytest.raises(AttributeError, match="no attribute 'Router'"):
            crema.Router  # noqa: B018

    def test_version(self) -> None:
        assert crema.__version__ == "0.1.0"
