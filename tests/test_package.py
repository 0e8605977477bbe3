"""Tests for the package entry points."""

import pytest

import argmap
from argmap.__version__ import get_version


class TestLazyExports:
    """Public names resolve on first access."""

    def test_all_exports_resolve(self):
        for name in argmap.__all__:
            assert getattr(argmap, name) is not None

    def test_unknown_name(self):
        with pytest.raises(AttributeError):
            argmap.NoSuchThing

    def test_dir_lists_exports(self):
        assert "parse_arguments" in dir(argmap)

    def test_version(self):
        assert argmap.__version__ == get_version() == "0.3.0"

    def test_parse_arguments_via_package(self):
        tree = argmap.parse_arguments("Duty Analysis:\nWe must respect the rule of law.")
        assert tree.sections[0].framework == argmap.Framework.RULE_BASED
