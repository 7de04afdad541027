"""Unit tests configuration file."""

import types

import pytest

from domaingen.generator import parse, python


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def load():
    """Render declaration text and execute it as a fresh module."""

    def _load(text: str) -> types.ModuleType:
        source = python.render(parse(text), runtime_import="domaingen.runtime")
        module = types.ModuleType("generated")
        exec(compile(source, "<generated>", "exec"), module.__dict__)
        return module

    return _load
