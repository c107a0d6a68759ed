"""Unit tests configuration file."""

import importlib
import sys

import pytest

from protoboot.generator import load
from protoboot.generator.naming import module_path, output_path
from protoboot.generator.python import render
from protoboot.proto import reset_default_pool


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def pool():
    """A fresh process-wide descriptor pool for each test."""
    return reset_default_pool()


@pytest.fixture
def generate(tmp_path, monkeypatch, pool):
    """Render a descriptor set into a temporary directory importable as modules.

    Returns a function taking the descriptor set (dict or JSON text) and
    returning a function that imports a generated module by file name.
    """
    generated: list[str] = []
    monkeypatch.syspath_prepend(str(tmp_path))

    def write(data):
        descriptor_set = load(data)
        for unit in descriptor_set.files:
            target = tmp_path / output_path(unit)
            target.parent.mkdir(parents=True, exist_ok=True)
            for parent in target.parents:
                if parent == tmp_path:
                    break
                (parent / "__init__.py").touch()
            target.write_text(render(unit, descriptor_set), encoding="utf-8")
            generated.append(module_path(unit))
        importlib.invalidate_caches()

        def import_file(name):
            return importlib.import_module(module_path(descriptor_set.find(name)))

        return import_file

    yield write

    for name in list(sys.modules):
        if any(name == m or name.startswith(m + ".") for m in generated):
            del sys.modules[name]
        elif any(m.startswith(name + ".") for m in generated):
            del sys.modules[name]
