"""Shared fixtures for the deptrac test suite."""

import os
import textwrap

import pytest

from deptrac.infrastructure.di.container import DIContainer
from deptrac.infrastructure.di.extension import DeptracExtension


@pytest.fixture
def working_dir(tmp_path):
    """Absolute working directory isolated per test."""
    return str(tmp_path)


@pytest.fixture
def write_file(tmp_path):
    """Write a dedented file below tmp_path and return its absolute path."""

    def _write(relative_path, content=""):
        path = tmp_path / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def container():
    """Mutable container with the deptrac extension registered."""
    container = DIContainer()
    container.register_extension(DeptracExtension())
    return container


@pytest.fixture
def clean_env(monkeypatch):
    """Remove logging variables so defaults apply."""
    for name in ("DEPTRAC_LOG_LEVEL", "DEPTRAC_LOG_DESTINATION", "DEPTRAC_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    return os.environ
