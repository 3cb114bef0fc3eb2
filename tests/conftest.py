"""Pytest configuration and fixtures."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and config lookup for each test.

    This prevents a user's configuration files or BIBEXPORT_* variables
    from leaking into tests.
    """
    original_env = os.environ.copy()
    for name in ("BIBEXPORT_DIALECT", "BIBEXPORT_TESTING"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

    yield

    os.environ.clear()
    os.environ.update(original_env)
