"""Root test configuration: isolate each test from user config, MDCAT_* env vars, and CLI logging setup"""

import logging
import os

import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run every test in an empty working directory with no MDCAT_* overrides."""
    for name in list(os.environ):
        if name.startswith("MDCAT_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    yield tmp_path


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handlers installed by configure_logging during CLI invocations."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
