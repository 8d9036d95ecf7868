"""Shared fixtures for autogenerate tests."""

import sys

import pytest


@pytest.fixture
def clean_imports():
    """Restore sys.meta_path and drop modules imported during the test."""
    meta_path = list(sys.meta_path)
    modules = set(sys.modules)
    yield
    sys.meta_path[:] = meta_path
    for name in set(sys.modules) - modules:
        if name != "autogenerate" and not name.startswith("autogenerate."):
            del sys.modules[name]
