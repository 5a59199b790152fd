"""Pytest configuration and fixtures.

Provides environment isolation and logging hygiene for every test, plus a
shared execution log. All fixtures here are autouse unless noted.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os

import pytest

from funcwrapper.config import reset_config

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_funcwrapper_env(request, monkeypatch, tmp_path):
    """Clear FUNCWRAPPER_* variables and point project config at a void.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("FUNCWRAPPER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("FUNCWRAPPER_PYPROJECT_PATH", str(tmp_path / "absent.toml"))


@pytest.fixture(autouse=True)
def fresh_default_config():
    """Re-resolve the cached process config in every test."""
    reset_config()
    yield
    reset_config()


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(autouse=True)
def restore_library_log_level():
    """Undo log_level side effects of the process default between tests."""
    logger = logging.getLogger("funcwrapper")
    level = logger.level
    yield
    logger.setLevel(level)


# =============================================================================
# Shared Doubles
# =============================================================================


@pytest.fixture
def execution_log() -> list[str]:
    """Ordered record of hook and action steps (not autouse)."""
    return []
