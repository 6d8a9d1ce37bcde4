"""Shared test fixtures for netlib.

Provides the endpoint fixture used across the client and session tests,
plus isolation of global output state and of the cache directory.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from netlib.models import EndpointSpec, HTTPMethod
from netlib.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Install a plain, non-verbose output manager for each test and drop it afterwards."""
    set_output(OutputManager(no_color=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Endpoint fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def users_endpoint() -> EndpointSpec:
    """``GET https://api.example.com/v1/users``."""
    return EndpointSpec(
        scheme="https",
        host="api.example.com",
        version="/v1",
        path="/users",
        method=HTTPMethod.GET,
    )


# ---------------------------------------------------------------------------
# Filesystem isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_cache(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the XDG cache directory at tmp_path and force XDG resolution."""
    cache_dir = tmp_path / "cache"
    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_dir))
    monkeypatch.setattr("netlib.config._is_xdg_platform", lambda: True)
    return cache_dir


@pytest.fixture
def downloads_dir(tmp_path: Path) -> Path:
    path = tmp_path / "downloads"
    path.mkdir()
    return path
