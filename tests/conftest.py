"""Shared pytest fixtures for the full linecfg test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.fixture_paths import config_fixture_dir


@pytest.fixture
def fixture_dir() -> Path:
    """Provide the directory holding the `.cfg` fixtures."""

    return config_fixture_dir()
