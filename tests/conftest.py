# tests/conftest.py

"""Shared pytest fixtures for all baro tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from baro.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_paths(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Point the cache database and log directory at a temp dir."""
    monkeypatch.setattr(Settings, "CACHE_DB_PATH", tmp_path / "price_cache.db")
    monkeypatch.setattr(Settings, "LOGS_DIR", tmp_path / "logs")
    yield
