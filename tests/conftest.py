# tests/conftest.py

"""Shared pytest fixtures for all fare_tracker tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from fare_tracker.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_output_dirs(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Point log and chart output at a per-test temporary directory."""
    monkeypatch.setattr(Settings, "LOGS_DIR", tmp_path / "logs")
    monkeypatch.setattr(Settings, "CHARTS_DIR", tmp_path / "charts")
    yield
