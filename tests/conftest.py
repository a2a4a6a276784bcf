# tests/conftest.py

"""Shared pytest fixtures for all price_watch tests."""

import logging
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so blocking waits run instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path: Path) -> Generator[Path, None, None]:
    """Point data, log and database paths at a per-test temp dir."""
    with (
        patch.object(Settings, "DATA_DIR", tmp_path / "data"),
        patch.object(Settings, "LOGS_DIR", tmp_path / "logs"),
        patch.object(
            Settings, "PRICE_DB_PATH", tmp_path / "data" / "prices.db",
        ),
    ):
        yield tmp_path
    # Drop handlers whose files live in the removed temp dir
    root_logger = logging.getLogger("price_watch")
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
