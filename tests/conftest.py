# tests/conftest.py

"""Shared pytest fixtures for all tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from shopez.config.settings import Settings


@pytest.fixture(autouse=True)
def offline_http() -> Generator[MagicMock, None, None]:
    """Replace curl_cffi sessions so no test can reach the network."""
    with patch("curl_cffi.requests.Session") as session_cls:
        yield session_cls


@pytest.fixture(autouse=True)
def isolated_logs_dir(tmp_path: Path) -> Generator[None, None, None]:
    """Write per-run log files under the test's temp directory."""
    with patch.object(Settings, "LOGS_DIR", tmp_path / "logs"):
        yield
