"""Shared fixtures for CLI tests."""

from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture
def pid_file(tmp_path: Path) -> Path:
    """Redirect the server PID file into the test's tmp dir."""
    path = tmp_path / "server.pid"
    with patch("vitalis.cli.server_cmd.PID_FILE", path):
        yield path


@pytest.fixture
def tmp_config_path(tmp_path: Path) -> Path:
    """Provide a config file whose database lives in the tmp dir."""
    path = tmp_path / "vitalis.yaml"
    path.write_text(f"memory:\n  storage_path: {tmp_path / 'vitalis.db'}\n")
    return path
