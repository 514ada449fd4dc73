"""Shared fixtures for dbconnector tests."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep tests away from the user's real config file."""

    config_path = tmp_path / "config.toml"
    monkeypatch.setattr("dbconnector.config.CONFIG_FILE", config_path)
    return config_path
