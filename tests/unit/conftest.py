"""Shared fixtures for unit tests."""

import pytest


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Empty config directory so defaults and the packaged vocabulary apply."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("WITHHOLD_CHECK_CONFIG_PATH", str(config_dir))
    return config_dir
