"""Shared fixtures for gather tests."""

import pytest

import gather.config


@pytest.fixture
def no_default_config(tmp_path, monkeypatch):
    """Make sure a config file in the real home directory never leaks in."""
    monkeypatch.setattr(gather.config, "DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml")
