"""Shared fixtures for the Twintag SDK tests."""

import pytest

from twintag.config.environment import Environment
from twintag.config.manager import ConfigManager
from twintag.network.client import Client

HOST = "https://api.test"
ADMIN_HOST = "https://admin.api.test"
CACHING_HOST = "https://cache.api.test"


@pytest.fixture
def environment() -> Environment:
    """Fresh environment, isolated from the process default."""
    return Environment(host=HOST)


@pytest.fixture
def client(environment: Environment) -> Client:
    """Transport authorized with token ``abc``."""
    return Client("abc", environment=environment)


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Redirect stored profiles to a temporary directory."""
    directory = tmp_path / "twintag"
    monkeypatch.setattr(ConfigManager, "CONFIG_DIR", directory)
    return directory
