"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

import pytest

# Keep urllib3 connection chatter out of captured logs.
logging.getLogger("urllib3").setLevel(logging.WARNING)


@pytest.fixture(autouse=True)
def testrail_env(monkeypatch):
    """Provide TestRail credentials and keep a developer .env out of the tests."""
    monkeypatch.setattr("src.testrail_client.auth.load_dotenv", lambda *args, **kwargs: False)
    monkeypatch.setenv("TESTRAIL_URL", "https://testrail.example.com")
    monkeypatch.setenv("TESTRAIL_USER", "qa@example.com")
    monkeypatch.setenv("TESTRAIL_API_KEY", "secret-key")
