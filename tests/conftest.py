"""Shared fixtures for design validator tests."""

import os

import pytest


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Clear DESIGN_VALIDATOR_* variables so settings fall back to defaults."""
    for key in list(os.environ):
        if key.startswith("DESIGN_VALIDATOR_"):
            monkeypatch.delenv(key, raising=False)
    # Keep a developer's .env out of the test run
    monkeypatch.chdir(os.path.dirname(__file__))
