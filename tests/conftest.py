"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import that might build settings,
so a developer's local .env file never leaks into test runs.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("ERRORS_DEVELOPMENT", "false")

import pytest

from service_errors.core.config import ErrorConfig


@pytest.fixture(autouse=True)
def production_mode():
    """Run every test with development mode off unless it opts in."""
    ErrorConfig.set_development_mode(False)
    yield
    ErrorConfig.reset()


@pytest.fixture
def development_mode():
    """Enable development mode for a single test."""
    ErrorConfig.set_development_mode(True)
    yield
    ErrorConfig.set_development_mode(False)
