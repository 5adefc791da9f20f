"""
Shared test fixtures and configuration.

Environment variables are set BEFORE any app imports to prevent
accidental connections to real databases.
"""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Override settings before any app code imports the settings singleton
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests"
os.environ["ALGORITHM"] = "HS256"
os.environ["MONGODB_URL"] = "mongodb://localhost:27017"
os.environ["DATABASE_NAME"] = "test_workspace_membership"
os.environ["DEPLOYMENT_MODE"] = "self_hosted"
os.environ["STRIPE_SECRET_KEY"] = ""

import pytest  # noqa: E402

from tests.mocks.store import FakeClock, InMemoryStore  # noqa: E402


@pytest.fixture
def clock():
    """Fixed clock the engine reads instead of the wall clock."""
    return FakeClock()


@pytest.fixture
def store(clock):
    """Store seeded with workspace W, admin A (active admin member) and user U."""
    return InMemoryStore.seeded(clock.now)
