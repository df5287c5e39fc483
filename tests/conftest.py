"""Pytest fixtures."""

import pytest
from fastapi.testclient import TestClient

from lookout_core.registry import ObservationRegistry


@pytest.fixture
def events():
    """Shared event log for recording handlers."""
    return []


@pytest.fixture
def registry():
    """Fresh observation registry per test."""
    return ObservationRegistry()


@pytest.fixture
def client():
    """FastAPI test client."""
    from apps.core_api.main import app

    return TestClient(app)
