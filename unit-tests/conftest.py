# Shared fixtures of the unit tests

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'app'))
sys.path.insert(0, os.path.dirname(__file__))

import unit_test_utils


@pytest.fixture
def store(monkeypatch):
    """Replace the MySQL backed event store with an in-memory one."""
    memory_store = unit_test_utils.InMemoryEventStore()
    memory_store.install(monkeypatch)
    return memory_store


@pytest.fixture
def client(store):
    """Test client on top of the in-memory store, without running the app lifespan."""
    from fastapi.testclient import TestClient
    from app import app
    return TestClient(app)
