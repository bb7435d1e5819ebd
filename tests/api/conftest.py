"""Shared fixtures for API integration tests.

This module provides common fixtures used across all API test files,
including TestClient setup and ConversationStore dependency injection.
"""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_conversation_store
from main import app


@pytest.fixture
def client_with_store(fresh_store):
    """Provide a TestClient with a fresh ConversationStore injected.

    Uses FastAPI's dependency override system to inject the test store
    instead of the global one.

    Args:
        fresh_store: A pytest fixture providing a fresh ConversationStore.

    Yields:
        A tuple of (TestClient, ConversationStore) for testing.

    Example:
        def test_something(client_with_store):
            client, store = client_with_store
            response = client.get("/participants")
            assert response.status_code == 200
    """
    app.dependency_overrides[get_conversation_store] = lambda: fresh_store

    client = TestClient(app)

    yield client, fresh_store

    app.dependency_overrides.clear()


@pytest.fixture
def client_with_pair(client_with_store):
    """Provide a TestClient whose store already holds Alice and Bob.

    Yields:
        A tuple of (TestClient, ConversationStore, alice_id, bob_id).
    """
    client, store = client_with_store
    alice = store.add_participant("Alice")
    bob = store.add_participant("Bob")

    yield client, store, alice.id, bob.id
