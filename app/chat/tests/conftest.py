"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures (alice, bob, carol, outsider)
- A direct chat between alice and bob and a group of alice, bob and carol
- A fresh realtime session registry per test

Usage:
    def test_example(direct_chat, alice_client):
        response = alice_client.get(f"/api/chats/{direct_chat.id}/messages/")
        assert response.status_code == 200
"""

import pytest
from channels.layers import channel_layers

from authentication.tests.factories import UserFactory
from chat.realtime import get_session_registry
from chat.tests.factories import ChatFactory, GroupFactory


@pytest.fixture(autouse=True)
def session_registry():
    """
    Give every test an empty registry and a fresh channel layer.

    The in-memory layer binds its queues to an event loop, so it is rebuilt
    together with the registry.
    """
    channel_layers.backends.clear()
    get_session_registry.cache_clear()
    registry = get_session_registry()
    yield registry
    get_session_registry.cache_clear()
    channel_layers.backends.clear()


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def alice(db):
    return UserFactory(username="alice")


@pytest.fixture
def bob(db):
    return UserFactory(username="bob")


@pytest.fixture
def carol(db):
    return UserFactory(username="carol")


@pytest.fixture
def outsider(db):
    """A user who takes part in none of the fixture conversations."""
    return UserFactory(username="outsider")


# =============================================================================
# Conversation Fixtures
# =============================================================================


@pytest.fixture
def direct_chat(alice, bob):
    """Direct chat between alice and bob."""
    return ChatFactory(participants=[alice, bob])


@pytest.fixture
def group(alice, bob, carol):
    """Group of alice, bob and carol."""
    return GroupFactory(name="Climbing", participants=[alice, bob, carol])


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def alice_client(alice, authenticated_client_factory):
    return authenticated_client_factory(alice)


@pytest.fixture
def bob_client(bob, authenticated_client_factory):
    return authenticated_client_factory(bob)


@pytest.fixture
def outsider_client(outsider, authenticated_client_factory):
    return authenticated_client_factory(outsider)
