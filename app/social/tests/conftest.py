"""
Test configuration and fixtures for social tests.

Usage:
    def test_example(alice, bob_client):
        response = bob_client.put("/api/users/friends/accept/", {"username": "alice"})
"""

import pytest

from authentication.tests.factories import UserFactory
from chat.tests.factories import GroupFactory


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
def friends(alice, bob):
    """alice and bob as friends."""
    alice.friends.add(bob)
    return alice, bob


@pytest.fixture
def group(alice, bob):
    """Group of alice and bob."""
    return GroupFactory(name="Climbing", participants=[alice, bob])


@pytest.fixture
def alice_client(alice, authenticated_client_factory):
    return authenticated_client_factory(alice)


@pytest.fixture
def bob_client(bob, authenticated_client_factory):
    return authenticated_client_factory(bob)
