"""
Test configuration and fixtures for authentication tests.

API client fixtures (api_client, authenticated_client_factory) are
project-wide and live in app/conftest.py.

Usage:
    def test_example(user, authenticated_client):
        response = authenticated_client.get("/api/users/me/")
        assert response.status_code == 200
"""

import pytest

from authentication.models import User
from authentication.tests.factories import DEFAULT_PASSWORD, UserFactory


@pytest.fixture
def user(db):
    """Create a basic active user."""
    return UserFactory()


@pytest.fixture
def superuser(db):
    """Create a superuser with admin privileges."""
    return User.objects.create_superuser(username="ops", password=DEFAULT_PASSWORD)


@pytest.fixture
def deactivated_user(db):
    """Create a user whose account has been deactivated."""
    return UserFactory(is_active=False)


@pytest.fixture
def authenticated_client(user, authenticated_client_factory):
    """API client authenticated with a JWT for the default user fixture."""
    return authenticated_client_factory(user)


@pytest.fixture
def valid_registration_data():
    """Valid registration payload."""
    return {"username": "newcomer", "password": "Str0ng-Passw0rd!"}
