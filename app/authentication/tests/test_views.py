"""
Tests for authentication API views.

- RegisterView: POST /api/users/register/
- LoginView: POST /api/users/login/
- TokenRefreshView: POST /api/users/token/refresh/

Tests focus on observable HTTP behavior: status codes, response bodies
and database state.
"""

import pytest
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.models import User
from authentication.tests.factories import DEFAULT_PASSWORD, UserFactory


REGISTER_URL = "/api/users/register/"
LOGIN_URL = "/api/users/login/"
REFRESH_URL = "/api/users/token/refresh/"

pytestmark = pytest.mark.django_db


class TestRegisterView:
    """Tests for POST /api/users/register/."""

    def test_register_returns_public_identity(self, api_client, valid_registration_data):
        response = api_client.post(REGISTER_URL, valid_registration_data, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        created = User.objects.get(username="newcomer")
        assert response.data == {"id": str(created.id), "username": "newcomer"}
        assert "password" not in response.data

    def test_register_duplicate_username_returns_409(self, api_client, valid_registration_data):
        """
        Registering an existing username fails and creates no user.

        Why it matters: usernames are the handle for friend requests.
        """
        UserFactory(username="newcomer")

        response = api_client.post(REGISTER_URL, valid_registration_data, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "USERNAME_TAKEN"
        assert User.objects.filter(username="newcomer").count() == 1

    def test_register_missing_password_returns_400(self, api_client):
        response = api_client.post(REGISTER_URL, {"username": "newcomer"}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "VALIDATION_ERROR"
        assert "password" in response.data["errors"]

    def test_register_weak_password_returns_400(self, api_client):
        response = api_client.post(
            REGISTER_URL, {"username": "newcomer", "password": "123"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not User.objects.filter(username="newcomer").exists()

    def test_register_ignores_bad_bearer_token(self, api_client, valid_registration_data):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")

        response = api_client.post(REGISTER_URL, valid_registration_data, format="json")

        assert response.status_code == status.HTTP_201_CREATED


class TestLoginView:
    """Tests for POST /api/users/login/."""

    def test_login_returns_token_pair(self, api_client, user):
        response = api_client.post(
            LOGIN_URL,
            {"username": user.username, "password": DEFAULT_PASSWORD},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert set(response.data) == {"token", "refresh"}

    def test_token_authenticates_follow_up_requests(self, api_client, user):
        login = api_client.post(
            LOGIN_URL,
            {"username": user.username, "password": DEFAULT_PASSWORD},
            format="json",
        )
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['token']}")

        response = api_client.get("/api/users/me/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["username"] == user.username

    def test_login_bad_password_returns_401(self, api_client, user):
        response = api_client.post(
            LOGIN_URL,
            {"username": user.username, "password": "nope"},
            format="json",
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data["error_code"] == "INVALID_CREDENTIALS"

    def test_login_missing_fields_returns_400(self, api_client):
        response = api_client.post(LOGIN_URL, {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "VALIDATION_ERROR"


class TestTokenRefreshView:
    """Tests for POST /api/users/token/refresh/."""

    def test_refresh_returns_new_access_token(self, api_client, user):
        refresh = RefreshToken.for_user(user)

        response = api_client.post(REFRESH_URL, {"refresh": str(refresh)}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert "access" in response.data


class TestProtectedEndpoints:
    """Endpoints other than register/login require a Bearer token."""

    def test_me_without_token_returns_401(self, api_client, db):
        response = api_client.get("/api/users/me/")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
