"""
Tests for UserManager.

The UserManager provides:
- create_user(): Creates regular users, hashing the password when given
- create_superuser(): Creates admin users with elevated privileges

Related files:
    - managers.py: Implementation under test
"""

import pytest

from authentication.models import User


class TestUserManagerCreateUser:
    """Tests for UserManager.create_user() method."""

    def test_creates_user_with_username_and_password(self, db):
        """
        Given a username and password
        When create_user is called
        Then a user is created that can authenticate with that password
        """
        user = User.objects.create_user(username="alice", password="SecurePass123!")

        assert user.pk is not None
        assert user.username == "alice"
        assert user.check_password("SecurePass123!") is True

    def test_password_is_hashed(self, db):
        user = User.objects.create_user(username="alice", password="SecurePass123!")

        assert user.password != "SecurePass123!"

    def test_without_password_sets_unusable_password(self, db):
        user = User.objects.create_user(username="alice")

        assert user.has_usable_password() is False

    def test_defaults_to_regular_disconnected_user(self, db):
        user = User.objects.create_user(username="alice", password="SecurePass123!")

        assert user.is_staff is False
        assert user.is_superuser is False
        assert user.is_active is True
        assert user.connected is False

    def test_empty_username_raises_value_error(self, db):
        with pytest.raises(ValueError, match="Username"):
            User.objects.create_user(username="", password="SecurePass123!")


class TestUserManagerCreateSuperuser:
    """Tests for UserManager.create_superuser() method."""

    def test_creates_superuser_with_elevated_flags(self, db):
        admin = User.objects.create_superuser(username="ops", password="SecurePass123!")

        assert admin.is_staff is True
        assert admin.is_superuser is True

    def test_rejects_is_staff_false(self, db):
        with pytest.raises(ValueError, match="is_staff"):
            User.objects.create_superuser(
                username="ops", password="SecurePass123!", is_staff=False
            )

    def test_rejects_is_superuser_false(self, db):
        with pytest.raises(ValueError, match="is_superuser"):
            User.objects.create_superuser(
                username="ops", password="SecurePass123!", is_superuser=False
            )
