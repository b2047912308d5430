"""
Authentication services.

This module provides:
- IdentityDirectory: lookups of users by ID or username plus the public
  ``{id, username}`` projection every other app renders
- AuthService: registration, credential checks and JWT issuance/validation
- PresenceService: the ``connected`` flag maintained by realtime sessions

Related files:
    - models.py: User
    - views.py: register/login endpoints
    - chat/middleware.py: resolves WebSocket users through AuthService

Security:
    - Passwords checked through Django's auth backends
    - Access tokens validated by djangorestframework-simplejwt
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.db.models import F
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings as jwt_settings
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from authentication.models import (
    User,
    validate_username_format,
    validate_username_not_reserved,
)
from core.helpers import parse_uuid
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID


class IdentityDirectory(BaseService):
    """
    Read-only user lookups.

    No business logic lives here beyond existence checks; callers decide
    what a missing user means for them.

    Usage:
        from authentication.services import IdentityDirectory

        target = IdentityDirectory.get_by_username("bob")
        result = IdentityDirectory.require_username("bob")  # USER_NOT_FOUND on miss
        payload = IdentityDirectory.public_identity(target)
    """

    @classmethod
    def get_by_id(cls, user_id) -> User | None:
        """Return the user with this ID, or None (malformed IDs included)."""
        pk = parse_uuid(user_id)
        if pk is None:
            return None
        return User.objects.filter(pk=pk).first()

    @classmethod
    def get_by_username(cls, username: str | None) -> User | None:
        """Return the user with this exact username, or None."""
        if not username:
            return None
        return User.objects.filter(username=username).first()

    @classmethod
    def require_id(cls, user_id) -> ServiceResult[User]:
        user = cls.get_by_id(user_id)
        if user is None:
            return ServiceResult.failure("User not found", error_code="USER_NOT_FOUND")
        return ServiceResult.success(user)

    @classmethod
    def require_username(cls, username: str | None) -> ServiceResult[User]:
        """
        Resolve a username, failing with USER_NOT_FOUND when absent.

        A missing or blank username is a VALIDATION_ERROR rather than a miss.
        """
        validation = cls.validate_required(username=username)
        if validation is not None:
            return validation

        user = cls.get_by_username(username)
        if user is None:
            return ServiceResult.failure(
                f"User '{username}' not found",
                error_code="USER_NOT_FOUND",
            )
        return ServiceResult.success(user)

    @staticmethod
    def public_identity(user: User) -> dict:
        """Project a user to the ``{id, username}`` shape shown to other users."""
        return {"id": str(user.id), "username": user.username}

    @classmethod
    def public_identities(cls, users: Iterable[User]) -> list[dict]:
        return [cls.public_identity(user) for user in users]


class AuthService(BaseService):
    """
    Account creation and token handling.

    Usage:
        result = AuthService.register("alice", "s3cret-pass!")
        tokens = AuthService.login("alice", "s3cret-pass!").data
        # {"token": "<access jwt>", "refresh": "<refresh jwt>"}

        user_id = AuthService.current_user_id(tokens["token"]).data
    """

    @classmethod
    def register(cls, username: str | None, password: str | None) -> ServiceResult[User]:
        """
        Create a user account.

        Returns:
            ServiceResult with the new User, or a failure with
            VALIDATION_ERROR (bad/missing fields, weak password) or
            USERNAME_TAKEN.
        """
        validation = cls.validate_required(username=username, password=password)
        if validation is not None:
            return validation

        try:
            validate_username_format(username)
            validate_username_not_reserved(username)
        except DjangoValidationError as exc:
            return ServiceResult.failure(
                "Invalid username",
                error_code="VALIDATION_ERROR",
                errors={"username": list(exc.messages)},
            )

        if User.objects.filter(username=username).exists():
            return ServiceResult.failure(
                f"Username '{username}' is already taken",
                error_code="USERNAME_TAKEN",
            )

        try:
            validate_password(password, user=User(username=username))
        except DjangoValidationError as exc:
            return ServiceResult.failure(
                "Invalid password",
                error_code="VALIDATION_ERROR",
                errors={"password": list(exc.messages)},
            )

        try:
            with cls.atomic():
                user = User.objects.create_user(username=username, password=password)
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name
            return ServiceResult.failure(
                f"Username '{username}' is already taken",
                error_code="USERNAME_TAKEN",
            )

        cls.get_logger().info(f"Registered user {user.id} ({user.username})")
        return ServiceResult.success(user)

    @classmethod
    def login(cls, username: str | None, password: str | None) -> ServiceResult[dict]:
        """
        Check credentials and issue a token pair.

        Returns:
            ServiceResult with ``{"token", "refresh"}`` or a failure with
            VALIDATION_ERROR / INVALID_CREDENTIALS.
        """
        validation = cls.validate_required(username=username, password=password)
        if validation is not None:
            return validation

        user = authenticate(username=username, password=password)
        if user is None:
            cls.get_logger().warning(f"Failed login for username '{username}'")
            return ServiceResult.failure(
                "Invalid username or password",
                error_code="INVALID_CREDENTIALS",
            )

        return ServiceResult.success(cls.issue_tokens(user))

    @staticmethod
    def issue_tokens(user: User) -> dict:
        refresh = RefreshToken.for_user(user)
        return {"token": str(refresh.access_token), "refresh": str(refresh)}

    @classmethod
    def current_user_id(cls, token: str | None) -> ServiceResult[UUID]:
        """
        Validate an access token and return the user ID it was issued for.

        Fails with NOT_AUTHENTICATED for missing, malformed, expired or
        non-access tokens. Does not check that the user still exists.
        """
        if not token:
            return ServiceResult.failure(
                "Authentication credentials were not provided",
                error_code="NOT_AUTHENTICATED",
            )

        try:
            access = AccessToken(token)
        except TokenError as exc:
            return ServiceResult.failure(str(exc), error_code="NOT_AUTHENTICATED")

        user_id = parse_uuid(access.get(jwt_settings.USER_ID_CLAIM))
        if user_id is None:
            return ServiceResult.failure(
                "Token contained no recognizable user identification",
                error_code="NOT_AUTHENTICATED",
            )
        return ServiceResult.success(user_id)

    @classmethod
    def user_for_token(cls, token: str | None) -> ServiceResult[User]:
        """Resolve an access token to an active user."""
        result = cls.current_user_id(token)
        if not result.success:
            return result

        user = IdentityDirectory.get_by_id(result.data)
        if user is None or not user.is_active:
            return ServiceResult.failure("User not found", error_code="NOT_AUTHENTICATED")
        return ServiceResult.success(user)


class PresenceService(BaseService):
    """
    Maintains ``User.connected`` from realtime session lifecycle events.

    Each accepted session increments ``live_sessions``; each closed session
    decrements it. ``connected`` is true exactly while the count is positive,
    so a user with two tabs open stays connected until both close.
    """

    @classmethod
    def session_opened(cls, user_id) -> None:
        with cls.atomic():
            User.objects.filter(pk=user_id).update(
                live_sessions=F("live_sessions") + 1,
                connected=True,
            )
        cls.get_logger().debug(f"Session opened for user {user_id}")

    @classmethod
    def session_closed(cls, user_id) -> bool:
        """
        Record a closed session.

        Returns:
            True while the user still has other sessions open
        """
        with cls.atomic():
            User.objects.filter(pk=user_id, live_sessions__gt=0).update(
                live_sessions=F("live_sessions") - 1,
            )
            went_offline = User.objects.filter(
                pk=user_id, live_sessions=0, connected=True
            ).update(connected=False)

        if went_offline:
            cls.get_logger().info(f"User {user_id} disconnected")
        return User.objects.filter(pk=user_id, connected=True).exists()
