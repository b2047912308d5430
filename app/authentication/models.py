"""
Authentication models.

This module defines the account record shared by every other app:
- User: username-identified account with the realtime ``connected`` flag
  and the symmetric friend set

Friend requests live in social.models.FriendRequest and group membership
in chat.models.Group; both hang off User through reverse relations
(``user.received_friend_requests``, ``user.chat_groups``).

Related files:
    - managers.py: Custom user manager for username-based creation
    - services.py: IdentityDirectory lookups and AuthService (register/login)

Security:
    - User passwords hashed with Django's configured hasher
    - Usernames validated for format and against a reserved list
"""

import re

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models

from authentication.managers import UserManager
from core.model_mixins import UUIDPrimaryKeyMixin


# Reserved usernames that cannot be used. "accept" and "reject" would shadow
# the friend-request routes under /api/users/friends/.
RESERVED_USERNAMES = frozenset([
    "accept", "reject", "me", "friends",
    "admin", "administrator", "root", "system", "api",
    "login", "logout", "register", "auth", "user", "users",
    "null", "undefined", "anonymous", "support",
])


def validate_username_not_reserved(value):
    """Validate that username is not in the reserved list."""
    if value.lower() in RESERVED_USERNAMES:
        raise ValidationError(
            f"The username '{value}' is reserved and cannot be used."
        )


def validate_username_format(value):
    """Validate username format: 1-30 chars, letters, digits, '.', '_' and '-'."""
    if not re.fullmatch(r"[a-zA-Z0-9._-]{1,30}", value):
        raise ValidationError(
            "Username must be 1-30 characters and contain only "
            "letters, numbers, dots, underscores, and hyphens."
        )


class User(UUIDPrimaryKeyMixin, AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using username as the primary identifier.

    Fields:
        id: UUID primary key (shared ID space with chats, groups, messages)
        username: Unique login and display name
        connected: True while at least one realtime session is open
        live_sessions: Number of open realtime sessions backing ``connected``
        friends: Symmetric friend set (A in B.friends implies B in A.friends)
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        user = User.objects.create_user(username="alice", password="s3cret-pass")

        alice.friends.add(bob)   # bob.friends now contains alice as well
    """

    username = models.CharField(
        max_length=30,
        unique=True,
        validators=[validate_username_format, validate_username_not_reserved],
        help_text="Unique username (1-30 chars)",
    )

    # Realtime presence
    connected = models.BooleanField(
        default=False,
        help_text="Whether the user has an open realtime session",
    )
    live_sessions = models.PositiveIntegerField(
        default=0,
        help_text="Count of open realtime sessions",
    )

    friends = models.ManyToManyField(
        "self",
        symmetrical=True,
        blank=True,
        help_text="Accepted friends (symmetric)",
    )

    # Account status flags
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    # Timestamps
    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "username"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["username"]

    def __str__(self):
        return self.username

    def is_friend_of(self, other) -> bool:
        """Check whether ``other`` is in this user's friend set."""
        return self.friends.filter(pk=other.pk).exists()
