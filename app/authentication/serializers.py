"""
Serializers for authentication endpoints.

This module provides DRF serializers for:
- Public user identity (``{id, username}``), reused by social and chat
- Registration and login request bodies
- The token pair returned by login

Related files:
    - views.py: Views that use these serializers
    - services.py: AuthService performs the actual validation and writes

Security:
    - Password fields are write-only
"""

from rest_framework import serializers

from authentication.models import User


class PublicUserSerializer(serializers.ModelSerializer):
    """
    Serializer for the public face of a user.

    This is the only user shape other users ever see: friend lists,
    friend requests, message senders and group participants.
    """

    class Meta:
        model = User
        fields = ["id", "username"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """Request body for POST /api/users/register/."""

    username = serializers.CharField(max_length=30, trim_whitespace=True)
    password = serializers.CharField(
        write_only=True,
        trim_whitespace=False,
        style={"input_type": "password"},
    )


class LoginSerializer(serializers.Serializer):
    """Request body for POST /api/users/login/."""

    username = serializers.CharField(trim_whitespace=True)
    password = serializers.CharField(
        write_only=True,
        trim_whitespace=False,
        style={"input_type": "password"},
    )


class TokenPairSerializer(serializers.Serializer):
    """Response body for a successful login."""

    token = serializers.CharField(help_text="JWT access token (Bearer)")
    refresh = serializers.CharField(help_text="JWT refresh token")
