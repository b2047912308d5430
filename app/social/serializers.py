"""
Serializers for the social API.

Request bodies carry a target username; responses reuse the public
``{id, username}`` identity from authentication.serializers.
"""

from rest_framework import serializers

from authentication.serializers import PublicUserSerializer
from chat.serializers import GroupSummarySerializer


class UsernameSerializer(serializers.Serializer):
    """Request body naming the other user of a friend operation."""

    username = serializers.CharField(max_length=30)


class RelationshipsSerializer(serializers.Serializer):
    """Response body for GET /api/users/friends/."""

    friends = PublicUserSerializer(many=True)
    friendRequests = PublicUserSerializer(many=True)


class FriendEntrySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    username = serializers.CharField()
    chatId = serializers.UUIDField(allow_null=True)


class ProfileSerializer(serializers.Serializer):
    """Response body for GET /api/users/me/."""

    id = serializers.UUIDField()
    username = serializers.CharField()
    connected = serializers.BooleanField()
    friends = FriendEntrySerializer(many=True)
    friendRequests = PublicUserSerializer(many=True)
    groups = GroupSummarySerializer(many=True)
