"""
Serializers for the chat API.

Request serializers validate the shape of incoming bodies; the business
rules (participation, destination exclusivity, duplicates) are enforced
in chat.services.

Response serializers:
    ChatSerializer: chat with participant identities
    GroupSerializer: group with participant identities
    MessageSerializer: documents the enriched message payload; the payload
        itself is built by MessageRouter.enrich so HTTP and WebSocket share it
"""

from rest_framework import serializers

from authentication.serializers import PublicUserSerializer
from chat.models import Chat, Group


class ChatSerializer(serializers.ModelSerializer):
    """Chat with its (immutable) participant set."""

    participants = PublicUserSerializer(many=True, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    lastMessageAt = serializers.DateTimeField(source="last_message_at", read_only=True)

    class Meta:
        model = Chat
        fields = ["id", "participants", "createdAt", "lastMessageAt"]
        read_only_fields = fields


class GroupSerializer(serializers.ModelSerializer):
    """Group with its current participants."""

    participants = PublicUserSerializer(many=True, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    lastMessageAt = serializers.DateTimeField(source="last_message_at", read_only=True)

    class Meta:
        model = Group
        fields = ["id", "name", "participants", "createdAt", "lastMessageAt"]
        read_only_fields = fields


class GroupSummarySerializer(serializers.ModelSerializer):
    """``{id, name}`` entry used in the current-user profile."""

    class Meta:
        model = Group
        fields = ["id", "name"]
        read_only_fields = fields


class MessageSerializer(serializers.Serializer):
    """Enriched message payload (documentation only)."""

    id = serializers.UUIDField()
    sender = PublicUserSerializer()
    content = serializers.CharField()
    timestamp = serializers.DateTimeField()
    isRead = serializers.BooleanField()
    chat = serializers.UUIDField(allow_null=True)
    group = serializers.UUIDField(allow_null=True)


class CreateChatSerializer(serializers.Serializer):
    """Request body for POST /api/chats/."""

    participants = serializers.ListField(
        child=serializers.CharField(),
        allow_empty=False,
        help_text="User IDs, including your own",
    )


class CreateGroupSerializer(serializers.Serializer):
    """Request body for POST /api/groups/."""

    name = serializers.CharField(max_length=100)
    participants = serializers.ListField(
        child=serializers.CharField(),
        required=False,
        default=list,
        help_text="User IDs; the creator is always added",
    )


class AddMemberSerializer(serializers.Serializer):
    """Request body for POST /api/groups/<id>/users/."""

    userId = serializers.CharField()


class PostMessageSerializer(serializers.Serializer):
    """Request body for POST /api/messages/. Exactly one of chat/group."""

    content = serializers.CharField(trim_whitespace=False)
    chat = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    group = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class ReadStatusSerializer(serializers.Serializer):
    """Request body for PUT /api/messages/<id>/."""

    isRead = serializers.BooleanField()
