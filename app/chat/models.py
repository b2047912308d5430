"""
Chat system models.

This module defines the data models for conversations and messages:
- Chat: a fixed set of two or more participants
- Group: a named conversation whose membership changes over time
- Message: a single message addressed to exactly one chat or group

Models:
    Chat: Conversation with immutable membership
    DirectChatPair: Helper enforcing one two-person chat per user pair
    Group: Named conversation with mutable membership
    Message: Individual message within a chat or group

Design Decisions:
    - Chat participants are fixed at creation; nothing adds or removes them later
    - Every ID is a UUID4, so a chat ID and a group ID never collide and can
      both serve as realtime channel keys
    - A message's conversation sequence is its messages ordered by
      (created_at, id); there is no separate list to keep in sync
    - A database check constraint keeps "exactly one of chat, group" true
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

if TYPE_CHECKING:
    from authentication.models import User


class Chat(UUIDPrimaryKeyMixin, BaseModel):
    """
    A conversation between a fixed set of users.

    A chat with exactly two participants is the canonical direct channel
    between them (see DirectChatPair). Larger chats have no such pair row.

    Fields:
        participants: Users in the chat (two or more, never changed)
        last_message_at: Timestamp of most recent message (for sorting)

    Relationships:
        messages: All Message records addressed to this chat
        direct_pair: DirectChatPair when this is a two-person chat
    """

    participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="chats",
        help_text="Users in this chat (fixed at creation)",
    )

    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp of most recent message",
    )

    class Meta:
        db_table = "chat_chat"
        ordering = ["-last_message_at", "-created_at"]

    def __str__(self) -> str:
        return f"Chat({self.pk})"

    @property
    def channel_key(self) -> str:
        """Realtime channel this chat's messages are broadcast on."""
        return str(self.pk)

    def has_participant(self, user: User) -> bool:
        return self.participants.filter(pk=user.pk).exists()


class DirectChatPair(models.Model):
    """
    Enforces uniqueness of two-person chats.

    Stores the pair in canonical order (lower user ID first) so that
    whichever user asks, there is only one chat per pair.

    Fields:
        chat: The two-person chat (OneToOne, serves as PK)
        user_lower: User with lower ID
        user_higher: User with higher ID

    Constraints:
        - UniqueConstraint(user_lower, user_higher): One chat per pair
        - CheckConstraint(user_lower_id < user_higher_id): Canonical order
    """

    chat = models.OneToOneField(
        Chat,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="direct_pair",
        help_text="The two-person chat this pair represents",
    )

    user_lower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with lower ID in this pair",
    )

    user_higher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with higher ID in this pair",
    )

    class Meta:
        db_table = "chat_direct_chat_pair"
        constraints = [
            models.UniqueConstraint(
                fields=["user_lower", "user_higher"],
                name="unique_direct_chat_pair",
            ),
            models.CheckConstraint(
                condition=Q(user_lower_id__lt=F("user_higher_id")),
                name="direct_pair_lower_less_than_higher",
            ),
        ]

    def __str__(self) -> str:
        return f"DirectPair({self.user_lower_id}, {self.user_higher_id})"

    @staticmethod
    def canonical(user_a_id, user_b_id) -> tuple:
        """Return the two IDs as (lower, higher)."""
        return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)


class Group(UUIDPrimaryKeyMixin, BaseModel):
    """
    A named conversation with mutable membership.

    Membership changes only through social.services.GroupMembershipService,
    and only a current participant may add or remove members.

    Fields:
        name: Display name
        participants: Current members (reverse: ``user.chat_groups``)
        last_message_at: Timestamp of most recent message
    """

    name = models.CharField(
        max_length=100,
        help_text="Group display name",
    )

    participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="chat_groups",
        blank=True,
        help_text="Current members of this group",
    )

    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp of most recent message",
    )

    class Meta:
        db_table = "chat_group"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Group: {self.name}"

    @property
    def channel_key(self) -> str:
        return str(self.pk)

    def has_participant(self, user: User) -> bool:
        return self.participants.filter(pk=user.pk).exists()


class Message(UUIDPrimaryKeyMixin, BaseModel):
    """
    A message addressed to exactly one chat or group.

    Content is never edited after creation; ``is_read`` is the only
    mutable field.

    Fields:
        sender: User who sent the message
        content: Message text (non-empty)
        is_read: Read flag, false on creation
        chat: Destination chat (null when sent to a group)
        group: Destination group (null when sent to a chat)
    """

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        help_text="User who sent this message",
    )

    content = models.TextField(
        help_text="Message text",
    )

    is_read = models.BooleanField(
        default=False,
        help_text="Whether the message has been read",
    )

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="messages",
        help_text="Destination chat",
    )

    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="messages",
        help_text="Destination group",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(chat__isnull=False, group__isnull=True)
                    | Q(chat__isnull=True, group__isnull=False)
                ),
                name="message_exactly_one_destination",
            ),
            models.CheckConstraint(
                condition=~Q(content=""),
                name="message_content_not_empty",
            ),
        ]
        indexes = [
            models.Index(
                fields=["chat", "created_at", "id"],
                name="chat_msg_chat_seq_idx",
            ),
            models.Index(
                fields=["group", "created_at", "id"],
                name="chat_msg_group_seq_idx",
            ),
        ]

    def __str__(self) -> str:
        content_preview = (
            self.content[:50] + "..." if len(self.content) > 50 else self.content
        )
        return f"User {self.sender_id}: {content_preview}"

    @property
    def timestamp(self):
        return self.created_at

    @property
    def destination(self) -> Chat | Group:
        return self.chat if self.chat_id else self.group

    @property
    def channel_key(self) -> str:
        return str(self.chat_id or self.group_id)
