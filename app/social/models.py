"""
Social graph models.

Friendships themselves are the symmetric ``User.friends`` relation; this
module holds the pending side of the graph.

Models:
    FriendRequest: A pending request from ``sender`` to ``recipient``

Design Decisions:
    - Requests are an ordered sequence per recipient (created_at, id)
    - Duplicate pending requests from the same sender are allowed; accepting
      or rejecting removes every one of them
"""

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class FriendRequest(UUIDPrimaryKeyMixin, BaseModel):
    """
    A pending friend request.

    Fields:
        sender: User who asked
        recipient: User whose pending list this entry belongs to
    """

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_friend_requests",
        help_text="User who sent the request",
    )

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_friend_requests",
        help_text="User the request is addressed to",
    )

    class Meta:
        db_table = "social_friend_request"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["recipient", "created_at"],
                name="social_fr_recipient_idx",
            ),
            models.Index(
                fields=["recipient", "sender"],
                name="social_fr_pair_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"FriendRequest({self.sender_id} -> {self.recipient_id})"
