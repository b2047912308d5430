"""
Chat application configuration.

This app provides the chat system with:
- Chats with fixed membership and one canonical chat per user pair
- Groups with mutable membership
- Message history and read status
- Real-time fan-out over WebSockets
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
