"""
Chat app for real-time messaging.

This app handles:
- Chats (fixed participant sets, one canonical chat per user pair)
- Groups (named, with mutable membership)
- Message sending, history and read status
- WebSocket real-time fan-out

Related apps:
    - authentication: User model and identity lookups
    - social: Group membership transitions

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for the WebSocket handler, realtime.py for the
    session registry and routing.py for WebSocket URL patterns.

Usage:
    from chat.services import MessageRouter

    result = MessageRouter.post_message(user, "hello", chat_id=chat.id)
"""
