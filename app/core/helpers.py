"""
Helper functions for common infrastructure operations.

These utilities are pure infrastructure. They have no knowledge of
domain concepts like friends, chats or messages.

Usage:
    from core.helpers import parse_uuid

    chat_id = parse_uuid(request.data.get("chat"))
    if chat_id is None:
        ...
"""

from __future__ import annotations

import uuid


def parse_uuid(value) -> uuid.UUID | None:
    """
    Coerce a string or UUID into a UUID, or None when it is not one.

    Lookups by primary key go through this first so that a malformed ID
    behaves like a missing record instead of raising from the ORM.
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        return None
