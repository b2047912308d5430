"""
Realtime session registry for chat fan-out.

Tracks which live WebSocket sessions are subscribed to which conversation
channel and delivers new messages to them. A session is identified by its
consumer's ``channel_name``; a channel key is a chat ID or group ID.

Registries:
    InMemorySessionRegistry: process-owned map ``channel key -> sessions``,
        delivering through the channel layer's point-to-point ``send``.
        Rebuilt empty on restart. Suitable when HTTP and WebSocket traffic
        are served by the same process.
    ChannelLayerSessionRegistry: membership held in channel layer groups,
        so a broadcast reaches sessions connected to other processes.

The active registry is chosen by ``settings.CHAT_SESSION_REGISTRY`` (a
dotted path) and shared process-wide through get_session_registry().

Every session also sits in a per-user channel layer group, through which
revoke_channel() pulls a removed group member out of the group's channel.

Delivery is best-effort and at-most-once per subscribed session: no
acknowledgement, no retry. A session whose queue is full or gone is
logged and skipped.

Usage:
    from chat.realtime import get_session_registry

    registry = get_session_registry()
    await registry.subscribe(self.channel_name, str(chat.id))
    await registry.broadcast(str(chat.id), payload)

    # From synchronous code (views)
    from asgiref.sync import async_to_sync
    async_to_sync(registry.broadcast)(channel_key, payload)
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from functools import lru_cache

from channels.exceptions import ChannelFull
from channels.layers import get_channel_layer
from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

# Channel layer event types; dispatched to ChatConsumer.chat_new_message and
# ChatConsumer.chat_revoke
NEW_MESSAGE_EVENT = "chat.new_message"
REVOKE_EVENT = "chat.revoke"

# Every live session of a user joins this channel layer group on connect
USER_GROUP_PREFIX = "user."


def new_message_event(channel_key: str, payload: dict) -> dict:
    """Build the channel layer event carrying an enriched message."""
    return {
        "type": NEW_MESSAGE_EVENT,
        "channel": channel_key,
        "message": payload,
    }


def user_group_name(user_id) -> str:
    return f"{USER_GROUP_PREFIX}{user_id}"


async def revoke_channel(user_id, channel_key: str, channel_layer=None) -> None:
    """
    Tell every live session of a user to leave ``channel_key``.

    Sent through the user's channel layer group, so sessions connected to
    other processes are reached too. A session handles the events on its
    channel in order, so a message broadcast after this call is dropped by
    the consumer even while the registry still lists the session.
    """
    layer = channel_layer or get_channel_layer()
    await layer.group_send(
        user_group_name(user_id),
        {"type": REVOKE_EVENT, "channel": channel_key},
    )


class SessionRegistry:
    """
    Interface shared by the registries.

    All methods are coroutines. ``subscribe`` is idempotent and
    ``unsubscribe`` of a channel the session never joined is a no-op.
    """

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    async def subscribe(self, session_id: str, channel_key: str) -> None:
        raise NotImplementedError

    async def unsubscribe(self, session_id: str, channel_key: str) -> None:
        raise NotImplementedError

    async def broadcast(self, channel_key: str, payload: dict) -> None:
        raise NotImplementedError

    async def discard_session(self, session_id: str) -> None:
        """Remove a closing session from every channel it joined."""
        raise NotImplementedError


class InMemorySessionRegistry(SessionRegistry):
    """
    Subscription map owned by this process.

    Both directions are kept (channel -> sessions, session -> channels) so
    that a closing session can be removed from all of its channels without
    scanning. Mutations hold a threading lock because synchronous views
    reach the registry through ``async_to_sync`` on worker threads.
    """

    def __init__(self, channel_layer=None):
        super().__init__(channel_layer)
        self._lock = threading.Lock()
        self._subscribers: dict[str, set[str]] = defaultdict(set)
        self._subscriptions: dict[str, set[str]] = defaultdict(set)

    async def subscribe(self, session_id: str, channel_key: str) -> None:
        with self._lock:
            self._subscribers[channel_key].add(session_id)
            self._subscriptions[session_id].add(channel_key)

    async def unsubscribe(self, session_id: str, channel_key: str) -> None:
        with self._lock:
            self._remove(session_id, channel_key)

    async def discard_session(self, session_id: str) -> None:
        with self._lock:
            for channel_key in list(self._subscriptions.get(session_id, ())):
                self._remove(session_id, channel_key)

    def _remove(self, session_id: str, channel_key: str) -> None:
        # Caller holds the lock. Empty entries are dropped so the maps only
        # ever hold live subscriptions.
        sessions = self._subscribers.get(channel_key)
        if sessions is not None:
            sessions.discard(session_id)
            if not sessions:
                del self._subscribers[channel_key]

        channels = self._subscriptions.get(session_id)
        if channels is not None:
            channels.discard(channel_key)
            if not channels:
                del self._subscriptions[session_id]

    def subscribers(self, channel_key: str) -> frozenset[str]:
        """Snapshot of the sessions subscribed to a channel."""
        with self._lock:
            return frozenset(self._subscribers.get(channel_key, ()))

    async def broadcast(self, channel_key: str, payload: dict) -> int:
        """
        Send the payload to every session subscribed to ``channel_key``.

        Returns:
            Number of sessions the event was handed to
        """
        recipients = self.subscribers(channel_key)
        if not recipients:
            return 0

        event = new_message_event(channel_key, payload)
        delivered = 0
        for session_id in recipients:
            try:
                await self.channel_layer.send(session_id, event)
            except ChannelFull:
                logger.warning(
                    f"Dropped message for session {session_id} on channel "
                    f"{channel_key}: queue full"
                )
                continue
            delivered += 1

        logger.debug(f"Broadcast on {channel_key} to {delivered}/{len(recipients)} sessions")
        return delivered


class ChannelLayerSessionRegistry(SessionRegistry):
    """
    Subscription state held in channel layer groups.

    Group membership lives in the channel layer backend (Redis in
    deployment), so every process sees the same subscribers. The
    session -> channels map kept here only covers sessions connected to
    this process, which is all discard_session needs.
    """

    GROUP_PREFIX = "chat."

    def __init__(self, channel_layer=None):
        super().__init__(channel_layer)
        self._lock = threading.Lock()
        self._subscriptions: dict[str, set[str]] = defaultdict(set)

    @classmethod
    def group_name(cls, channel_key: str) -> str:
        return f"{cls.GROUP_PREFIX}{channel_key}"

    async def subscribe(self, session_id: str, channel_key: str) -> None:
        await self.channel_layer.group_add(self.group_name(channel_key), session_id)
        with self._lock:
            self._subscriptions[session_id].add(channel_key)

    async def unsubscribe(self, session_id: str, channel_key: str) -> None:
        with self._lock:
            channels = self._subscriptions.get(session_id, set())
            channels.discard(channel_key)
            if not channels:
                self._subscriptions.pop(session_id, None)
        await self.channel_layer.group_discard(self.group_name(channel_key), session_id)

    async def discard_session(self, session_id: str) -> None:
        with self._lock:
            channels = self._subscriptions.pop(session_id, set())
        for channel_key in channels:
            await self.channel_layer.group_discard(self.group_name(channel_key), session_id)

    async def broadcast(self, channel_key: str, payload: dict) -> None:
        # Backends drop (and log) sends to full channels inside group_send
        await self.channel_layer.group_send(
            self.group_name(channel_key),
            new_message_event(channel_key, payload),
        )


@lru_cache(maxsize=1)
def get_session_registry() -> SessionRegistry:
    """
    Return the process-wide registry named by ``CHAT_SESSION_REGISTRY``.

    Call ``get_session_registry.cache_clear()`` after changing the setting
    (tests do this between cases).
    """
    registry_class = import_string(settings.CHAT_SESSION_REGISTRY)
    logger.info(f"Using realtime session registry {registry_class.__name__}")
    return registry_class()
