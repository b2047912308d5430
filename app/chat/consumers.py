"""
WebSocket consumers for the chat application.

This module implements the WebSocket consumer for real-time fan-out of new
messages. Messages are posted over HTTP; the socket only subscribes to
channels and receives broadcasts.

Consumers:
    ChatConsumer: One connection per client, any number of joined channels

Authentication:
    Users are authenticated via JWT (query parameter or subprotocol).
    JWTAuthMiddleware attaches the user to self.scope["user"].
    Unauthenticated connections are closed with code 4001.

Channels:
    A channel key is a chat ID or group ID. Joining requires being a
    participant of that chat or group. Subscriptions live in the session
    registry (chat.realtime), keyed by this consumer's channel_name.

Message Types (from client):
    - joinChat: {"type": "joinChat", "channel": "<id>"}
    - leaveChat: {"type": "leaveChat", "channel": "<id>"}

Message Types (to client):
    - newMessage: {"type": "newMessage", "message": {...}}
    - joined / left: {"type": "joined", "channel": "<id>"}
    - error: {"type": "error", "message": "..."}
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from authentication.services import PresenceService
from chat.middleware import SUBPROTOCOL
from chat.models import Chat, Group
from chat.realtime import get_session_registry, user_group_name
from core.helpers import parse_uuid

logger = logging.getLogger(__name__)

# Close code for connections without a valid token
CLOSE_UNAUTHENTICATED = 4001


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for real-time chat delivery.

    Handles:
        - Connection authentication
        - Joining/leaving conversation channels (participants only)
        - Forwarding newMessage broadcasts to the client
        - The user's ``connected`` flag

    Attributes:
        user: Authenticated user (after connect)
        registry: Session registry shared by this process
        joined: Channel keys this session currently holds
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user = None
        self.registry = None
        self.joined: set[str] = set()

    async def connect(self):
        """
        Handle WebSocket connection.

        Rejects unauthenticated users; otherwise marks the user connected and
        accepts, echoing the jwt subprotocol when the client used it.
        """
        user = self.scope.get("user")

        if not user or not user.is_authenticated:
            logger.warning("Rejected unauthenticated WebSocket connection")
            await self.close(code=CLOSE_UNAUTHENTICATED)
            return

        self.user = user
        self.registry = get_session_registry()

        await database_sync_to_async(PresenceService.session_opened)(user.pk)
        await self.channel_layer.group_add(user_group_name(user.id), self.channel_name)

        subprotocol = SUBPROTOCOL if SUBPROTOCOL in self.scope.get("subprotocols", []) else None
        await self.accept(subprotocol=subprotocol)
        logger.info(f"User {user.id} connected ({self.channel_name})")

    async def disconnect(self, close_code):
        """
        Handle WebSocket disconnection.

        Drops the session from every channel it joined and updates the
        user's ``connected`` flag.
        """
        if self.user is None:
            return

        self.joined.clear()
        await self.registry.discard_session(self.channel_name)
        await self.channel_layer.group_discard(user_group_name(self.user.id), self.channel_name)
        still_connected = await database_sync_to_async(PresenceService.session_closed)(
            self.user.pk
        )
        logger.info(
            f"User {self.user.id} disconnected ({self.channel_name}, code {close_code}, "
            f"other sessions: {still_connected})"
        )

    async def receive_json(self, content, **kwargs):
        """
        Handle incoming WebSocket frames.

        Expected frame format:
            {"type": "joinChat", "channel": "<chat-or-group-id>"}
            {"type": "leaveChat", "channel": "<chat-or-group-id>"}
        """
        if not isinstance(content, dict):
            await self._send_error("Frames must be JSON objects")
            return

        frame_type = content.get("type")
        if frame_type == "joinChat":
            await self._handle_join(content.get("channel"))
        elif frame_type == "leaveChat":
            await self._handle_leave(content.get("channel"))
        else:
            await self._send_error(f"Unknown message type: {frame_type}")

    async def _handle_join(self, raw_channel):
        channel_key = self._channel_key(raw_channel)
        if channel_key is None:
            await self._send_error("channel must be a chat or group ID")
            return

        if not await self._can_join(channel_key):
            logger.warning(f"User {self.user.id} refused channel {channel_key}")
            await self._send_error("Channel not found or you are not a participant")
            return

        self.joined.add(channel_key)
        await self.registry.subscribe(self.channel_name, channel_key)
        await self.send_json({"type": "joined", "channel": channel_key})

    async def _handle_leave(self, raw_channel):
        channel_key = self._channel_key(raw_channel)
        if channel_key is None:
            await self._send_error("channel must be a chat or group ID")
            return

        self.joined.discard(channel_key)
        await self.registry.unsubscribe(self.channel_name, channel_key)
        await self.send_json({"type": "left", "channel": channel_key})

    async def chat_revoke(self, event):
        """
        Handle chat.revoke events: the user lost access to a channel.

        Sent to every session of a user removed from a group. Sessions
        that never joined the channel ignore it.
        """
        channel_key = event["channel"]
        if channel_key not in self.joined:
            return

        self.joined.discard(channel_key)
        await self.registry.unsubscribe(self.channel_name, channel_key)
        logger.info(f"User {self.user.id} lost access to channel {channel_key}")
        await self.send_json({"type": "left", "channel": channel_key})

    async def chat_new_message(self, event):
        """
        Handle chat.new_message events from the channel layer.

        Sends the enriched message to the WebSocket client. Events for a
        channel this session no longer holds are dropped.
        """
        if event.get("channel") not in self.joined:
            return

        await self.send_json(
            {
                "type": "newMessage",
                "message": event["message"],
            }
        )

    async def _send_error(self, message: str):
        await self.send_json({"type": "error", "message": message})

    @staticmethod
    def _channel_key(raw_channel) -> str | None:
        channel_id = parse_uuid(raw_channel)
        return str(channel_id) if channel_id else None

    @database_sync_to_async
    def _can_join(self, channel_key: str) -> bool:
        """Check the user participates in the chat or group with this ID."""
        return (
            Chat.objects.filter(pk=channel_key, participants=self.user).exists()
            or Group.objects.filter(pk=channel_key, participants=self.user).exists()
        )
