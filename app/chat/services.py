"""
Chat system service layer.

This module provides the business logic for conversations and messages.

Services:
    ConversationResolver: Chat lookup/creation and message destination resolution
    GroupService: Group creation and retrieval
    MessageRouter: Persist messages, list them, flip read status, fan out

Group membership transitions (add/remove member) belong to the
relationship graph and live in social.services.GroupMembershipService.

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure()
    - Unexpected failures raise exceptions
    - A message insert and its conversation bump share one transaction;
      realtime delivery happens after the transaction block closes

Usage:
    from chat.services import ConversationResolver, MessageRouter

    # Create (or reuse) the direct chat between two users
    result = ConversationResolver.create_chat(alice, [alice.id, bob.id])
    chat, created = result.data

    # Send a message and broadcast it to subscribed sessions
    result = MessageRouter.post_message(alice, "hi", chat_id=chat.id)
    payload = result.data   # enriched message dict
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync
from django.db import IntegrityError, transaction

from authentication.models import User
from authentication.services import IdentityDirectory
from chat.models import Chat, DirectChatPair, Group, Message
from chat.realtime import get_session_registry, revoke_channel
from core.helpers import parse_uuid
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID


@dataclass(frozen=True)
class Destination:
    """
    A resolved message destination.

    Attributes:
        conversation: The Chat or Group instance
        participant_ids: Current participant IDs, for authorization
    """

    conversation: Chat | Group
    participant_ids: frozenset

    @property
    def is_chat(self) -> bool:
        return isinstance(self.conversation, Chat)

    @property
    def channel_key(self) -> str:
        return self.conversation.channel_key

    def allows(self, user: User) -> bool:
        return user.pk in self.participant_ids


def _resolve_users(raw_ids: Iterable) -> tuple[list[User], list]:
    """
    Turn raw participant IDs into users.

    Returns:
        (users, invalid) where ``invalid`` lists the raw values that are
        malformed or name no user. Duplicates are collapsed.
    """
    parsed: dict[UUID, object] = {}
    invalid = []
    for raw in raw_ids:
        user_id = parse_uuid(raw)
        if user_id is None:
            invalid.append(raw)
        else:
            parsed.setdefault(user_id, raw)

    users = list(User.objects.filter(pk__in=parsed.keys()))
    found = {user.pk for user in users}
    invalid.extend(raw for user_id, raw in parsed.items() if user_id not in found)
    return users, invalid


class ConversationResolver(BaseService):
    """
    Maps participants to chats and messages to their destination.

    Methods:
        find_direct_chat: The unique two-person chat for a pair, or None
        create_chat: Create a chat (reusing the pair's chat for two people)
        get_chat: Fetch a chat for one of its participants
        resolve_destination: Validate a chat/group reference for a message
    """

    @classmethod
    def find_direct_chat(cls, user_a: User, user_b: User) -> Chat | None:
        """
        Return the chat whose participants are exactly ``{user_a, user_b}``.

        Never creates anything; used to annotate friend lists.
        """
        if user_a.pk == user_b.pk:
            return None

        lower, higher = DirectChatPair.canonical(user_a.pk, user_b.pk)
        pair = (
            DirectChatPair.objects.select_related("chat")
            .filter(user_lower_id=lower, user_higher_id=higher)
            .first()
        )
        return pair.chat if pair else None

    @classmethod
    def create_chat(
        cls,
        requester: User,
        participant_ids: Iterable | None,
    ) -> ServiceResult[tuple[Chat, bool]]:
        """
        Create a chat between the given participants.

        A chat with exactly two distinct participants is the pair's direct
        chat: if one already exists it is returned instead of creating a
        parallel one. Chats of three or more are always new.

        Args:
            requester: Authenticated user; must be among the participants
            participant_ids: User IDs (strings or UUIDs)

        Returns:
            ServiceResult with ``(chat, created)``

        Error codes:
            INVALID_PARTICIPANTS: Missing list, requester absent, fewer than
                two distinct participants, or unknown user IDs
        """
        if not isinstance(participant_ids, (list, tuple, set, frozenset)):
            return ServiceResult.failure(
                "participants must be a list of user IDs",
                error_code="INVALID_PARTICIPANTS",
            )

        users, invalid = _resolve_users(participant_ids)
        if invalid:
            return ServiceResult.failure(
                "Unknown participants",
                error_code="INVALID_PARTICIPANTS",
                errors={"participants": [f"Unknown user: {raw}" for raw in invalid]},
            )

        if requester.pk not in {user.pk for user in users}:
            return ServiceResult.failure(
                "You must be a participant in the chat",
                error_code="INVALID_PARTICIPANTS",
            )

        if len(users) < 2:
            return ServiceResult.failure(
                "A chat needs at least two distinct participants",
                error_code="INVALID_PARTICIPANTS",
            )

        if len(users) == 2:
            return cls._get_or_create_direct(*users)

        with cls.atomic():
            chat = Chat.objects.create()
            chat.participants.set(users)

        cls.get_logger().info(
            f"User {requester.id} created chat {chat.id} with {len(users)} participants"
        )
        return ServiceResult.success((chat, True))

    @classmethod
    def _get_or_create_direct(cls, user_a: User, user_b: User) -> ServiceResult[tuple[Chat, bool]]:
        existing = cls.find_direct_chat(user_a, user_b)
        if existing is not None:
            cls.get_logger().debug(
                f"Reusing direct chat {existing.id} between {user_a.id} and {user_b.id}"
            )
            return ServiceResult.success((existing, False))

        lower, higher = DirectChatPair.canonical(user_a.pk, user_b.pk)
        try:
            with transaction.atomic():
                chat = Chat.objects.create()
                chat.participants.set([user_a, user_b])
                DirectChatPair.objects.create(
                    chat=chat,
                    user_lower_id=lower,
                    user_higher_id=higher,
                )
        except IntegrityError:
            # A concurrent request created the pair first; return its chat
            winner = cls.find_direct_chat(user_a, user_b)
            if winner is None:
                raise
            return ServiceResult.success((winner, False))

        cls.get_logger().info(
            f"Created direct chat {chat.id} between users {lower} and {higher}"
        )
        return ServiceResult.success((chat, True))

    @classmethod
    def get_chat(cls, actor: User, chat_id) -> ServiceResult[Chat]:
        """
        Fetch a chat for one of its participants.

        Error codes:
            CHAT_NOT_FOUND, NOT_PARTICIPANT
        """
        pk = parse_uuid(chat_id)
        chat = Chat.objects.filter(pk=pk).first() if pk else None
        if chat is None:
            return ServiceResult.failure("Chat not found", error_code="CHAT_NOT_FOUND")

        if not chat.has_participant(actor):
            return ServiceResult.failure(
                "You are not a participant in this chat",
                error_code="NOT_PARTICIPANT",
            )
        return ServiceResult.success(chat)

    @classmethod
    def resolve_destination(cls, chat_id=None, group_id=None) -> ServiceResult[Destination]:
        """
        Resolve exactly one of ``chat_id`` / ``group_id`` to a conversation.

        Error codes:
            INVALID_DESTINATION: Both or neither given
            CHAT_NOT_FOUND / GROUP_NOT_FOUND: Referenced conversation absent
        """
        has_chat = chat_id not in (None, "")
        has_group = group_id not in (None, "")
        if has_chat == has_group:
            return ServiceResult.failure(
                "Provide exactly one of chat or group",
                error_code="INVALID_DESTINATION",
            )

        if has_chat:
            model, raw, code = Chat, chat_id, "CHAT_NOT_FOUND"
        else:
            model, raw, code = Group, group_id, "GROUP_NOT_FOUND"

        pk = parse_uuid(raw)
        conversation = model.objects.filter(pk=pk).first() if pk else None
        if conversation is None:
            return ServiceResult.failure(
                f"{model.__name__} not found",
                error_code=code,
            )

        participant_ids = frozenset(
            conversation.participants.values_list("pk", flat=True)
        )
        return ServiceResult.success(Destination(conversation, participant_ids))


class GroupService(BaseService):
    """
    Group creation and retrieval.

    Methods:
        create_group: Create a group; the creator is always a participant
        get_group: Fetch a group for one of its participants
    """

    @classmethod
    def create_group(
        cls,
        creator: User,
        name: str | None,
        participant_ids: Iterable | None = None,
    ) -> ServiceResult[Group]:
        """
        Create a group named ``name``.

        The creator is added to the initial participant set whether or
        not it was listed.

        Error codes:
            VALIDATION_ERROR: Name missing or blank
            INVALID_PARTICIPANTS: Participants not a list, or unknown user IDs
        """
        validation = cls.validate_required(name=name)
        if validation is not None:
            return validation

        if participant_ids is None:
            participant_ids = []
        if not isinstance(participant_ids, (list, tuple, set, frozenset)):
            return ServiceResult.failure(
                "participants must be a list of user IDs",
                error_code="INVALID_PARTICIPANTS",
            )

        users, invalid = _resolve_users(participant_ids)
        if invalid:
            return ServiceResult.failure(
                "Unknown participants",
                error_code="INVALID_PARTICIPANTS",
                errors={"participants": [f"Unknown user: {raw}" for raw in invalid]},
            )

        members = {user.pk: user for user in users}
        members[creator.pk] = creator

        with cls.atomic():
            group = Group.objects.create(name=name.strip())
            group.participants.set(members.values())

        cls.get_logger().info(
            f"User {creator.id} created group {group.id} '{group.name}' "
            f"with {len(members)} participants"
        )
        return ServiceResult.success(group)

    @classmethod
    def get_group(cls, actor: User, group_id) -> ServiceResult[Group]:
        """
        Fetch a group for one of its participants.

        Error codes:
            GROUP_NOT_FOUND, NOT_PARTICIPANT
        """
        pk = parse_uuid(group_id)
        group = Group.objects.filter(pk=pk).first() if pk else None
        if group is None:
            return ServiceResult.failure("Group not found", error_code="GROUP_NOT_FOUND")

        if not group.has_participant(actor):
            return ServiceResult.failure(
                "You are not a participant in this group",
                error_code="NOT_PARTICIPANT",
            )
        return ServiceResult.success(group)


class MessageRouter(BaseService):
    """
    Message persistence, retrieval and realtime fan-out.

    Methods:
        post_message: Persist, append to conversation, broadcast
        get_message: Fetch one message
        list_messages: Chat history in chronological order
        list_group_messages: Group history in chronological order
        set_read_status: Flip a message's ``isRead`` flag
        enrich: Render a message with its sender's public identity
        deliver: Best-effort broadcast to the destination's channel
    """

    @staticmethod
    def enrich(message: Message) -> dict:
        """
        Render a message as the payload shared by HTTP and WebSocket.

        Shape:
            {id, sender: {id, username}, content, timestamp, isRead,
             chat: <id|null>, group: <id|null>}
        """
        return {
            "id": str(message.id),
            "sender": IdentityDirectory.public_identity(message.sender),
            "content": message.content,
            "timestamp": message.created_at.isoformat(),
            "isRead": message.is_read,
            "chat": str(message.chat_id) if message.chat_id else None,
            "group": str(message.group_id) if message.group_id else None,
        }

    @classmethod
    def post_message(
        cls,
        actor: User,
        content,
        chat_id=None,
        group_id=None,
    ) -> ServiceResult[dict]:
        """
        Send a message to a chat or group.

        Steps:
            1. Resolve the destination (exactly one of chat/group)
            2. Check the actor participates in it
            3. Insert the message and bump the conversation's
               ``last_message_at`` in one transaction
            4. Broadcast the enriched message to subscribed sessions

        The enriched message is returned whatever the delivery outcome.

        Error codes:
            INVALID_DESTINATION, CHAT_NOT_FOUND, GROUP_NOT_FOUND,
            VALIDATION_ERROR (empty content), NOT_PARTICIPANT
        """
        resolved = ConversationResolver.resolve_destination(chat_id, group_id)
        if not resolved.success:
            return resolved
        destination = resolved.data

        if not isinstance(content, str) or not content.strip():
            return ServiceResult.failure(
                "Message content cannot be empty",
                error_code="VALIDATION_ERROR",
                errors={"content": ["This field is required."]},
            )

        if not destination.allows(actor):
            cls.get_logger().warning(
                f"User {actor.id} tried to post to {destination.channel_key} "
                "without participating"
            )
            return ServiceResult.failure(
                "You are not a participant in this conversation",
                error_code="NOT_PARTICIPANT",
            )

        conversation = destination.conversation
        with cls.atomic():
            message = Message.objects.create(
                sender=actor,
                content=content,
                chat=conversation if destination.is_chat else None,
                group=None if destination.is_chat else conversation,
            )
            type(conversation).objects.filter(pk=conversation.pk).update(
                last_message_at=message.created_at,
            )

        cls.get_logger().debug(
            f"User {actor.id} sent message {message.id} to {destination.channel_key}"
        )

        payload = cls.enrich(message)
        cls.deliver(destination.channel_key, payload)
        return ServiceResult.success(payload)

    @classmethod
    def deliver(cls, channel_key: str, payload: dict) -> None:
        """
        Broadcast a payload on a realtime channel, best-effort.

        Failures are logged and swallowed: the message is already stored
        and the HTTP caller still gets it back.
        """
        try:
            async_to_sync(get_session_registry().broadcast)(channel_key, payload)
        except Exception:
            cls.get_logger().exception(f"Realtime delivery on {channel_key} failed")

    @classmethod
    def revoke(cls, user_id, channel_key: str) -> None:
        """Make every live session of ``user_id`` leave a channel, best-effort."""
        try:
            async_to_sync(revoke_channel)(user_id, channel_key)
        except Exception:
            cls.get_logger().exception(
                f"Revoking channel {channel_key} for user {user_id} failed"
            )

    @classmethod
    def get_message(cls, message_id, actor: User | None = None) -> ServiceResult[Message]:
        """
        Fetch a message by ID.

        When ``actor`` is given it must participate in the message's
        conversation.

        Error codes:
            MESSAGE_NOT_FOUND, NOT_PARTICIPANT
        """
        pk = parse_uuid(message_id)
        message = (
            Message.objects.select_related("sender").filter(pk=pk).first()
            if pk
            else None
        )
        if message is None:
            return ServiceResult.failure("Message not found", error_code="MESSAGE_NOT_FOUND")

        if actor is not None and not cls._participates(actor, message):
            return ServiceResult.failure(
                "You are not a participant in this conversation",
                error_code="NOT_PARTICIPANT",
            )
        return ServiceResult.success(message)

    @classmethod
    def list_messages(cls, actor: User, chat_id) -> ServiceResult[list[dict]]:
        """
        List a chat's messages in chronological order, enriched.

        Error codes:
            CHAT_NOT_FOUND, NOT_PARTICIPANT
        """
        result = ConversationResolver.get_chat(actor, chat_id)
        if not result.success:
            return result
        return ServiceResult.success(cls._history(result.data.messages))

    @classmethod
    def list_group_messages(cls, actor: User, group_id) -> ServiceResult[list[dict]]:
        """
        List a group's messages in chronological order, enriched.

        Error codes:
            GROUP_NOT_FOUND, NOT_PARTICIPANT
        """
        result = GroupService.get_group(actor, group_id)
        if not result.success:
            return result
        return ServiceResult.success(cls._history(result.data.messages))

    @classmethod
    def _history(cls, messages) -> list[dict]:
        return [
            cls.enrich(message)
            for message in messages.select_related("sender").order_by("created_at", "id")
        ]

    @classmethod
    def set_read_status(cls, actor: User, message_id, is_read) -> ServiceResult[dict]:
        """
        Set a message's read flag.

        Only participants of the message's chat or group may change it.

        Error codes:
            VALIDATION_ERROR (isRead not a boolean), MESSAGE_NOT_FOUND,
            NOT_PARTICIPANT
        """
        if not isinstance(is_read, bool):
            return ServiceResult.failure(
                "isRead must be a boolean",
                error_code="VALIDATION_ERROR",
                errors={"isRead": ["Must be true or false."]},
            )

        result = cls.get_message(message_id, actor=actor)
        if not result.success:
            return result
        message = result.data

        if message.is_read != is_read:
            message.is_read = is_read
            message.save(update_fields=["is_read", "updated_at"])
            cls.get_logger().debug(f"User {actor.id} set message {message.id} isRead={is_read}")

        return ServiceResult.success(cls.enrich(message))

    @staticmethod
    def _participates(user: User, message: Message) -> bool:
        conversation = message.chat if message.chat_id else message.group
        return conversation.has_participant(user)
