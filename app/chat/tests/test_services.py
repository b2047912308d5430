"""
Tests for chat service layer business logic.

- ConversationResolver: chat creation/reuse, lookup, destination resolution
- GroupService: group creation and retrieval
- MessageRouter: posting, history, read status, realtime delivery

Tests focus on observable behavior: ServiceResult success/failure,
error codes and database state.
"""

import uuid
from unittest.mock import patch

from chat.models import Chat, DirectChatPair, Group, Message
from chat.services import ConversationResolver, GroupService, MessageRouter
from chat.tests.factories import ChatFactory, MessageFactory


# =============================================================================
# ConversationResolver
# =============================================================================


class TestCreateChat:
    """Tests for ConversationResolver.create_chat()."""

    def test_creates_direct_chat_with_pair(self, alice, bob):
        result = ConversationResolver.create_chat(alice, [str(alice.id), str(bob.id)])

        assert result.success
        chat, created = result.data
        assert created is True
        assert set(chat.participants.all()) == {alice, bob}
        assert DirectChatPair.objects.filter(chat=chat).exists()

    def test_second_creation_returns_existing_chat_in_either_order(self, alice, bob):
        first, _ = ConversationResolver.create_chat(alice, [alice.id, bob.id]).data

        result = ConversationResolver.create_chat(bob, [bob.id, alice.id])

        chat, created = result.data
        assert created is False
        assert chat == first
        assert Chat.objects.count() == 1

    def test_three_participants_always_new(self, alice, bob, carol):
        ids = [alice.id, bob.id, carol.id]

        first, _ = ConversationResolver.create_chat(alice, ids).data
        second, created = ConversationResolver.create_chat(alice, ids).data

        assert created is True
        assert first != second
        assert not DirectChatPair.objects.filter(chat__in=[first, second]).exists()

    def test_duplicate_ids_collapse(self, alice, bob):
        chat, _ = ConversationResolver.create_chat(
            alice, [alice.id, bob.id, str(bob.id)]
        ).data

        assert chat.participants.count() == 2

    def test_requester_must_participate(self, alice, bob, carol):
        result = ConversationResolver.create_chat(alice, [bob.id, carol.id])

        assert not result.success
        assert result.error_code == "INVALID_PARTICIPANTS"
        assert Chat.objects.count() == 0

    def test_single_participant_rejected(self, alice):
        result = ConversationResolver.create_chat(alice, [alice.id])

        assert result.error_code == "INVALID_PARTICIPANTS"

    def test_unknown_ids_rejected(self, alice):
        result = ConversationResolver.create_chat(alice, [alice.id, uuid.uuid4(), "nope"])

        assert result.error_code == "INVALID_PARTICIPANTS"
        assert len(result.errors["participants"]) == 2

    def test_non_list_rejected(self, alice):
        result = ConversationResolver.create_chat(alice, "not-a-list")

        assert result.error_code == "INVALID_PARTICIPANTS"


class TestFindDirectChat:
    """Tests for ConversationResolver.find_direct_chat()."""

    def test_finds_chat_for_pair(self, direct_chat, alice, bob):
        assert ConversationResolver.find_direct_chat(bob, alice) == direct_chat

    def test_none_without_chat(self, alice, carol):
        assert ConversationResolver.find_direct_chat(alice, carol) is None

    def test_none_for_self(self, alice):
        assert ConversationResolver.find_direct_chat(alice, alice) is None


class TestGetChat:
    """Tests for ConversationResolver.get_chat()."""

    def test_participant_gets_chat(self, direct_chat, alice):
        assert ConversationResolver.get_chat(alice, direct_chat.id).data == direct_chat

    def test_non_participant_forbidden(self, direct_chat, outsider):
        result = ConversationResolver.get_chat(outsider, direct_chat.id)

        assert result.error_code == "NOT_PARTICIPANT"

    def test_missing_or_malformed_id_not_found(self, alice):
        assert ConversationResolver.get_chat(alice, uuid.uuid4()).error_code == "CHAT_NOT_FOUND"
        assert ConversationResolver.get_chat(alice, "garbage").error_code == "CHAT_NOT_FOUND"


class TestResolveDestination:
    """Tests for ConversationResolver.resolve_destination()."""

    def test_chat_destination(self, direct_chat, alice, bob):
        destination = ConversationResolver.resolve_destination(chat_id=direct_chat.id).data

        assert destination.is_chat
        assert destination.channel_key == str(direct_chat.id)
        assert destination.participant_ids == {alice.pk, bob.pk}

    def test_group_destination(self, group):
        destination = ConversationResolver.resolve_destination(group_id=str(group.id)).data

        assert not destination.is_chat
        assert destination.conversation == group

    def test_both_or_neither_is_invalid(self, direct_chat, group):
        both = ConversationResolver.resolve_destination(direct_chat.id, group.id)
        neither = ConversationResolver.resolve_destination(None, "")

        assert both.error_code == "INVALID_DESTINATION"
        assert neither.error_code == "INVALID_DESTINATION"

    def test_missing_conversations(self, db):
        assert (
            ConversationResolver.resolve_destination(chat_id=uuid.uuid4()).error_code
            == "CHAT_NOT_FOUND"
        )
        assert (
            ConversationResolver.resolve_destination(group_id=uuid.uuid4()).error_code
            == "GROUP_NOT_FOUND"
        )


# =============================================================================
# GroupService
# =============================================================================


class TestCreateGroup:
    """Tests for GroupService.create_group()."""

    def test_creator_always_added(self, alice, bob):
        result = GroupService.create_group(alice, "  Climbing ", [str(bob.id)])

        group = result.data
        assert group.name == "Climbing"
        assert set(group.participants.all()) == {alice, bob}

    def test_without_participants(self, alice):
        group = GroupService.create_group(alice, "Solo").data

        assert list(group.participants.all()) == [alice]

    def test_blank_name_rejected(self, alice):
        result = GroupService.create_group(alice, "   ", [])

        assert result.error_code == "VALIDATION_ERROR"
        assert "name" in result.errors
        assert not Group.objects.exists()

    def test_unknown_participant_rejected(self, alice):
        result = GroupService.create_group(alice, "Climbing", [str(uuid.uuid4())])

        assert result.error_code == "INVALID_PARTICIPANTS"


class TestGetGroup:
    """Tests for GroupService.get_group()."""

    def test_participant_gets_group(self, group, carol):
        assert GroupService.get_group(carol, group.id).data == group

    def test_non_participant_forbidden(self, group, outsider):
        assert GroupService.get_group(outsider, group.id).error_code == "NOT_PARTICIPANT"

    def test_missing(self, alice):
        assert GroupService.get_group(alice, uuid.uuid4()).error_code == "GROUP_NOT_FOUND"


# =============================================================================
# MessageRouter
# =============================================================================


class TestPostMessage:
    """Tests for MessageRouter.post_message()."""

    def test_posts_to_chat(self, direct_chat, alice):
        result = MessageRouter.post_message(alice, "hi", chat_id=str(direct_chat.id))

        assert result.success
        payload = result.data
        assert payload["content"] == "hi"
        assert payload["sender"] == {"id": str(alice.id), "username": "alice"}
        assert payload["isRead"] is False
        assert payload["chat"] == str(direct_chat.id)
        assert payload["group"] is None

        message = Message.objects.get(pk=payload["id"])
        direct_chat.refresh_from_db()
        assert direct_chat.last_message_at == message.created_at

    def test_posts_to_group(self, group, carol):
        payload = MessageRouter.post_message(carol, "hello all", group_id=group.id).data

        assert payload["group"] == str(group.id)
        assert payload["chat"] is None
        assert group.messages.count() == 1

    def test_both_destinations_rejected_and_nothing_stored(self, direct_chat, group, alice):
        result = MessageRouter.post_message(
            alice, "hi", chat_id=direct_chat.id, group_id=group.id
        )

        assert result.error_code == "INVALID_DESTINATION"
        assert Message.objects.count() == 0

    def test_no_destination_rejected(self, alice):
        result = MessageRouter.post_message(alice, "hi")

        assert result.error_code == "INVALID_DESTINATION"
        assert Message.objects.count() == 0

    def test_blank_content_rejected(self, direct_chat, alice):
        result = MessageRouter.post_message(alice, "   ", chat_id=direct_chat.id)

        assert result.error_code == "VALIDATION_ERROR"
        assert Message.objects.count() == 0

    def test_non_participant_rejected(self, direct_chat, outsider):
        result = MessageRouter.post_message(outsider, "hi", chat_id=direct_chat.id)

        assert result.error_code == "NOT_PARTICIPANT"
        assert Message.objects.count() == 0

    def test_broadcasts_enriched_message_on_channel(self, direct_chat, alice):
        with patch.object(MessageRouter, "deliver") as deliver:
            payload = MessageRouter.post_message(alice, "hi", chat_id=direct_chat.id).data

        deliver.assert_called_once_with(str(direct_chat.id), payload)

    def test_delivery_failure_does_not_fail_post(self, direct_chat, alice, session_registry):
        with patch.object(
            type(session_registry), "broadcast", side_effect=RuntimeError("layer down")
        ):
            result = MessageRouter.post_message(alice, "hi", chat_id=direct_chat.id)

        assert result.success
        assert Message.objects.count() == 1


class TestGetMessage:
    """Tests for MessageRouter.get_message()."""

    def test_found(self, direct_chat, alice):
        message = MessageFactory(chat=direct_chat, sender=alice)

        assert MessageRouter.get_message(message.id).data == message

    def test_missing(self, db):
        assert MessageRouter.get_message(uuid.uuid4()).error_code == "MESSAGE_NOT_FOUND"
        assert MessageRouter.get_message("nope").error_code == "MESSAGE_NOT_FOUND"

    def test_actor_must_participate(self, direct_chat, alice, outsider):
        message = MessageFactory(chat=direct_chat, sender=alice)

        assert MessageRouter.get_message(message.id, actor=outsider).error_code == "NOT_PARTICIPANT"
        assert MessageRouter.get_message(message.id, actor=alice).success


class TestListMessages:
    """Tests for MessageRouter.list_messages() and list_group_messages()."""

    def test_chat_history_in_posting_order(self, direct_chat, alice, bob):
        MessageRouter.post_message(alice, "one", chat_id=direct_chat.id)
        MessageRouter.post_message(bob, "two", chat_id=direct_chat.id)

        history = MessageRouter.list_messages(alice, direct_chat.id).data

        assert [m["content"] for m in history] == ["one", "two"]
        assert history[1]["sender"]["username"] == "bob"

    def test_chat_history_excludes_other_conversations(self, direct_chat, group, alice):
        MessageRouter.post_message(alice, "chat", chat_id=direct_chat.id)
        MessageRouter.post_message(alice, "group", group_id=group.id)

        history = MessageRouter.list_messages(alice, direct_chat.id).data

        assert [m["content"] for m in history] == ["chat"]

    def test_non_participant_forbidden(self, direct_chat, outsider):
        assert MessageRouter.list_messages(outsider, direct_chat.id).error_code == "NOT_PARTICIPANT"

    def test_missing_chat(self, alice):
        assert MessageRouter.list_messages(alice, uuid.uuid4()).error_code == "CHAT_NOT_FOUND"

    def test_group_history(self, group, alice, carol):
        MessageRouter.post_message(alice, "hey", group_id=group.id)

        history = MessageRouter.list_group_messages(carol, group.id).data

        assert [m["content"] for m in history] == ["hey"]


class TestSetReadStatus:
    """Tests for MessageRouter.set_read_status()."""

    def test_participant_marks_read(self, direct_chat, alice, bob):
        message = MessageFactory(chat=direct_chat, sender=alice)

        result = MessageRouter.set_read_status(bob, message.id, True)

        assert result.data["isRead"] is True
        message.refresh_from_db()
        assert message.is_read is True

    def test_non_participant_forbidden_and_unchanged(self, direct_chat, alice, outsider):
        message = MessageFactory(chat=direct_chat, sender=alice)

        result = MessageRouter.set_read_status(outsider, message.id, True)

        assert result.error_code == "NOT_PARTICIPANT"
        message.refresh_from_db()
        assert message.is_read is False

    def test_non_boolean_rejected(self, direct_chat, alice):
        message = MessageFactory(chat=direct_chat, sender=alice)

        assert MessageRouter.set_read_status(alice, message.id, "yes").error_code == "VALIDATION_ERROR"

    def test_missing_message(self, alice):
        assert (
            MessageRouter.set_read_status(alice, uuid.uuid4(), True).error_code
            == "MESSAGE_NOT_FOUND"
        )
