"""
Tests for chat API views.

- ChatViewSet: /api/chats/
- GroupViewSet: /api/groups/
- MessageViewSet: /api/messages/

Tests focus on observable HTTP behavior: status codes, response bodies
and database state.
"""

import uuid

from rest_framework import status

from chat.models import Chat, Group, Message
from chat.services import MessageRouter
from chat.tests.factories import MessageFactory


CHATS_URL = "/api/chats/"
GROUPS_URL = "/api/groups/"
MESSAGES_URL = "/api/messages/"


class TestChatEndpoints:
    """Tests for /api/chats/."""

    def test_requires_authentication(self, api_client, db):
        response = api_client.post(CHATS_URL, {"participants": []}, format="json")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data["error_code"] == "NOT_AUTHENTICATED"

    def test_create_direct_chat_then_reuse(self, alice_client, bob_client, alice, bob):
        body = {"participants": [str(alice.id), str(bob.id)]}

        created = alice_client.post(CHATS_URL, body, format="json")
        reused = bob_client.post(
            CHATS_URL, {"participants": [str(bob.id), str(alice.id)]}, format="json"
        )

        assert created.status_code == status.HTTP_201_CREATED
        assert reused.status_code == status.HTTP_200_OK
        assert reused.data["id"] == created.data["id"]
        assert {p["username"] for p in created.data["participants"]} == {"alice", "bob"}
        assert Chat.objects.count() == 1

    def test_create_with_unknown_participant(self, alice_client, alice):
        response = alice_client.post(
            CHATS_URL, {"participants": [str(alice.id), str(uuid.uuid4())]}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_PARTICIPANTS"

    def test_create_without_participants(self, alice_client):
        response = alice_client.post(CHATS_URL, {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "VALIDATION_ERROR"

    def test_retrieve(self, alice_client, outsider_client, direct_chat):
        assert alice_client.get(f"{CHATS_URL}{direct_chat.id}/").status_code == 200
        assert outsider_client.get(f"{CHATS_URL}{direct_chat.id}/").status_code == 403

    def test_messages_scenario(self, alice_client, bob_client, alice, bob):
        """
        A and B create a chat, A posts "hi", the history shows one unread
        message from A.
        """
        chat_id = alice_client.post(
            CHATS_URL, {"participants": [str(alice.id), str(bob.id)]}, format="json"
        ).data["id"]
        alice_client.post(MESSAGES_URL, {"content": "hi", "chat": chat_id}, format="json")

        response = bob_client.get(f"{CHATS_URL}{chat_id}/messages/")

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        message = response.data[0]
        assert message["content"] == "hi"
        assert message["sender"]["id"] == str(alice.id)
        assert message["isRead"] is False

    def test_messages_forbidden_for_non_participant(self, outsider_client, direct_chat):
        response = outsider_client.get(f"{CHATS_URL}{direct_chat.id}/messages/")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "NOT_PARTICIPANT"

    def test_messages_of_missing_chat(self, alice_client):
        response = alice_client.get(f"{CHATS_URL}{uuid.uuid4()}/messages/")

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestGroupEndpoints:
    """Tests for /api/groups/."""

    def test_create(self, alice_client, alice, bob):
        response = alice_client.post(
            GROUPS_URL, {"name": "Climbing", "participants": [str(bob.id)]}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["name"] == "Climbing"
        assert {p["id"] for p in response.data["participants"]} == {str(alice.id), str(bob.id)}

    def test_create_without_name(self, alice_client):
        response = alice_client.post(GROUPS_URL, {"participants": []}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Group.objects.count() == 0

    def test_retrieve_forbidden_for_non_participant(self, outsider_client, group):
        response = outsider_client.get(f"{GROUPS_URL}{group.id}/")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_add_member(self, alice_client, group, outsider):
        response = alice_client.post(
            f"{GROUPS_URL}{group.id}/users/", {"userId": str(outsider.id)}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert str(outsider.id) in {p["id"] for p in response.data["participants"]}
        assert group in outsider.chat_groups.all()

    def test_add_member_twice_conflicts(self, alice_client, group, bob):
        response = alice_client.post(
            f"{GROUPS_URL}{group.id}/users/", {"userId": str(bob.id)}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "ALREADY_MEMBER"

    def test_non_participant_cannot_add(self, outsider_client, group, outsider):
        before = set(group.participants.all())

        response = outsider_client.post(
            f"{GROUPS_URL}{group.id}/users/", {"userId": str(outsider.id)}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert set(group.participants.all()) == before

    def test_remove_member(self, alice_client, group, carol):
        response = alice_client.delete(f"{GROUPS_URL}{group.id}/users/{carol.id}/")

        assert response.status_code == status.HTTP_200_OK
        assert not group.participants.filter(pk=carol.pk).exists()

    def test_non_participant_cannot_remove(self, outsider_client, group, carol):
        response = outsider_client.delete(f"{GROUPS_URL}{group.id}/users/{carol.id}/")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert group.participants.filter(pk=carol.pk).exists()

    def test_group_messages(self, alice_client, bob_client, group):
        alice_client.post(
            MESSAGES_URL, {"content": "hey", "group": str(group.id)}, format="json"
        )

        response = bob_client.get(f"{GROUPS_URL}{group.id}/messages/")

        assert response.status_code == status.HTTP_200_OK
        assert [m["content"] for m in response.data] == ["hey"]


class TestMessageEndpoints:
    """Tests for /api/messages/."""

    def test_post_to_chat(self, alice_client, direct_chat, alice):
        response = alice_client.post(
            MESSAGES_URL, {"content": "hi", "chat": str(direct_chat.id)}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["sender"] == {"id": str(alice.id), "username": "alice"}
        assert response.data["chat"] == str(direct_chat.id)
        assert response.data["group"] is None

    def test_post_with_both_destinations(self, alice_client, direct_chat, group):
        response = alice_client.post(
            MESSAGES_URL,
            {"content": "hi", "chat": str(direct_chat.id), "group": str(group.id)},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_DESTINATION"
        assert Message.objects.count() == 0

    def test_post_without_destination(self, alice_client):
        response = alice_client.post(MESSAGES_URL, {"content": "hi"}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Message.objects.count() == 0

    def test_post_without_content(self, alice_client, direct_chat):
        response = alice_client.post(
            MESSAGES_URL, {"chat": str(direct_chat.id)}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "content" in response.data["errors"]

    def test_post_as_non_participant(self, outsider_client, direct_chat):
        response = outsider_client.post(
            MESSAGES_URL, {"content": "hi", "chat": str(direct_chat.id)}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_post_to_missing_chat(self, alice_client):
        response = alice_client.post(
            MESSAGES_URL, {"content": "hi", "chat": str(uuid.uuid4())}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "CHAT_NOT_FOUND"

    def test_retrieve(self, bob_client, direct_chat, alice):
        message = MessageFactory(chat=direct_chat, sender=alice, content="stored")

        response = bob_client.get(f"{MESSAGES_URL}{message.id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data == MessageRouter.enrich(message)

    def test_retrieve_missing(self, alice_client):
        response = alice_client.get(f"{MESSAGES_URL}{uuid.uuid4()}/")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "MESSAGE_NOT_FOUND"

    def test_mark_read(self, bob_client, direct_chat, alice):
        message = MessageFactory(chat=direct_chat, sender=alice)

        response = bob_client.put(f"{MESSAGES_URL}{message.id}/", {"isRead": True}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["isRead"] is True

    def test_mark_read_as_non_participant(self, outsider_client, direct_chat, alice):
        message = MessageFactory(chat=direct_chat, sender=alice)

        response = outsider_client.put(
            f"{MESSAGES_URL}{message.id}/", {"isRead": True}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        message.refresh_from_db()
        assert message.is_read is False
