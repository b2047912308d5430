"""
ViewSets for chat API.

This module provides REST API endpoints for the chat system:
- ChatViewSet: Chat creation, retrieval and history
- GroupViewSet: Group creation, retrieval, history and membership
- MessageViewSet: Posting, fetching and marking messages

URL Structure (all under /api/):
    /chats/                          POST
    /chats/{id}/                     GET
    /chats/{id}/messages/            GET
    /groups/                         POST
    /groups/{id}/                    GET
    /groups/{id}/messages/           GET
    /groups/{id}/users/              POST
    /groups/{id}/users/{userId}/     DELETE
    /messages/                       POST
    /messages/{id}/                  GET, PUT

Design Decisions:
    - ViewSets are thin: parse the body, call a service, render the result
    - Participation checks live in the services, not in permission classes
    - Failures render as {"error", "error_code"} with the mapped status
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from chat.serializers import (
    AddMemberSerializer,
    ChatSerializer,
    CreateChatSerializer,
    CreateGroupSerializer,
    GroupSerializer,
    MessageSerializer,
    PostMessageSerializer,
    ReadStatusSerializer,
)
from chat.services import ConversationResolver, GroupService, MessageRouter
from core.views import error_response, validation_error_response
from social.services import GroupMembershipService


class ChatViewSet(viewsets.ViewSet):
    """
    Chats between a fixed set of users.

    Creating a chat for exactly two users returns their existing chat
    (200) when there is one, otherwise creates it (201).
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Create a chat",
        tags=["Chats"],
        request=CreateChatSerializer,
        responses={
            201: ChatSerializer,
            200: OpenApiResponse(ChatSerializer, description="Existing direct chat"),
            400: OpenApiResponse(description="Invalid participants"),
        },
    )
    def create(self, request):
        serializer = CreateChatSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = ConversationResolver.create_chat(
            request.user, serializer.validated_data["participants"]
        )
        if not result.success:
            return error_response(result)

        chat, created = result.data
        return Response(
            ChatSerializer(chat).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @extend_schema(summary="Get a chat", tags=["Chats"], responses={200: ChatSerializer})
    def retrieve(self, request, pk=None):
        result = ConversationResolver.get_chat(request.user, pk)
        if not result.success:
            return error_response(result)
        return Response(ChatSerializer(result.data).data)

    @extend_schema(
        summary="List chat messages",
        tags=["Chats"],
        responses={
            200: MessageSerializer(many=True),
            403: OpenApiResponse(description="Not a participant"),
            404: OpenApiResponse(description="Chat not found"),
        },
    )
    @action(detail=True, methods=["get"])
    def messages(self, request, pk=None):
        result = MessageRouter.list_messages(request.user, pk)
        if not result.success:
            return error_response(result)
        return Response(result.data)


class GroupViewSet(viewsets.ViewSet):
    """
    Named groups with mutable membership.

    Only participants may view a group, read its history or change its
    membership.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Create a group",
        tags=["Groups"],
        request=CreateGroupSerializer,
        responses={201: GroupSerializer},
    )
    def create(self, request):
        serializer = CreateGroupSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = GroupService.create_group(
            request.user,
            serializer.validated_data["name"],
            serializer.validated_data["participants"],
        )
        if not result.success:
            return error_response(result)
        return Response(GroupSerializer(result.data).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Get a group", tags=["Groups"], responses={200: GroupSerializer})
    def retrieve(self, request, pk=None):
        result = GroupService.get_group(request.user, pk)
        if not result.success:
            return error_response(result)
        return Response(GroupSerializer(result.data).data)

    @extend_schema(
        summary="List group messages",
        tags=["Groups"],
        responses={200: MessageSerializer(many=True)},
    )
    @action(detail=True, methods=["get"])
    def messages(self, request, pk=None):
        result = MessageRouter.list_group_messages(request.user, pk)
        if not result.success:
            return error_response(result)
        return Response(result.data)

    @extend_schema(
        summary="Add a group member",
        tags=["Groups"],
        request=AddMemberSerializer,
        responses={
            200: GroupSerializer,
            403: OpenApiResponse(description="Not a participant"),
            409: OpenApiResponse(description="Already a member"),
        },
    )
    @action(detail=True, methods=["post"])
    def users(self, request, pk=None):
        serializer = AddMemberSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = GroupMembershipService.add_member(
            request.user, pk, serializer.validated_data["userId"]
        )
        if not result.success:
            return error_response(result)
        return Response(GroupSerializer(result.data).data)

    @extend_schema(
        summary="Remove a group member",
        tags=["Groups"],
        request=None,
        responses={
            200: GroupSerializer,
            403: OpenApiResponse(description="Not a participant"),
            409: OpenApiResponse(description="Not a member"),
        },
    )
    @action(
        detail=True,
        methods=["delete"],
        url_path=r"users/(?P<user_id>[^/.]+)",
        url_name="remove-user",
    )
    def remove_user(self, request, pk=None, user_id=None):
        result = GroupMembershipService.remove_member(request.user, pk, user_id)
        if not result.success:
            return error_response(result)
        return Response(GroupSerializer(result.data).data)


class MessageViewSet(viewsets.ViewSet):
    """
    Messages addressed to exactly one chat or group.

    Posting persists the message and broadcasts it to every WebSocket
    session subscribed to the destination; the HTTP response carries the
    same payload as the ``newMessage`` frame.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Post a message",
        tags=["Messages"],
        request=PostMessageSerializer,
        responses={
            201: MessageSerializer,
            400: OpenApiResponse(description="Missing content or not exactly one destination"),
            403: OpenApiResponse(description="Not a participant"),
        },
    )
    def create(self, request):
        serializer = PostMessageSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        data = serializer.validated_data
        result = MessageRouter.post_message(
            request.user,
            data["content"],
            chat_id=data.get("chat"),
            group_id=data.get("group"),
        )
        if not result.success:
            return error_response(result)
        return Response(result.data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Get a message", tags=["Messages"], responses={200: MessageSerializer})
    def retrieve(self, request, pk=None):
        result = MessageRouter.get_message(pk, actor=request.user)
        if not result.success:
            return error_response(result)
        return Response(MessageRouter.enrich(result.data))

    @extend_schema(
        summary="Set read status",
        tags=["Messages"],
        request=ReadStatusSerializer,
        responses={200: MessageSerializer},
    )
    def update(self, request, pk=None):
        serializer = ReadStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = MessageRouter.set_read_status(
            request.user, pk, serializer.validated_data["isRead"]
        )
        if not result.success:
            return error_response(result)
        return Response(result.data)
