"""
Social graph views.

Endpoints (mounted under /api/users/):
    GET    friends/              - List friends and pending requests
    POST   friends/              - Send a friend request {username}
    PUT    friends/accept/       - Accept a request {username}
    PUT    friends/reject/       - Reject a request {username}
    DELETE friends/<username>/   - Remove a friend
    GET    me/                   - Current user's profile

Friend operations answer with the other user's ``{id, username}``.

Related files:
    - services.py: FriendshipService, ProfileService
    - serializers.py: Request/response shapes
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.serializers import PublicUserSerializer
from core.views import error_response, validation_error_response
from social.serializers import (
    ProfileSerializer,
    RelationshipsSerializer,
    UsernameSerializer,
)
from social.services import FriendshipService, ProfileService


def _target_response(result):
    if not result.success:
        return error_response(result)
    return Response(PublicUserSerializer(result.data).data)


class FriendsView(APIView):
    """
    List relationships or send a friend request.

    GET  /api/users/friends/
    POST /api/users/friends/  {"username": "bob"}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List friends and pending requests",
        tags=["Friends"],
        responses={200: RelationshipsSerializer},
    )
    def get(self, request):
        result = FriendshipService.list_relationships(request.user)
        if not result.success:
            return error_response(result)
        return Response(result.data)

    @extend_schema(
        summary="Send a friend request",
        tags=["Friends"],
        request=UsernameSerializer,
        responses={
            200: PublicUserSerializer,
            404: OpenApiResponse(description="User not found"),
            409: OpenApiResponse(description="Already friends"),
        },
    )
    def post(self, request):
        serializer = UsernameSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        return _target_response(
            FriendshipService.send_request(
                request.user, serializer.validated_data["username"]
            )
        )


class FriendDetailView(APIView):
    """
    Remove a friend.

    DELETE /api/users/friends/<username>/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Remove a friend",
        tags=["Friends"],
        responses={
            200: PublicUserSerializer,
            404: OpenApiResponse(description="User not found"),
        },
    )
    def delete(self, request, username):
        return _target_response(FriendshipService.remove_friend(request.user, username))


class AcceptFriendRequestView(APIView):
    """
    Accept a pending friend request.

    PUT /api/users/friends/accept/  {"username": "alice"}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Accept a friend request",
        tags=["Friends"],
        request=UsernameSerializer,
        responses={200: PublicUserSerializer},
    )
    def put(self, request):
        serializer = UsernameSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        return _target_response(
            FriendshipService.accept_request(
                request.user, serializer.validated_data["username"]
            )
        )


class RejectFriendRequestView(APIView):
    """
    Reject a pending friend request.

    PUT /api/users/friends/reject/  {"username": "alice"}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Reject a friend request",
        tags=["Friends"],
        request=UsernameSerializer,
        responses={200: PublicUserSerializer},
    )
    def put(self, request):
        serializer = UsernameSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        return _target_response(
            FriendshipService.reject_request(
                request.user, serializer.validated_data["username"]
            )
        )


class MeView(APIView):
    """
    Current user's profile.

    GET /api/users/me/

    Each friend carries ``chatId``, the direct chat with that friend if
    one exists.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current user's profile",
        tags=["Users"],
        responses={200: ProfileSerializer},
    )
    def get(self, request):
        result = ProfileService.profile(request.user)
        if not result.success:
            return error_response(result)
        return Response(result.data)
