"""
Authentication views.

This module provides API views for:
- Registration: POST /api/users/register/
- Login: POST /api/users/login/ (JWT access + refresh)

Token refresh is served by simplejwt's TokenRefreshView (see urls.py).
The current-user profile lives in social.views.MeView because it is
assembled from friendships and conversations.

Related files:
    - serializers.py: Request/response serialization
    - services.py: AuthService
    - urls.py: URL routing
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.serializers import (
    LoginSerializer,
    PublicUserSerializer,
    RegisterSerializer,
    TokenPairSerializer,
)
from authentication.services import AuthService
from core.views import error_response, validation_error_response


class RegisterView(APIView):
    """
    Create an account.

    POST /api/users/register/
        {"username": "alice", "password": "..."}

    Responses:
        201: {"id", "username"}
        400: Missing fields, invalid username or weak password
        409: Username already taken
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Register",
        tags=["Users"],
        request=RegisterSerializer,
        responses={
            201: PublicUserSerializer,
            400: OpenApiResponse(description="Invalid username or password"),
            409: OpenApiResponse(description="Username already taken"),
        },
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = AuthService.register(
            serializer.validated_data["username"],
            serializer.validated_data["password"],
        )
        if not result.success:
            return error_response(result)

        return Response(
            PublicUserSerializer(result.data).data,
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    """
    Exchange a username and password for a JWT pair.

    POST /api/users/login/
        {"username": "alice", "password": "..."}

    Responses:
        200: {"token": "<access>", "refresh": "<refresh>"}
        400: Missing fields
        401: Bad credentials
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Log in",
        tags=["Users"],
        request=LoginSerializer,
        responses={
            200: TokenPairSerializer,
            401: OpenApiResponse(description="Invalid username or password"),
        },
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = AuthService.login(
            serializer.validated_data["username"],
            serializer.validated_data["password"],
        )
        if not result.success:
            return error_response(result)

        return Response(TokenPairSerializer(result.data).data)
