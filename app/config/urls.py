"""
URL configuration for the Django application.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /api/schema/                   - OpenAPI schema (YAML)
    /api/docs/                     - ReDoc API documentation
    /api/users/                    - Accounts and relationships
        register/                  - User registration
        login/                     - Username/password login (JWT pair)
        token/refresh/             - Refresh an access token
        me/                        - Current user profile
        friends/                   - Friends and pending requests (GET), send request (POST)
        friends/accept/            - Accept a friend request
        friends/reject/            - Reject a friend request
        friends/{username}/        - Remove a friend
    /api/chats/                    - Chat create / detail / messages
    /api/groups/                   - Group create / detail / messages / members
    /api/messages/                 - Message post / fetch / read status
    /ws/chat/                      - WebSocket endpoint (see config/asgi.py)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API Routes
# =============================================================================
# All routes here are prefixed with /api/ automatically
api_patterns = [
    # Accounts
    path("users/", include("authentication.urls")),
    # Friends and profile
    path("users/", include("social.urls")),
    # Chats, groups and messages
    path("", include("chat.urls")),
]

urlpatterns = [
    # Documentation
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API
    path("api/", include(api_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Messaging Admin"
admin.site.site_title = "Admin Portal"
admin.site.index_title = "Welcome to the Admin Portal"
