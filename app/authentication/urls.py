"""
URL configuration for authentication app.

URL structure (mounted under /api/users/ in config/urls.py):
    register/        - Create an account (POST)
    login/           - Obtain access + refresh tokens (POST)
    token/refresh/   - Exchange a refresh token for a new access token (POST)

Note:
    /api/users/me/ and /api/users/friends/ are served by the social app
    under the same prefix.
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from authentication.views import LoginView, RegisterView

app_name = "authentication"

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
]
