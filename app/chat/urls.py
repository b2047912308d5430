"""
URL configuration for chat API.

URL Structure:
    Chats:
        /chats/                          POST
        /chats/{id}/                     GET
        /chats/{id}/messages/            GET

    Groups:
        /groups/                         POST
        /groups/{id}/                    GET
        /groups/{id}/messages/           GET
        /groups/{id}/users/              POST
        /groups/{id}/users/{userId}/     DELETE

    Messages:
        /messages/                       POST
        /messages/{id}/                  GET, PUT

All URLs are prefixed with /api/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from chat.views import ChatViewSet, GroupViewSet, MessageViewSet

router = SimpleRouter()
router.register(r"chats", ChatViewSet, basename="chat")
router.register(r"groups", GroupViewSet, basename="group")
router.register(r"messages", MessageViewSet, basename="message")

app_name = "chat"

urlpatterns = [
    path("", include(router.urls)),
]
