"""
URL configuration for the social app.

Mounted under /api/users/ alongside the authentication URLs. The
accept/reject routes are listed before ``friends/<username>/``; the
usernames "accept" and "reject" are reserved so they never collide.
"""

from django.urls import path

from social.views import (
    AcceptFriendRequestView,
    FriendDetailView,
    FriendsView,
    MeView,
    RejectFriendRequestView,
)

app_name = "social"

urlpatterns = [
    path("me/", MeView.as_view(), name="me"),
    path("friends/", FriendsView.as_view(), name="friends"),
    path("friends/accept/", AcceptFriendRequestView.as_view(), name="friend-accept"),
    path("friends/reject/", RejectFriendRequestView.as_view(), name="friend-reject"),
    path("friends/<str:username>/", FriendDetailView.as_view(), name="friend-detail"),
]
