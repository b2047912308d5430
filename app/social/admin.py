"""
Django admin configuration for social models.
"""

from django.contrib import admin

from social.models import FriendRequest


@admin.register(FriendRequest)
class FriendRequestAdmin(admin.ModelAdmin):
    """Read-mostly view of pending friend requests."""

    list_display = ("sender", "recipient", "created_at")
    search_fields = ("sender__username", "recipient__username")
    raw_id_fields = ("sender", "recipient")
    readonly_fields = ("id", "created_at", "updated_at")
    ordering = ("-created_at",)
