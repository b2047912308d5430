"""
Django admin configuration for chat models.

Chat participants are shown read-only: they are fixed at creation.
"""

from django.contrib import admin

from chat.models import Chat, DirectChatPair, Group, Message


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    list_display = ("id", "created_at", "last_message_at")
    readonly_fields = ("id", "participants", "created_at", "updated_at", "last_message_at")
    ordering = ("-created_at",)


@admin.register(DirectChatPair)
class DirectChatPairAdmin(admin.ModelAdmin):
    list_display = ("chat", "user_lower", "user_higher")
    raw_id_fields = ("chat", "user_lower", "user_higher")


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at", "last_message_at")
    search_fields = ("name",)
    filter_horizontal = ("participants",)
    readonly_fields = ("id", "created_at", "updated_at", "last_message_at")


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Messages are immutable apart from is_read."""

    list_display = ("id", "sender", "chat", "group", "is_read", "created_at")
    list_filter = ("is_read",)
    search_fields = ("content", "sender__username")
    raw_id_fields = ("sender", "chat", "group")
    readonly_fields = ("id", "sender", "content", "chat", "group", "created_at", "updated_at")
    ordering = ("-created_at",)
