"""
Django admin configuration for authentication models.

Related files:
    - models.py: Model definitions
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from authentication.models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin configuration for User model.

    Friendships are read-only here; they change only through the
    friend-request flow.
    """

    list_display = (
        "username",
        "connected",
        "is_active",
        "is_staff",
        "date_joined",
    )
    list_filter = (
        "connected",
        "is_active",
        "is_staff",
        "is_superuser",
    )
    search_fields = ("username",)
    ordering = ("username",)
    readonly_fields = ("id", "connected", "live_sessions", "date_joined", "last_login")
    filter_horizontal = ("groups", "user_permissions")

    fieldsets = (
        (None, {"fields": ("id", "username", "password")}),
        ("Presence", {"fields": ("connected", "live_sessions")}),
        (
            "Status",
            {"fields": ("is_active", "is_staff", "is_superuser")},
        ),
        (
            "Permissions",
            {"fields": ("groups", "user_permissions")},
        ),
        (
            "Important dates",
            {"fields": ("date_joined", "last_login")},
        ),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("username", "password1", "password2"),
            },
        ),
    )
