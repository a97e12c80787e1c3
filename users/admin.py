"""Admin registration for personnel and roles."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Role, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Personnel admin keyed by employee id, with role and status."""

    list_display = ("employee_id", "name", "role", "status", "is_staff", "last_login")
    list_filter = ("status", "role", "is_staff", "is_superuser")
    search_fields = ("employee_id", "name", "username", "phone")
    ordering = ("employee_id",)
    readonly_fields = ("last_login", "date_joined")

    fieldsets = (
        (None, {"fields": ("username", "password")}),
        ("Personnel", {"fields": ("employee_id", "name", "phone", "role", "status")}),
        ("Permissions", {"fields": ("is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("username", "employee_id", "name", "password1", "password2"),
            },
        ),
    )

    filter_horizontal = ("groups", "user_permissions")


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("name", "display_name", "is_default", "created_at")
    search_fields = ("name", "display_name")
