# cg_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from cg_core.iam.models import RolePermission, UserPermission, UserProfile


class ReadOnlyAdmin(admin.ModelAdmin):
    """
    Permission matrices change only through PermissionService (checked + audited).
    """

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(RolePermission)
class RolePermissionAdmin(ReadOnlyAdmin):
    list_display = ("role", "permission", "granted", "updated_at")
    list_filter = ("role", "granted")
    search_fields = ("permission",)
    ordering = ("role", "permission")


@admin.register(UserPermission)
class UserPermissionAdmin(ReadOnlyAdmin):
    list_display = ("user", "permission", "granted", "updated_at")
    list_filter = ("granted",)
    search_fields = ("permission", "user__username", "user__email")


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "role", "is_active", "created_at", "updated_at")
    list_filter = ("role", "is_active")
    search_fields = ("user__username", "user__email")
    readonly_fields = ("role",)
    ordering = ("-created_at",)
