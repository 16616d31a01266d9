from django.contrib import admin

from cg_core.access.models import AccessRequest


@admin.register(AccessRequest)
class AccessRequestAdmin(admin.ModelAdmin):
    list_display = ("requester", "permission", "status", "duration_hours", "granted_until", "reviewed_by", "created_at")
    list_filter = ("status", "permission")
    search_fields = ("permission", "requester__username", "entity_id")
    ordering = ("-created_at",)

    def has_change_permission(self, request, obj=None):
        # Decisions go through AccessGrantService so the override and the audit stay in step.
        return False

    def has_delete_permission(self, request, obj=None):
        return False
