# cg_core/audit/admin.py
from django.contrib import admin

from cg_core.audit.models import AuditLogEntry


@admin.register(AuditLogEntry)
class AuditLogEntryAdmin(admin.ModelAdmin):
    list_display = (
        "timestamp",
        "action",
        "entity_type",
        "entity_id",
        "user",
        "user_role",
        "ip_address",
    )
    list_filter = ("action", "entity_type", "user_role")
    search_fields = ("action", "entity_type", "entity_id", "report_id")
    ordering = ("-timestamp",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
