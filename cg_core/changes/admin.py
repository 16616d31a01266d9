from django.contrib import admin

from cg_core.changes.models import ChangeProposal


@admin.register(ChangeProposal)
class ChangeProposalAdmin(admin.ModelAdmin):
    list_display = ("entity_kind", "entity_id", "field_name", "status", "proposed_by", "proposed_at", "reviewed_by")
    list_filter = ("entity_kind", "status", "applied")
    search_fields = ("field_name", "entity_id")
    ordering = ("-proposed_at",)

    def has_change_permission(self, request, obj=None):
        # Reviews go through ChangeProposalService (permission + audit + apply).
        return False

    def has_delete_permission(self, request, obj=None):
        return False
