from django.contrib import admin

from cg_core.registers.models import Action, Control, ConductBreach, Risk


@admin.register(Risk)
class RiskAdmin(admin.ModelAdmin):
    list_display = ("reference", "name", "owner", "residual_likelihood", "residual_impact", "review_requested")
    search_fields = ("reference", "name")
    readonly_fields = ("reference",)


@admin.register(Control)
class ControlAdmin(admin.ModelAdmin):
    list_display = ("control_ref", "control_name", "control_owner", "control_frequency", "is_active")
    list_filter = ("control_frequency", "control_type", "is_active")
    search_fields = ("control_ref", "control_name")
    readonly_fields = ("control_ref",)


@admin.register(Action)
class ActionAdmin(admin.ModelAdmin):
    list_display = ("reference", "title", "status", "assigned_to", "due_date", "completed_at")
    list_filter = ("status",)
    search_fields = ("reference", "title")
    readonly_fields = ("reference",)


@admin.register(ConductBreach)
class ConductBreachAdmin(admin.ModelAdmin):
    list_display = ("reference", "title", "status", "closed_at")
    list_filter = ("status",)
    search_fields = ("reference", "title")
    readonly_fields = ("reference",)
