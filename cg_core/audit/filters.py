from __future__ import annotations

import django_filters

from cg_core.audit.models import AuditLogEntry


class AuditLogFilter(django_filters.FilterSet):
    user = django_filters.NumberFilter(field_name="user_id")
    action = django_filters.CharFilter(field_name="action")
    entity_type = django_filters.CharFilter(field_name="entity_type")
    entity_id = django_filters.CharFilter(field_name="entity_id")
    report_id = django_filters.CharFilter(field_name="report_id")
    date_from = django_filters.IsoDateTimeFilter(field_name="timestamp", lookup_expr="gte")
    date_to = django_filters.IsoDateTimeFilter(field_name="timestamp", lookup_expr="lte")

    class Meta:
        model = AuditLogEntry
        fields = ["user", "action", "entity_type", "entity_id", "report_id", "date_from", "date_to"]
