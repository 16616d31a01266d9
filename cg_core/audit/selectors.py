# cg_core/audit/selectors.py
from __future__ import annotations

from typing import Any, Mapping, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound, ValidationError

from cg_core.audit.filters import AuditLogFilter
from cg_core.audit.models import AuditLogEntry


def query_audit_log(filters: Optional[Mapping[str, Any]] = None) -> QuerySet[AuditLogEntry]:
    """
    Filtered ledger, newest first. Pagination is applied by the caller.
    """
    fs = AuditLogFilter(data=filters or {}, queryset=AuditLogEntry.objects.select_related("user"))
    if not fs.is_valid():
        raise ValidationError(fs.errors)
    return fs.qs.order_by("-timestamp", "-id")


def entity_history(*, entity_type: str, entity_id: Any) -> QuerySet[AuditLogEntry]:
    return (
        AuditLogEntry.objects.filter(entity_type=entity_type, entity_id=str(entity_id))
        .select_related("user")
        .order_by("-timestamp", "-id")
    )


def get_entry(entry_id) -> AuditLogEntry:
    try:
        return AuditLogEntry.objects.select_related("user").get(id=entry_id)
    except (AuditLogEntry.DoesNotExist, ValueError, DjangoValidationError):
        raise NotFound("Audit log entry not found.")
