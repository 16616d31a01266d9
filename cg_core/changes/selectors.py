# cg_core/changes/selectors.py
from __future__ import annotations

from django.conf import settings
from django.db.models import QuerySet
from rest_framework.exceptions import ValidationError

from cg_core.changes.models import ChangeProposal, ProposalStatus

ALL_STATUSES = "ALL"


def list_proposals(*, entity_kind: str, entity_id) -> QuerySet[ChangeProposal]:
    """
    Proposals of one entity, most recent first.
    """
    return (
        ChangeProposal.objects.filter(entity_kind=entity_kind, entity_id=entity_id)
        .select_related("proposed_by", "reviewed_by")
        .order_by("-proposed_at", "-created_at")
    )


def list_change_requests(*, status: str | None = None) -> QuerySet[ChangeProposal]:
    """
    Cross-kind review queue. status defaults to PENDING; "ALL" disables the filter.
    """
    status = (status or ProposalStatus.PENDING).upper()
    qs = ChangeProposal.objects.select_related("proposed_by", "reviewed_by")

    if status != ALL_STATUSES:
        if status not in ProposalStatus.values:
            raise ValidationError({"status": f"Must be one of {ProposalStatus.values + [ALL_STATUSES]}."})
        qs = qs.filter(status=status)

    limit = getattr(settings, "CHANGE_REQUEST_LIST_MAX", 200)
    return qs.order_by("-proposed_at", "-created_at")[:limit]
