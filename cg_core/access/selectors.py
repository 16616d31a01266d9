# cg_core/access/selectors.py
from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.db.models import QuerySet
from rest_framework.exceptions import ValidationError

from cg_core.access.models import AccessRequest, AccessRequestStatus
from cg_core.iam.services import PermissionResolver


def list_requests(*, actor_id, status: Optional[str] = None, resolver: Optional[PermissionResolver] = None) -> QuerySet:
    """
    Reviewers see every request; everyone else sees their own.
    """
    resolver = resolver or PermissionResolver()
    qs = AccessRequest.objects.select_related("requester", "reviewed_by").order_by("-created_at")

    if not resolver.require_role(actor_id, getattr(settings, "ACCESS_REVIEWER_ROLE", "CCRO_TEAM")):
        qs = qs.filter(requester_id=actor_id)

    if status:
        status = status.strip().upper()
        if status not in AccessRequestStatus.values:
            raise ValidationError({"status": f"Must be one of {AccessRequestStatus.values}."})
        qs = qs.filter(status=status)

    return qs
