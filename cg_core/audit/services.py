# cg_core/audit/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from django.db import transaction

from cg_core.audit.models import SYSTEM_ROLE, AuditLogEntry
from cg_core.common.middleware import client_info
from cg_core.iam.models import UserProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRecord:
    id: str
    action: str
    entity_type: str
    entity_id: str
    actor_user_id: int | None
    actor_role: str
    changes: Optional[Dict[str, Any]]


class AuditService:
    """
    Central audit writer (append-only).

    Failure policy: a failed write is logged with the full payload and does not
    fail the caller, unless the caller passes raise_on_error=True. The insert
    runs in its own savepoint, so a failure never poisons an enclosing
    business transaction.
    """

    @staticmethod
    def _role_for(actor_id) -> str:
        if actor_id is None:
            return SYSTEM_ROLE
        role = UserProfile.objects.filter(user_id=actor_id).values_list("role", flat=True).first()
        return role or "UNKNOWN"

    @staticmethod
    def record(
        *,
        action: str,
        entity_type: str,
        entity_id: Any = None,
        actor_id: int | None = None,
        actor_role: Optional[str] = None,
        changes: Optional[Dict[str, Any]] = None,
        report_id: Optional[str] = None,
        request=None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        raise_on_error: bool = False,
    ) -> Optional[AuditRecord]:
        """
        actor_id=None records a system action (role "SYSTEM").
        timestamp is for trusted internal callers replaying history only.
        """
        try:
            with transaction.atomic(savepoint=True):
                client = client_info(request)
                fields: Dict[str, Any] = {
                    "user_id": actor_id,
                    "user_role": actor_role or AuditService._role_for(actor_id),
                    "action": action,
                    "entity_type": entity_type,
                    "entity_id": "" if entity_id is None else str(entity_id),
                    "changes": changes,
                    "report_id": str(report_id) if report_id else None,
                    "ip_address": ip_address or client.ip_address,
                    "user_agent": user_agent if user_agent is not None else client.user_agent,
                }
                if timestamp is not None:
                    fields["timestamp"] = timestamp

                entry = AuditLogEntry.objects.create(**fields)
        except Exception:
            logger.error(
                "Audit write failed: action=%s entity=%s:%s actor=%s changes=%r",
                action,
                entity_type,
                entity_id,
                actor_id,
                changes,
                exc_info=True,
            )
            if raise_on_error:
                raise
            return None

        return AuditRecord(
            id=str(entry.id),
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            actor_user_id=entry.user_id,
            actor_role=entry.user_role,
            changes=entry.changes,
        )
