# cg_core/access/services.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from cg_core.access.models import AccessRequest, AccessRequestStatus
from cg_core.audit.services import AuditService
from cg_core.common.api.exceptions import ConflictError
from cg_core.iam import permission_codes as codes
from cg_core.iam.models import UserPermission
from cg_core.iam.services import PermissionResolver

logger = logging.getLogger(__name__)


def _max_hours() -> int:
    return int(getattr(settings, "ACCESS_REQUEST_MAX_HOURS", 168))


def _max_reason_length() -> int:
    return int(getattr(settings, "ACCESS_REQUEST_REASON_MAX_LENGTH", 2000))


def _reviewer_role() -> str:
    return getattr(settings, "ACCESS_REVIEWER_ROLE", "CCRO_TEAM")


class AccessGrantService:
    """
    Temporary permission grants.

    Approval upserts UserPermission(granted=True) for the requester, so the
    resolver sees the grant immediately. Expiry is not evaluated at resolve
    time: the grant stays effective until sweep_expired() revokes it.
    """

    # -------------------------
    # Internal helpers
    # -------------------------
    @staticmethod
    def _get(request_id) -> AccessRequest:
        try:
            return AccessRequest.objects.get(id=request_id)
        except (AccessRequest.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFound("Access request not found.")

    @staticmethod
    def _validate(*, permission: str, reason: str, duration_hours) -> tuple[str, str, int]:
        errors = {}

        permission = (permission or "").strip()
        if not codes.is_known_permission(permission):
            errors["permission"] = f"Unknown permission code '{permission}'."

        reason = (reason or "").strip()
        if not reason:
            errors["reason"] = "A reason is required."
        elif len(reason) > _max_reason_length():
            errors["reason"] = f"Ensure this field has no more than {_max_reason_length()} characters."

        try:
            hours = int(duration_hours)
        except (TypeError, ValueError):
            hours = 0
        if isinstance(duration_hours, bool) or not 1 <= hours <= _max_hours():
            errors["duration_hours"] = f"Must be a whole number of hours between 1 and {_max_hours()}."

        if errors:
            raise ValidationError(errors)
        return permission, reason, hours

    # -------------------------
    # Request
    # -------------------------
    @staticmethod
    @transaction.atomic
    def request_access(
        *,
        requester_id,
        permission: str,
        reason: str,
        duration_hours: int,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        entity_name: Optional[str] = None,
        request=None,
        resolver: Optional[PermissionResolver] = None,
    ) -> AccessRequest:
        (resolver or PermissionResolver()).role_of(requester_id)
        permission, reason, hours = AccessGrantService._validate(
            permission=permission, reason=reason, duration_hours=duration_hours
        )
        entity_id = "" if entity_id is None else str(entity_id)

        duplicate = AccessRequest.objects.filter(
            requester_id=requester_id,
            permission=permission,
            entity_id=entity_id,
            status=AccessRequestStatus.PENDING,
        ).exists()
        if duplicate:
            raise ConflictError("A pending request for this permission already exists.")

        try:
            with transaction.atomic():
                access_request = AccessRequest.objects.create(
                    requester_id=requester_id,
                    permission=permission,
                    reason=reason,
                    duration_hours=hours,
                    entity_type=entity_type or "",
                    entity_id=entity_id,
                    entity_name=entity_name or None,
                )
        except IntegrityError:
            # lost the race against a concurrent identical request
            raise ConflictError("A pending request for this permission already exists.")

        AuditService.record(
            actor_id=requester_id,
            action="access_request_create",
            entity_type="access_request",
            entity_id=access_request.id,
            changes={
                "permission": permission,
                "duration_hours": hours,
                "reason": reason,
                "entity_type": access_request.entity_type or None,
                "entity_id": entity_id or None,
            },
            request=request,
        )
        return access_request

    # -------------------------
    # Decide
    # -------------------------
    @staticmethod
    @transaction.atomic
    def decide(
        *,
        reviewer_id,
        request_id: UUID,
        approve: bool,
        note: Optional[str] = None,
        request=None,
        now: Optional[datetime] = None,
        resolver: Optional[PermissionResolver] = None,
    ) -> AccessRequest:
        (resolver or PermissionResolver()).assert_role(reviewer_id, _reviewer_role())

        access_request = AccessGrantService._get(request_id)
        if access_request.status != AccessRequestStatus.PENDING:
            raise ConflictError("Access request has already been decided.")

        now = now or timezone.now()
        granted_until = now + timedelta(hours=access_request.duration_hours) if approve else None

        won = AccessRequest.objects.filter(id=access_request.id, status=AccessRequestStatus.PENDING).update(
            status=AccessRequestStatus.APPROVED if approve else AccessRequestStatus.REJECTED,
            reviewed_by_id=reviewer_id,
            reviewed_at=now,
            review_note=note or None,
            granted_until=granted_until,
            updated_at=now,
        )
        if won == 0:
            raise ConflictError("Access request has already been decided.")

        if approve:
            UserPermission.objects.update_or_create(
                user_id=access_request.requester_id,
                permission=access_request.permission,
                defaults={"granted": True},
            )

        AuditService.record(
            actor_id=reviewer_id,
            action="access_request_approve" if approve else "access_request_reject",
            entity_type="access_request",
            entity_id=access_request.id,
            changes={
                "requester_id": access_request.requester_id,
                "permission": access_request.permission,
                "granted_until": granted_until.isoformat() if granted_until else None,
                "note": note or None,
            },
            request=request,
        )

        access_request.refresh_from_db()
        return access_request

    # -------------------------
    # Cancel
    # -------------------------
    @staticmethod
    @transaction.atomic
    def cancel(*, requester_id, request_id: UUID, request=None) -> AccessRequest:
        access_request = AccessGrantService._get(request_id)
        if access_request.requester_id != requester_id:
            raise PermissionDenied("Only the requester can cancel an access request.")
        if access_request.status != AccessRequestStatus.PENDING:
            raise ConflictError("Only pending requests can be cancelled.")

        now = timezone.now()
        won = AccessRequest.objects.filter(id=access_request.id, status=AccessRequestStatus.PENDING).update(
            status=AccessRequestStatus.CANCELLED,
            updated_at=now,
        )
        if won == 0:
            raise ConflictError("Only pending requests can be cancelled.")

        AuditService.record(
            actor_id=requester_id,
            action="access_request_cancel",
            entity_type="access_request",
            entity_id=access_request.id,
            changes={"permission": access_request.permission},
            request=request,
        )

        access_request.refresh_from_db()
        return access_request

    # -------------------------
    # Expiry sweep
    # -------------------------
    @staticmethod
    @transaction.atomic
    def _expire_one(*, request_id, now: datetime) -> bool:
        won = AccessRequest.objects.filter(
            id=request_id,
            status=AccessRequestStatus.APPROVED,
            granted_until__lt=now,
        ).update(status=AccessRequestStatus.EXPIRED, updated_at=now)
        if won == 0:
            return False

        access_request = AccessRequest.objects.get(id=request_id)

        # Another approved, unexpired grant of the same code keeps the override alive.
        still_covered = AccessRequest.objects.filter(
            requester_id=access_request.requester_id,
            permission=access_request.permission,
            status=AccessRequestStatus.APPROVED,
            granted_until__gte=now,
        ).exists()

        revoked = False
        if not still_covered:
            deleted, _ = UserPermission.objects.filter(
                user_id=access_request.requester_id,
                permission=access_request.permission,
                granted=True,
            ).delete()
            revoked = deleted > 0

        AuditService.record(
            actor_id=None,
            action="access_request_expire",
            entity_type="access_request",
            entity_id=access_request.id,
            changes={
                "requester_id": access_request.requester_id,
                "permission": access_request.permission,
                "granted_until": access_request.granted_until.isoformat(),
                "revoked": revoked,
            },
        )
        return True

    @staticmethod
    def sweep_expired(*, now: Optional[datetime] = None) -> int:
        """
        Expire approved grants whose granted_until is in the past.

        Each request is expired in its own transaction behind a conditional
        UPDATE, so overlapping sweeps process every request exactly once.
        Returns the number of requests this call expired.
        """
        now = now or timezone.now()
        candidates = list(
            AccessRequest.objects.filter(
                status=AccessRequestStatus.APPROVED,
                granted_until__lt=now,
            ).values_list("id", flat=True)
        )

        expired = 0
        for request_id in candidates:
            if AccessGrantService._expire_one(request_id=request_id, now=now):
                expired += 1

        if expired:
            logger.info("Expired %s access grant(s) as of %s", expired, now.isoformat())
        return expired
