# cg_core/changes/services.py
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from cg_core.audit.services import AuditService
from cg_core.changes.fields import EntityKindSpec, get_entity_kind
from cg_core.changes.models import ChangeProposal, ProposalStatus
from cg_core.common.api.exceptions import ConflictError
from cg_core.iam.services import PermissionResolver

logger = logging.getLogger(__name__)

REVIEW_DECISIONS = (ProposalStatus.APPROVED, ProposalStatus.REJECTED)


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ChangeProposalService:
    """
    Lifecycle of a field-level change on a governed record.

    Notes:
    - propose() needs only view access to the entity; write access is checked at review.
    - review() marks the proposal and applies the value in one transaction.
    - The status guard is a conditional UPDATE ... WHERE status = PENDING; the loser
      of two concurrent reviews sees 0 rows and gets a 409.
    """

    # -------------------------
    # Internal helpers
    # -------------------------
    @staticmethod
    def _ensure_entity(definition: EntityKindSpec, entity_id) -> None:
        try:
            exists = definition.model.objects.filter(pk=entity_id).exists()
        except (ValueError, DjangoValidationError):
            exists = False
        if not exists:
            raise NotFound(f"{definition.model._meta.verbose_name.title()} not found.")

    @staticmethod
    def _load_for_review(*, proposal_id, entity_kind: str, entity_id) -> ChangeProposal:
        try:
            proposal = ChangeProposal.objects.get(id=proposal_id)
        except (ChangeProposal.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFound("Change proposal not found.")

        if proposal.entity_kind != entity_kind or str(proposal.entity_id) != str(entity_id):
            raise NotFound("Change proposal not found for this entity.")
        return proposal

    @staticmethod
    def _check_four_eyes(proposal: ChangeProposal, reviewer_id) -> None:
        if getattr(settings, "CHANGE_PROPOSALS_ALLOW_SELF_REVIEW", True):
            return
        if proposal.proposed_by_id == reviewer_id:
            logger.warning("Self-review blocked: proposal=%s user=%s", proposal.id, reviewer_id)
            raise PermissionDenied("You cannot review a change you proposed.")

    # -------------------------
    # Propose
    # -------------------------
    @staticmethod
    @transaction.atomic
    def propose(
        *,
        actor_id,
        entity_kind: str,
        entity_id: UUID,
        field_name: str,
        old_value: Any = None,
        new_value: Any = None,
        rationale: Optional[str] = None,
        request=None,
        resolver: Optional[PermissionResolver] = None,
    ) -> ChangeProposal:
        definition = get_entity_kind(entity_kind)
        (resolver or PermissionResolver()).check_permission(actor_id, definition.view_permission)
        ChangeProposalService._ensure_entity(definition, entity_id)

        field_name = (field_name or "").strip()
        if not field_name:
            raise ValidationError({"field_name": "This field is required."})

        proposal = ChangeProposal.objects.create(
            entity_kind=definition.kind,
            entity_id=entity_id,
            field_name=field_name,
            old_value=_as_text(old_value),
            new_value=_as_text(new_value),
            rationale=rationale or None,
            proposed_by_id=actor_id,
        )

        AuditService.record(
            actor_id=actor_id,
            action="propose_change",
            entity_type=definition.kind,
            entity_id=entity_id,
            changes={
                "proposal_id": str(proposal.id),
                "field": proposal.field_name,
                "old_value": proposal.old_value,
                "new_value": proposal.new_value,
            },
            request=request,
        )
        return proposal

    @staticmethod
    @transaction.atomic
    def propose_many(
        *,
        actor_id,
        entity_kind: str,
        entity_id: UUID,
        changes: Iterable[Mapping[str, Any]],
        request=None,
        resolver: Optional[PermissionResolver] = None,
    ) -> list[ChangeProposal]:
        """
        All-or-nothing batch of proposals against one entity.
        """
        changes = list(changes)
        if not changes:
            raise ValidationError({"changes": "At least one change is required."})

        resolver = resolver or PermissionResolver()
        created = []
        for change in changes:
            created.append(
                ChangeProposalService.propose(
                    actor_id=actor_id,
                    entity_kind=entity_kind,
                    entity_id=entity_id,
                    field_name=change.get("field_name"),
                    old_value=change.get("old_value"),
                    new_value=change.get("new_value"),
                    rationale=change.get("rationale"),
                    request=request,
                    resolver=resolver,
                )
            )
        return created

    # -------------------------
    # Review (+ apply)
    # -------------------------
    @staticmethod
    @transaction.atomic
    def review(
        *,
        reviewer_id,
        entity_kind: str,
        entity_id: UUID,
        proposal_id: UUID,
        decision: str,
        note: Optional[str] = None,
        request=None,
        resolver: Optional[PermissionResolver] = None,
    ) -> ChangeProposal:
        definition = get_entity_kind(entity_kind)
        (resolver or PermissionResolver()).check_permission(reviewer_id, definition.approval_permission)

        if decision not in REVIEW_DECISIONS:
            raise ValidationError({"decision": f"Must be one of {[str(d) for d in REVIEW_DECISIONS]}."})

        proposal = ChangeProposalService._load_for_review(
            proposal_id=proposal_id, entity_kind=definition.kind, entity_id=entity_id
        )
        if proposal.status != ProposalStatus.PENDING:
            raise ConflictError("Change has already been reviewed.")
        ChangeProposalService._check_four_eyes(proposal, reviewer_id)

        # Coerce before any write so a bad value leaves the proposal PENDING.
        rule, value = None, None
        if decision == ProposalStatus.APPROVED and proposal.new_value is not None:
            rule = definition.fields.get(proposal.field_name)
            if rule is None:
                logger.warning(
                    "Approved change not applied, field not in allow-list: kind=%s field=%s proposal=%s",
                    definition.kind,
                    proposal.field_name,
                    proposal.id,
                )
            else:
                value = rule.coerce(proposal.new_value)

        now = timezone.now()
        won = ChangeProposal.objects.filter(id=proposal.id, status=ProposalStatus.PENDING).update(
            status=decision,
            reviewed_by_id=reviewer_id,
            reviewed_at=now,
            review_note=note or None,
            applied=rule is not None,
            updated_at=now,
        )
        if won == 0:
            raise ConflictError("Change has already been reviewed.")

        if rule is not None:
            try:
                entity = definition.model.objects.select_for_update().get(pk=proposal.entity_id)
            except definition.model.DoesNotExist:
                raise NotFound(f"{definition.model._meta.verbose_name.title()} not found.")
            update_fields = rule.apply(entity, value)
            entity.save(update_fields=[*update_fields, "updated_at"])

        AuditService.record(
            actor_id=reviewer_id,
            action="approve_change" if decision == ProposalStatus.APPROVED else "reject_change",
            entity_type=definition.kind,
            entity_id=proposal.entity_id,
            changes={
                "proposal_id": str(proposal.id),
                "field": proposal.field_name,
                "old_value": proposal.old_value,
                "new_value": proposal.new_value,
                "applied": rule is not None,
                "note": note or None,
            },
            request=request,
        )

        proposal.refresh_from_db()
        return proposal
