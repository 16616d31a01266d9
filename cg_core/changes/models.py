# cg_core/changes/models.py
from django.conf import settings
from django.db import models
from django.utils import timezone

from cg_core.common.models import UUIDModel


class ProposalStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"


class EntityKind(models.TextChoices):
    RISK = "risk", "Risk"
    CONTROL = "control", "Control"
    ACTION = "action", "Action"
    BREACH = "breach", "Conduct breach"


class ChangeProposal(UUIDModel):
    """
    One proposed field edit on a governed record.

    PENDING -> APPROVED | REJECTED, then terminal. old/new values are opaque
    text; typing is recovered at apply time by the per-kind field registry.
    """
    entity_kind = models.CharField(max_length=16, choices=EntityKind.choices)
    entity_id = models.UUIDField()
    field_name = models.CharField(max_length=64)

    old_value = models.TextField(null=True, blank=True)
    new_value = models.TextField(null=True, blank=True)
    rationale = models.TextField(null=True, blank=True)

    status = models.CharField(
        max_length=16,
        choices=ProposalStatus.choices,
        default=ProposalStatus.PENDING,
        db_index=True,
    )

    proposed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="proposed_changes",
    )
    proposed_at = models.DateTimeField(default=timezone.now, db_index=True)

    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reviewed_changes",
        null=True,
        blank=True,
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_note = models.TextField(null=True, blank=True)

    # False for approvals whose field is not in the allow-list (nothing written).
    applied = models.BooleanField(default=False)

    class Meta:
        db_table = "changes_change_proposal"
        ordering = ["-proposed_at"]
        indexes = [
            models.Index(fields=["entity_kind", "entity_id", "proposed_at"], name="changes_entity_idx"),
            models.Index(fields=["status", "proposed_at"], name="changes_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.entity_kind}:{self.entity_id}.{self.field_name} [{self.status}]"
