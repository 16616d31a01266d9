# cg_core/access/models.py
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q

from cg_core.common.models import UUIDModel


class AccessRequestStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"
    EXPIRED = "EXPIRED", "Expired"
    CANCELLED = "CANCELLED", "Cancelled"


class AccessRequest(UUIDModel):
    """
    Time-boxed request for one permission code.

    PENDING -> APPROVED | REJECTED | CANCELLED; APPROVED -> EXPIRED once
    granted_until has passed and the sweep has run.
    """
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="access_requests",
    )
    permission = models.CharField(max_length=64)
    reason = models.TextField()
    duration_hours = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(168)],
    )

    # Optional context: which record the access is wanted for.
    entity_type = models.CharField(max_length=32, blank=True, default="")
    entity_id = models.CharField(max_length=64, blank=True, default="")
    entity_name = models.CharField(max_length=255, null=True, blank=True)

    status = models.CharField(
        max_length=16,
        choices=AccessRequestStatus.choices,
        default=AccessRequestStatus.PENDING,
        db_index=True,
    )

    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reviewed_access_requests",
        null=True,
        blank=True,
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_note = models.TextField(null=True, blank=True)
    granted_until = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "access_request"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["requester", "permission", "entity_id"],
                condition=Q(status="PENDING"),
                name="uq_access_request_pending",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "granted_until"], name="access_status_until_idx"),
            models.Index(fields=["requester", "status"], name="access_requester_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.requester_id}:{self.permission} [{self.status}]"
