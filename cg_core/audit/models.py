# cg_core/audit/models.py
import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from cg_core.common.api.exceptions import ImmutableLedgerError

SYSTEM_ROLE = "SYSTEM"


class AuditLogQuerySet(models.QuerySet):
    """
    Bulk mutation paths refuse before any SQL is sent.
    The database triggers (migration 0002) back this up for raw SQL.
    """

    def update(self, **kwargs):
        raise ImmutableLedgerError()

    def delete(self):
        raise ImmutableLedgerError()

    def bulk_update(self, objs, fields, batch_size=None):
        raise ImmutableLedgerError()

    def update_or_create(self, defaults=None, **kwargs):
        raise ImmutableLedgerError()


class AuditLogEntry(models.Model):
    """
    Immutable record of one privileged action.

    entity_id is a plain string: entries outlive the entity and also
    describe non-UUID entities (roles, users).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="audit_entries",
        null=True,
        blank=True,
    )
    user_role = models.CharField(max_length=32, db_index=True)  # captured at write time

    action = models.CharField(max_length=64, db_index=True)  # e.g. "approve_change"
    entity_type = models.CharField(max_length=64, db_index=True)  # e.g. "risk"
    entity_id = models.CharField(max_length=64, blank=True, default="", db_index=True)

    changes = models.JSONField(null=True, blank=True)
    report_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)

    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=512, blank=True, default="")

    timestamp = models.DateTimeField(default=timezone.now, db_index=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        db_table = "audit_log_entry"
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
            models.Index(fields=["user", "timestamp"], name="audit_user_ts_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableLedgerError()
        kwargs["force_insert"] = True
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableLedgerError()

    def __str__(self) -> str:
        return f"{self.action} {self.entity_type}:{self.entity_id} by {self.user_id}"
