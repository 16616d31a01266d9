# cg_core/common/models.py
from __future__ import annotations

import uuid
from django.db import models


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UUIDModel(TimeStampedModel):
    """
    UUID primary key + timestamps. Base for every domain table.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True


class ReferenceSequence(TimeStampedModel):
    """
    Allocation row per (table, prefix). create_with_reference() holds it
    with SELECT ... FOR UPDATE until the caller's transaction ends, so
    concurrent callers for the same prefix queue instead of colliding.
    """
    model_label = models.CharField(max_length=100)
    prefix = models.CharField(max_length=20)
    last_number = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "reference_sequence"
        constraints = [
            models.UniqueConstraint(fields=["model_label", "prefix"], name="uq_reference_sequence"),
        ]

    def __str__(self) -> str:
        return f"{self.model_label}:{self.prefix}{self.last_number}"
