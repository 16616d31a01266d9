# cg_core/common/references.py
from __future__ import annotations

import logging
import re
from typing import Any, Optional, Type

from django.conf import settings
from django.db import IntegrityError, models, transaction

from cg_core.common.api.exceptions import ReferenceGenerationError
from cg_core.common.models import ReferenceSequence

logger = logging.getLogger(__name__)


def format_reference(prefix: str, number: int, pad_width: int = 3) -> str:
    return f"{prefix}{number:0{pad_width}d}"


def _current_max(prefix: str, model: Type[models.Model], field: str) -> int:
    """
    Natural-sort max of existing sequence numbers for the prefix.
    Values that are not PREFIX + digits (legacy/manual refs) are ignored.
    """
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    values = model._default_manager.filter(**{f"{field}__startswith": prefix}).values_list(field, flat=True)

    highest = 0
    for value in values:
        m = pattern.match((value or "").strip())
        if m:
            highest = max(highest, int(m.group(1)))
    return highest


def next_reference(
    prefix: str,
    model: Type[models.Model],
    *,
    field: str = "reference",
    pad_width: int = 3,
    floor: int = 0,
) -> str:
    """
    PREFIX + zero-padded (max + 1), e.g. "BRE-004" or "R0012".

    A read alone is not collision-safe; callers that insert should use
    create_with_reference(), which serialises allocation per prefix.
    """
    number = max(_current_max(prefix, model, field) + 1, floor)
    return format_reference(prefix, number, pad_width)


def _sequence_of(reference: str, prefix: str) -> int:
    return int(reference[len(prefix):])


def _lock_sequence(model: Type[models.Model], prefix: str) -> ReferenceSequence:
    label = model._meta.label_lower
    ReferenceSequence.objects.get_or_create(model_label=label, prefix=prefix)
    return ReferenceSequence.objects.select_for_update().get(model_label=label, prefix=prefix)


@transaction.atomic
def create_with_reference(
    model: Type[models.Model],
    prefix: str,
    *,
    field: str = "reference",
    pad_width: int = 3,
    max_attempts: Optional[int] = None,
    **values: Any,
) -> models.Model:
    """
    Insert a row whose `field` gets the next free reference.

    The (model, prefix) ReferenceSequence row is locked for the rest of the
    caller's transaction, so callers sharing a prefix are served one at a
    time and each sees the number its predecessor committed. The next value
    is max(sequence + 1, natural max + 1), which also absorbs rows written
    outside this function.

    Each insert runs inside a savepoint. A unique violation (a row inserted
    without going through the sequence) is retried with the failed
    candidate + 1 as the floor, up to REFERENCE_MAX_ATTEMPTS.
    """
    attempts = max_attempts or getattr(settings, "REFERENCE_MAX_ATTEMPTS", 5)
    sequence = _lock_sequence(model, prefix)
    floor = sequence.last_number + 1

    for attempt in range(1, attempts + 1):
        reference = next_reference(prefix, model, field=field, pad_width=pad_width, floor=floor)
        try:
            with transaction.atomic(savepoint=True):
                obj = model._default_manager.create(**{field: reference}, **values)
        except IntegrityError:
            if not model._default_manager.filter(**{field: reference}).exists():
                # Some other constraint failed; not ours to retry.
                raise
            logger.info(
                "Reference %s already taken for %s (attempt %s/%s), retrying",
                reference,
                model.__name__,
                attempt,
                attempts,
            )
            floor = _sequence_of(reference, prefix) + 1
            continue

        sequence.last_number = _sequence_of(reference, prefix)
        sequence.save(update_fields=["last_number", "updated_at"])
        return obj

    logger.error("Gave up allocating a %s reference for %s after %s attempts", prefix, model.__name__, attempts)
    raise ReferenceGenerationError()
