from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound


def list_records(model, *, status: str | None = None) -> QuerySet:
    qs = model.objects.all()
    if status and any(f.name == "status" for f in model._meta.fields):
        qs = qs.filter(status=status)
    return qs


def get_record(model, pk):
    try:
        return model.objects.get(pk=pk)
    except (model.DoesNotExist, ValueError, DjangoValidationError):
        raise NotFound(f"{model._meta.verbose_name.title()} not found.")
