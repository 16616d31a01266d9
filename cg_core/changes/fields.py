# cg_core/changes/fields.py
"""
Per-kind allow-list of proposable fields.

Each entry maps a field name to the model attribute it writes and a coercion
from the stored text to the typed value. Field-specific business rules
(completion stamps) travel with the entry as an `apply` hook.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from django.apps import apps
from django.contrib.auth import get_user_model
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework.exceptions import NotFound, ValidationError

from cg_core.changes.models import EntityKind
from cg_core.iam import permission_codes as codes
from cg_core.registers.models import (
    ActionStatus,
    BreachStatus,
    ConsumerDutyOutcome,
    ControlFrequency,
    ControlType,
    InternalOrThirdParty,
)

_TRUE = {"true", "1", "yes", "y", "on"}
_FALSE = {"false", "0", "no", "n", "off"}


# -------------------------
# Coercions (text -> typed value)
# -------------------------
def as_text(raw: str) -> str:
    return str(raw)


def as_int(raw: str) -> int:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError({"new_value": f"'{raw}' is not a whole number."})


def as_score(raw: str) -> int:
    value = as_int(raw)
    if not 1 <= value <= 5:
        raise ValidationError({"new_value": "Scores must be between 1 and 5."})
    return value


def as_positive_int(raw: str) -> int:
    value = as_int(raw)
    if value < 1:
        raise ValidationError({"new_value": "Must be a positive number."})
    return value


def as_bool(raw: str) -> bool:
    text = str(raw).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValidationError({"new_value": f"'{raw}' is not a boolean."})


def as_date(raw: str):
    text = str(raw).strip()
    if not text:
        return None
    # accept full ISO datetimes too ("2025-03-01T00:00:00Z")
    parsed = parse_date(text[:10])
    if parsed is None:
        raise ValidationError({"new_value": f"'{raw}' is not an ISO date (YYYY-MM-DD)."})
    return parsed


def as_choice(choices) -> Callable[[str], str]:
    allowed = set(choices.values)

    def coerce(raw: str) -> str:
        value = str(raw).strip()
        if value not in allowed:
            raise ValidationError({"new_value": f"'{raw}' is not one of {sorted(allowed)}."})
        return value

    return coerce


def as_optional_choice(choices) -> Callable[[str], Optional[str]]:
    strict = as_choice(choices)

    def coerce(raw: str) -> Optional[str]:
        return strict(raw) if str(raw).strip() else None

    return coerce


def as_user_id(raw: str) -> Optional[int]:
    text = str(raw).strip()
    if not text:
        return None
    user_id = as_int(text)
    if not get_user_model().objects.filter(pk=user_id).exists():
        raise ValidationError({"new_value": f"User {user_id} does not exist."})
    return user_id


# -------------------------
# Registry
# -------------------------
def _set(attr: str):
    def apply(instance, value) -> list[str]:
        setattr(instance, attr, value)
        return [attr]

    return apply


@dataclass(frozen=True)
class FieldRule:
    attr: str
    coerce: Callable[[str], Any] = as_text
    hook: Optional[Callable[[Any, Any], list[str]]] = None

    def apply(self, instance, value) -> list[str]:
        """Write the coerced value; returns the update_fields touched."""
        return (self.hook or _set(self.attr))(instance, value)


@dataclass(frozen=True)
class EntityKindSpec:
    kind: str
    model_label: str
    view_permission: str
    approval_permission: str
    fields: Mapping[str, FieldRule] = field(default_factory=dict)

    @property
    def model(self):
        return apps.get_model(self.model_label)


def _complete_action(instance, value) -> list[str]:
    if value in (ActionStatus.COMPLETED, ActionStatus.PROPOSED_CLOSED):
        instance.status = ActionStatus.COMPLETED
        instance.completed_at = timezone.now()
        return ["status", "completed_at"]
    instance.status = value
    return ["status"]


def _close_breach(instance, value) -> list[str]:
    instance.status = value
    if value == BreachStatus.CLOSED:
        instance.closed_at = timezone.now()
        return ["status", "closed_at"]
    return ["status"]


ENTITY_KINDS: dict[str, EntityKindSpec] = {
    EntityKind.RISK: EntityKindSpec(
        kind=EntityKind.RISK,
        model_label="registers.Risk",
        view_permission=codes.PAGE_RISK_REGISTER,
        approval_permission=codes.APPROVE_ENTITIES,
        fields={
            "name": FieldRule("name"),
            "description": FieldRule("description"),
            "owner": FieldRule("owner_id", as_user_id),
            "inherent_likelihood": FieldRule("inherent_likelihood", as_score),
            "inherent_impact": FieldRule("inherent_impact", as_score),
            "residual_likelihood": FieldRule("residual_likelihood", as_score),
            "residual_impact": FieldRule("residual_impact", as_score),
            "review_frequency_days": FieldRule("review_frequency_days", as_positive_int),
            "review_requested": FieldRule("review_requested", as_bool),
        },
    ),
    EntityKind.CONTROL: EntityKindSpec(
        kind=EntityKind.CONTROL,
        model_label="registers.Control",
        view_permission=codes.PAGE_CONTROLS,
        approval_permission=codes.APPROVE_ENTITIES,
        fields={
            "control_name": FieldRule("control_name"),
            "control_description": FieldRule("control_description"),
            "control_owner": FieldRule("control_owner_id", as_user_id),
            "consumer_duty_outcome": FieldRule("consumer_duty_outcome", as_optional_choice(ConsumerDutyOutcome)),
            "control_frequency": FieldRule("control_frequency", as_choice(ControlFrequency)),
            "control_type": FieldRule("control_type", as_optional_choice(ControlType)),
            "internal_or_third_party": FieldRule("internal_or_third_party", as_choice(InternalOrThirdParty)),
            "standing_comments": FieldRule("standing_comments"),
            "business_area": FieldRule("business_area"),
        },
    ),
    EntityKind.ACTION: EntityKindSpec(
        kind=EntityKind.ACTION,
        model_label="registers.Action",
        view_permission=codes.PAGE_ACTIONS,
        approval_permission=codes.APPROVE_ENTITIES,
        fields={
            "title": FieldRule("title"),
            "description": FieldRule("description"),
            "status": FieldRule("status", as_choice(ActionStatus), _complete_action),
            "due_date": FieldRule("due_date", as_date),
            "assigned_to": FieldRule("assigned_to_id", as_user_id),
        },
    ),
    EntityKind.BREACH: EntityKindSpec(
        kind=EntityKind.BREACH,
        model_label="registers.ConductBreach",
        view_permission=codes.PAGE_SMCR,
        approval_permission=codes.MANAGE_SMCR,
        fields={
            "title": FieldRule("title"),
            "description": FieldRule("description"),
            "status": FieldRule("status", as_choice(BreachStatus), _close_breach),
        },
    ),
}


def get_entity_kind(kind: str) -> EntityKindSpec:
    try:
        return ENTITY_KINDS[kind]
    except KeyError:
        raise NotFound(f"Unknown entity kind '{kind}'.")
