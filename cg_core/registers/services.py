# cg_core/registers/services.py
from __future__ import annotations

from typing import Any, Optional

from django.db import transaction

from cg_core.audit.services import AuditService
from cg_core.common.references import create_with_reference
from cg_core.iam import permission_codes as codes
from cg_core.iam.services import PermissionResolver
from cg_core.registers.models import Action, Control, ConductBreach, Risk

RISK_PREFIX, RISK_PAD = "R", 4
CONTROL_PREFIX, CONTROL_PAD = "CTRL-", 3
ACTION_PREFIX, ACTION_PAD = "ACT-", 3
BREACH_PREFIX, BREACH_PAD = "BRE-", 3


class RegisterService:
    """
    Creation of governed records. Field edits after creation go through
    change proposals (cg_core.changes), never through here.
    """

    @staticmethod
    def _create(
        *,
        actor_id,
        permission: str,
        model,
        prefix: str,
        pad_width: int,
        field: str,
        entity_type: str,
        values: dict[str, Any],
        request=None,
        resolver: Optional[PermissionResolver] = None,
    ):
        (resolver or PermissionResolver()).check_permission(actor_id, permission)

        obj = create_with_reference(model, prefix, field=field, pad_width=pad_width, **values)

        AuditService.record(
            actor_id=actor_id,
            action=f"create_{entity_type}",
            entity_type=entity_type,
            entity_id=obj.pk,
            changes={"reference": getattr(obj, field)},
            request=request,
        )
        return obj

    @staticmethod
    @transaction.atomic
    def create_risk(*, actor_id, request=None, **values) -> Risk:
        return RegisterService._create(
            actor_id=actor_id,
            permission=codes.CREATE_RISK,
            model=Risk,
            prefix=RISK_PREFIX,
            pad_width=RISK_PAD,
            field="reference",
            entity_type="risk",
            values=values,
            request=request,
        )

    @staticmethod
    @transaction.atomic
    def create_control(*, actor_id, request=None, **values) -> Control:
        return RegisterService._create(
            actor_id=actor_id,
            permission=codes.CREATE_CONTROL,
            model=Control,
            prefix=CONTROL_PREFIX,
            pad_width=CONTROL_PAD,
            field="control_ref",
            entity_type="control",
            values=values,
            request=request,
        )

    @staticmethod
    @transaction.atomic
    def create_action(*, actor_id, request=None, **values) -> Action:
        return RegisterService._create(
            actor_id=actor_id,
            permission=codes.CREATE_ACTION,
            model=Action,
            prefix=ACTION_PREFIX,
            pad_width=ACTION_PAD,
            field="reference",
            entity_type="action",
            values=values,
            request=request,
        )

    @staticmethod
    @transaction.atomic
    def create_breach(*, actor_id, request=None, **values) -> ConductBreach:
        return RegisterService._create(
            actor_id=actor_id,
            permission=codes.MANAGE_SMCR,
            model=ConductBreach,
            prefix=BREACH_PREFIX,
            pad_width=BREACH_PAD,
            field="reference",
            entity_type="breach",
            values=values,
            request=request,
        )
