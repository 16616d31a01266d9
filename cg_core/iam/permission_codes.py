# cg_core/iam/permission_codes.py
"""
Catalog of permission codes and the default role matrix.

The matrix only seeds RolePermission rows (seed_role_permissions command and
the data migration). The resolver never reads it: a missing row denies.
"""
from __future__ import annotations

from cg_core.iam.models import Role

PAGE_DASHBOARD = "page:dashboard"
PAGE_REPORTS = "page:reports"
PAGE_CONSUMER_DUTY = "page:consumer-duty"
PAGE_RISK_REGISTER = "page:risk-register"
PAGE_ACTIONS = "page:actions"
PAGE_COMPLIANCE = "page:compliance"
PAGE_CONTROLS = "page:controls"
PAGE_SMCR = "page:smcr"
PAGE_REGULATORY_CALENDAR = "page:regulatory-calendar"
PAGE_AUDIT = "page:audit"
PAGE_SETTINGS = "page:settings"
PAGE_USERS = "page:users"

CREATE_RISK = "create:risk"
EDIT_RISK = "edit:risk"
DELETE_RISK = "delete:risk"
CREATE_ACTION = "create:action"
EDIT_ACTION = "edit:action"
DELETE_ACTION = "delete:action"
CREATE_CONTROL = "create:control"
EDIT_CONTROL = "edit:control"
DELETE_CONTROL = "delete:control"
EDIT_COMPLIANCE = "edit:compliance"

MANAGE_SMCR = "manage:smcr"
MANAGE_REGULATIONS = "manage:regulations"

TOGGLE_RISK_FOCUS = "can:toggle-risk-focus"
BYPASS_APPROVAL = "can:bypass-approval"
APPROVE_ENTITIES = "can:approve-entities"
MANAGE_USERS = "can:manage-users"
MANAGE_SETTINGS = "can:manage-settings"
MANAGE_NOTIFICATIONS = "can:manage-notifications"
VIEW_PENDING = "can:view-pending"

PAGE_PERMISSIONS = (
    PAGE_DASHBOARD,
    PAGE_REPORTS,
    PAGE_CONSUMER_DUTY,
    PAGE_RISK_REGISTER,
    PAGE_ACTIONS,
    PAGE_COMPLIANCE,
    PAGE_CONTROLS,
    PAGE_SMCR,
    PAGE_REGULATORY_CALENDAR,
    PAGE_AUDIT,
    PAGE_SETTINGS,
    PAGE_USERS,
)

ALL_PERMISSIONS = PAGE_PERMISSIONS + (
    CREATE_RISK,
    EDIT_RISK,
    DELETE_RISK,
    CREATE_ACTION,
    EDIT_ACTION,
    DELETE_ACTION,
    CREATE_CONTROL,
    EDIT_CONTROL,
    DELETE_CONTROL,
    EDIT_COMPLIANCE,
    MANAGE_SMCR,
    MANAGE_REGULATIONS,
    TOGGLE_RISK_FOCUS,
    BYPASS_APPROVAL,
    APPROVE_ENTITIES,
    MANAGE_USERS,
    MANAGE_SETTINGS,
    MANAGE_NOTIFICATIONS,
    VIEW_PENDING,
)

_PAGES_ONLY = {code: code in PAGE_PERMISSIONS for code in ALL_PERMISSIONS}

DEFAULT_ROLE_PERMISSIONS: dict[str, dict[str, bool]] = {
    Role.CCRO_TEAM: {code: True for code in ALL_PERMISSIONS},
    Role.CEO: {**_PAGES_ONLY, TOGGLE_RISK_FOCUS: True},
    Role.OWNER: {
        **_PAGES_ONLY,
        CREATE_RISK: True,
        EDIT_RISK: True,
        CREATE_ACTION: True,
        EDIT_ACTION: True,
    },
    Role.VIEWER: dict(_PAGES_ONLY),
}


def is_known_permission(code: str) -> bool:
    return code in ALL_PERMISSIONS


def seed_role_permissions(model, *, overwrite: bool = False) -> int:
    """
    Write DEFAULT_ROLE_PERMISSIONS into `model` (RolePermission or its
    historical version in a migration). Existing rows are kept unless
    overwrite=True. Returns the number of rows created or changed.
    """
    touched = 0
    for role, matrix in DEFAULT_ROLE_PERMISSIONS.items():
        for code, granted in matrix.items():
            row, created = model.objects.get_or_create(
                role=str(role), permission=code, defaults={"granted": granted}
            )
            if created:
                touched += 1
            elif overwrite and row.granted != granted:
                row.granted = granted
                row.save(update_fields=["granted", "updated_at"])
                touched += 1
    return touched
