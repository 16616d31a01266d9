# cg_core/iam/permissions.py

from __future__ import annotations

from rest_framework.permissions import BasePermission

from cg_core.iam.services import PermissionResolver


class HasPermissionCode(BasePermission):
    """
    View-level gate on a permission code.

    Views declare either:
      required_permission = "page:audit"
    or a per-action map:
      required_permissions = {"list": "page:audit", "create": None}
    A None/missing entry means "authenticated is enough".
    """
    message = "You do not have permission to perform this action."

    def _required_code(self, view) -> str | None:
        per_action = getattr(view, "required_permissions", None) or {}
        action = getattr(view, "action", None)
        if action in per_action:
            return per_action[action]
        return getattr(view, "required_permission", None)

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        code = self._required_code(view)
        if not code:
            return True

        # NotAuthenticated from the resolver (no active profile) propagates as 401.
        PermissionResolver().check_permission(user.id, code)
        return True


class HasRole(BasePermission):
    """
    Coarse gate: view.required_role must equal the caller's role.
    """
    message = "Your role does not allow this action."

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        role = getattr(view, "required_role", None)
        if not role:
            return True
        return PermissionResolver().require_role(user.id, role)
