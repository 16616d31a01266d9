# cg_core/iam/services.py
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.exceptions import NotAuthenticated, NotFound, PermissionDenied, ValidationError

from cg_core.audit.services import AuditService
from cg_core.iam import permission_codes as codes
from cg_core.iam.models import Role, RolePermission, UserPermission, UserProfile
from cg_core.iam.repositories import DjangoPermissionRepository, PermissionRepository

logger = logging.getLogger(__name__)


class PermissionResolver:
    """
    Effective grant for (user, permission code).

    1) UserPermission row present -> its granted value, whatever the role says.
    2) Otherwise RolePermission(role, code).
    3) No row at all -> deny.

    Read-only; a concurrent matrix edit may be observed before or after.
    """

    def __init__(self, repository: Optional[PermissionRepository] = None):
        self.repository = repository or DjangoPermissionRepository()

    def role_of(self, user_id) -> str:
        """Role of an active user; raises NotAuthenticated for unknown identities."""
        role = self.repository.get_role(user_id)
        if role is None:
            raise NotAuthenticated("Authentication credentials were not provided or are invalid.")
        return role

    def resolve(self, user_id, code: str) -> bool:
        role = self.role_of(user_id)

        override = self.repository.get_user_override(user_id, code)
        if override is not None:
            return bool(override)

        return bool(self.repository.get_role_default(role, code))

    def resolve_all(self, user_id) -> set[str]:
        role = self.role_of(user_id)
        effective = dict(self.repository.role_defaults(role))
        effective.update(self.repository.user_overrides(user_id))
        return {code for code, granted in effective.items() if granted and codes.is_known_permission(code)}

    def require_role(self, user_id, role: str) -> bool:
        """
        Coarse role gate for features that predate permission codes.
        """
        return self.role_of(user_id) == role

    def check_permission(self, user_id, code: str) -> None:
        if not self.resolve(user_id, code):
            logger.warning("Permission denied: user=%s permission=%s", user_id, code)
            raise PermissionDenied(f"Missing permission: {code}")

    def assert_role(self, user_id, role: str) -> None:
        if not self.require_role(user_id, role):
            logger.warning("Role check failed: user=%s required_role=%s", user_id, role)
            raise PermissionDenied(f"This action requires the {role} role.")


def _validate_role(role: str) -> str:
    if role not in Role.values:
        raise ValidationError({"role": f"Unknown role '{role}'."})
    return role


def _validate_codes(permissions: Mapping[str, Any], *, allow_null: bool) -> None:
    if not isinstance(permissions, Mapping) or not permissions:
        raise ValidationError({"permissions": "A non-empty mapping of permission code to value is required."})

    errors = {}
    for code, value in permissions.items():
        if not codes.is_known_permission(code):
            errors[code] = "Unknown permission code."
        elif value is None and not allow_null:
            errors[code] = "Must be true or false."
        elif value is not None and not isinstance(value, bool):
            errors[code] = "Must be true, false or null." if allow_null else "Must be true or false."
    if errors:
        raise ValidationError({"permissions": errors})


class PermissionService:
    """
    Management of the permission matrices. Every write requires can:manage-users
    and is audited with a from/to payload of the codes that actually changed.
    """

    @staticmethod
    @transaction.atomic
    def set_role_permissions(
        *,
        actor_id,
        role: str,
        permissions: Mapping[str, bool],
        request=None,
        resolver: Optional[PermissionResolver] = None,
    ) -> dict[str, bool]:
        (resolver or PermissionResolver()).check_permission(actor_id, codes.MANAGE_USERS)
        _validate_role(role)
        _validate_codes(permissions, allow_null=False)

        before = dict(RolePermission.objects.filter(role=role).values_list("permission", "granted"))
        changes: dict[str, dict[str, Any]] = {}

        for code, granted in permissions.items():
            RolePermission.objects.update_or_create(role=role, permission=code, defaults={"granted": granted})
            if before.get(code) != granted:
                changes[code] = {"from": before.get(code), "to": granted}

        AuditService.record(
            actor_id=actor_id,
            action="update_role_permissions",
            entity_type="role",
            entity_id=role,
            changes=changes,
            request=request,
        )

        return dict(RolePermission.objects.filter(role=role).values_list("permission", "granted"))

    @staticmethod
    @transaction.atomic
    def set_user_permissions(
        *,
        actor_id,
        user_id,
        permissions: Mapping[str, Optional[bool]],
        request=None,
        resolver: Optional[PermissionResolver] = None,
    ) -> dict[str, bool]:
        """
        True/False upserts an override; None deletes it so the role default applies again.
        """
        (resolver or PermissionResolver()).check_permission(actor_id, codes.MANAGE_USERS)
        _validate_codes(permissions, allow_null=True)

        if not get_user_model().objects.filter(pk=user_id).exists():
            raise NotFound("User not found.")

        before = dict(UserPermission.objects.filter(user_id=user_id).values_list("permission", "granted"))
        changes: dict[str, dict[str, Any]] = {}

        for code, granted in permissions.items():
            if granted is None:
                UserPermission.objects.filter(user_id=user_id, permission=code).delete()
            else:
                UserPermission.objects.update_or_create(
                    user_id=user_id, permission=code, defaults={"granted": granted}
                )
            if before.get(code) != granted:
                changes[code] = {"from": before.get(code), "to": granted}

        AuditService.record(
            actor_id=actor_id,
            action="update_user_permissions",
            entity_type="user",
            entity_id=str(user_id),
            changes=changes,
            request=request,
        )

        return dict(UserPermission.objects.filter(user_id=user_id).values_list("permission", "granted"))

    @staticmethod
    @transaction.atomic
    def assign_role(
        *,
        actor_id,
        user_id,
        role: str,
        request=None,
        resolver: Optional[PermissionResolver] = None,
    ) -> UserProfile:
        (resolver or PermissionResolver()).check_permission(actor_id, codes.MANAGE_USERS)
        _validate_role(role)

        try:
            profile = UserProfile.objects.select_for_update().get(user_id=user_id)
        except UserProfile.DoesNotExist:
            raise NotFound("User not found.")

        previous = profile.role
        if previous != role:
            profile.role = role
            profile.save(update_fields=["role", "updated_at"])

            AuditService.record(
                actor_id=actor_id,
                action="update_user_role",
                entity_type="user",
                entity_id=str(user_id),
                changes={"role": {"from": previous, "to": role}},
                request=request,
            )

        return profile
