# cg_core/iam/repositories.py
"""
Storage seam for the permission resolver.

PermissionResolver depends on this interface only, so tests and tools can
swap the ORM-backed store for InMemoryPermissionRepository.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from cg_core.iam.models import RolePermission, UserPermission, UserProfile


class PermissionRepository(ABC):
    @abstractmethod
    def get_role(self, user_id) -> Optional[str]:
        """Role of an active user, or None for unknown/inactive identities."""
        pass

    @abstractmethod
    def get_user_override(self, user_id, code: str) -> Optional[bool]:
        """granted value of the UserPermission row, or None when no row exists."""
        pass

    @abstractmethod
    def get_role_default(self, role: str, code: str) -> Optional[bool]:
        """granted value of the RolePermission row, or None when no row exists."""
        pass

    @abstractmethod
    def user_overrides(self, user_id) -> dict[str, bool]:
        pass

    @abstractmethod
    def role_defaults(self, role: str) -> dict[str, bool]:
        pass


class DjangoPermissionRepository(PermissionRepository):
    def get_role(self, user_id) -> Optional[str]:
        if user_id is None:
            return None
        return (
            UserProfile.objects.filter(user_id=user_id, is_active=True, user__is_active=True)
            .values_list("role", flat=True)
            .first()
        )

    def get_user_override(self, user_id, code: str) -> Optional[bool]:
        return (
            UserPermission.objects.filter(user_id=user_id, permission=code)
            .values_list("granted", flat=True)
            .first()
        )

    def get_role_default(self, role: str, code: str) -> Optional[bool]:
        return (
            RolePermission.objects.filter(role=role, permission=code)
            .values_list("granted", flat=True)
            .first()
        )

    def user_overrides(self, user_id) -> dict[str, bool]:
        return dict(UserPermission.objects.filter(user_id=user_id).values_list("permission", "granted"))

    def role_defaults(self, role: str) -> dict[str, bool]:
        return dict(RolePermission.objects.filter(role=role).values_list("permission", "granted"))


class InMemoryPermissionRepository(PermissionRepository):
    """
    Dict-backed store. Same fail-closed contract: no row -> None -> deny.
    """

    def __init__(
        self,
        *,
        roles: Optional[dict] = None,
        role_permissions: Optional[Iterable[tuple[str, str, bool]]] = None,
        user_permissions: Optional[Iterable[tuple[object, str, bool]]] = None,
    ):
        self.roles: dict = dict(roles or {})
        self.role_permissions: dict[tuple[str, str], bool] = {
            (role, code): granted for role, code, granted in (role_permissions or [])
        }
        self.user_permissions: dict[tuple[object, str], bool] = {
            (user_id, code): granted for user_id, code, granted in (user_permissions or [])
        }

    def set_user_permission(self, user_id, code: str, granted: Optional[bool]) -> None:
        if granted is None:
            self.user_permissions.pop((user_id, code), None)
        else:
            self.user_permissions[(user_id, code)] = granted

    def get_role(self, user_id) -> Optional[str]:
        return self.roles.get(user_id)

    def get_user_override(self, user_id, code: str) -> Optional[bool]:
        return self.user_permissions.get((user_id, code))

    def get_role_default(self, role: str, code: str) -> Optional[bool]:
        return self.role_permissions.get((role, code))

    def user_overrides(self, user_id) -> dict[str, bool]:
        return {code: g for (uid, code), g in self.user_permissions.items() if uid == user_id}

    def role_defaults(self, role: str) -> dict[str, bool]:
        return {code: g for (r, code), g in self.role_permissions.items() if r == role}
