from __future__ import annotations

from django.db.models import QuerySet

from cg_core.iam.models import RolePermission, UserPermission


def list_role_permissions(*, role: str | None = None) -> QuerySet[RolePermission]:
    qs = RolePermission.objects.all()
    if role:
        qs = qs.filter(role=role)
    return qs.order_by("role", "permission")


def list_user_permissions(*, user_id) -> QuerySet[UserPermission]:
    return UserPermission.objects.filter(user_id=user_id).order_by("permission")
