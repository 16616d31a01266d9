# cg_core/iam/models.py
from django.conf import settings
from django.db import models

from cg_core.common.models import UUIDModel


class Role(models.TextChoices):
    CCRO_TEAM = "CCRO_TEAM", "CCRO Team"
    CEO = "CEO", "CEO"
    OWNER = "OWNER", "Owner"
    VIEWER = "VIEWER", "Viewer"


class UserProfile(UUIDModel):
    """
    Compliance identity anchored to Django's AUTH_USER_MODEL.
    Holds the single role that drives role-default permissions.
    """
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="cg_profile")
    role = models.CharField(max_length=32, choices=Role.choices, default=Role.VIEWER, db_index=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "iam_user_profile"
        indexes = [
            models.Index(fields=["role", "is_active"], name="iam_profile_role_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user.get_username()} ({self.role})"


class RolePermission(UUIDModel):
    """
    Baseline policy: (role, permission code) -> granted.
    """
    role = models.CharField(max_length=32, choices=Role.choices)
    permission = models.CharField(max_length=64)
    granted = models.BooleanField(default=False)

    class Meta:
        db_table = "iam_role_permission"
        constraints = [
            models.UniqueConstraint(fields=["role", "permission"], name="uq_role_permission"),
        ]
        ordering = ["role", "permission"]

    def __str__(self) -> str:
        return f"{self.role}:{self.permission}={self.granted}"


class UserPermission(UUIDModel):
    """
    Per-user override. A row (granted true OR false) wins over the role default;
    deleting the row restores inheritance.
    """
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="permission_overrides")
    permission = models.CharField(max_length=64)
    granted = models.BooleanField()

    class Meta:
        db_table = "iam_user_permission"
        constraints = [
            models.UniqueConstraint(fields=["user", "permission"], name="uq_user_permission"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id}:{self.permission}={self.granted}"
