import pytest
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from cg_core.audit.models import AuditLogEntry
from cg_core.iam import permission_codes as codes
from cg_core.iam.models import Role, RolePermission, UserPermission
from cg_core.iam.services import PermissionResolver, PermissionService

pytestmark = pytest.mark.django_db


def test_viewer_edit_compliance_override_lifecycle(ccro, viewer):
    resolver = PermissionResolver()
    assert resolver.resolve(viewer.id, codes.EDIT_COMPLIANCE) is False

    PermissionService.set_user_permissions(
        actor_id=ccro.id, user_id=viewer.id, permissions={codes.EDIT_COMPLIANCE: True}
    )
    assert resolver.resolve(viewer.id, codes.EDIT_COMPLIANCE) is True

    PermissionService.set_user_permissions(
        actor_id=ccro.id, user_id=viewer.id, permissions={codes.EDIT_COMPLIANCE: None}
    )
    assert resolver.resolve(viewer.id, codes.EDIT_COMPLIANCE) is False
    assert not UserPermission.objects.filter(user=viewer).exists()

    entries = AuditLogEntry.objects.filter(action="update_user_permissions", entity_id=str(viewer.id))
    assert entries.count() == 2
    latest = entries.order_by("-timestamp").first()
    assert latest.changes == {codes.EDIT_COMPLIANCE: {"from": True, "to": None}}
    assert latest.user_id == ccro.id
    assert latest.user_role == Role.CCRO_TEAM


def test_set_user_permissions_requires_manage_users(owner, viewer):
    with pytest.raises(PermissionDenied):
        PermissionService.set_user_permissions(
            actor_id=owner.id, user_id=viewer.id, permissions={codes.EDIT_COMPLIANCE: True}
        )
    assert not UserPermission.objects.exists()


def test_set_user_permissions_rejects_unknown_codes(ccro, viewer):
    with pytest.raises(ValidationError):
        PermissionService.set_user_permissions(
            actor_id=ccro.id, user_id=viewer.id, permissions={"edit:everything": True}
        )


def test_set_user_permissions_unknown_user(ccro):
    with pytest.raises(NotFound):
        PermissionService.set_user_permissions(
            actor_id=ccro.id, user_id=987654, permissions={codes.EDIT_COMPLIANCE: True}
        )


def test_set_role_permissions_records_diff(ccro, viewer):
    PermissionService.set_role_permissions(
        actor_id=ccro.id,
        role=Role.VIEWER,
        permissions={codes.EDIT_COMPLIANCE: True, codes.PAGE_AUDIT: True},
    )

    assert RolePermission.objects.get(role=Role.VIEWER, permission=codes.EDIT_COMPLIANCE).granted is True
    assert PermissionResolver().resolve(viewer.id, codes.EDIT_COMPLIANCE) is True

    entry = AuditLogEntry.objects.get(action="update_role_permissions")
    assert entry.entity_type == "role"
    assert entry.entity_id == Role.VIEWER
    # page:audit was already granted, so only the real change is recorded
    assert entry.changes == {codes.EDIT_COMPLIANCE: {"from": False, "to": True}}


def test_set_role_permissions_rejects_null_values(ccro):
    with pytest.raises(ValidationError):
        PermissionService.set_role_permissions(
            actor_id=ccro.id, role=Role.VIEWER, permissions={codes.EDIT_COMPLIANCE: None}
        )


def test_assign_role_audits_only_real_changes(ccro, viewer):
    profile = PermissionService.assign_role(actor_id=ccro.id, user_id=viewer.id, role=Role.OWNER)
    assert profile.role == Role.OWNER
    assert PermissionResolver().resolve(viewer.id, codes.CREATE_RISK) is True

    PermissionService.assign_role(actor_id=ccro.id, user_id=viewer.id, role=Role.OWNER)

    entries = AuditLogEntry.objects.filter(action="update_user_role")
    assert entries.count() == 1
    assert entries.get().changes == {"role": {"from": Role.VIEWER, "to": Role.OWNER}}


def test_assign_role_rejects_unknown_role(ccro, viewer):
    with pytest.raises(ValidationError):
        PermissionService.assign_role(actor_id=ccro.id, user_id=viewer.id, role="ADMIN")
