import pytest
from rest_framework.exceptions import NotAuthenticated, PermissionDenied

from cg_core.iam import permission_codes as codes
from cg_core.iam.models import Role, UserPermission, UserProfile
from cg_core.iam.repositories import InMemoryPermissionRepository, PermissionRepository
from cg_core.iam.services import PermissionResolver


def _memory_resolver():
    repo = InMemoryPermissionRepository(
        roles={1: Role.VIEWER, 2: Role.CCRO_TEAM},
        role_permissions=[
            (Role.VIEWER, codes.PAGE_AUDIT, True),
            (Role.VIEWER, codes.EDIT_COMPLIANCE, False),
            (Role.CCRO_TEAM, codes.PAGE_AUDIT, True),
            (Role.CCRO_TEAM, codes.EDIT_COMPLIANCE, True),
        ],
    )
    return repo, PermissionResolver(repository=repo)


def test_role_default_applies_without_override():
    _, resolver = _memory_resolver()
    assert resolver.resolve(1, codes.PAGE_AUDIT) is True
    assert resolver.resolve(1, codes.EDIT_COMPLIANCE) is False


def test_override_wins_in_both_directions():
    repo, resolver = _memory_resolver()

    repo.set_user_permission(1, codes.EDIT_COMPLIANCE, True)
    assert resolver.resolve(1, codes.EDIT_COMPLIANCE) is True

    repo.set_user_permission(2, codes.PAGE_AUDIT, False)
    assert resolver.resolve(2, codes.PAGE_AUDIT) is False


def test_removing_override_falls_back_to_role():
    repo, resolver = _memory_resolver()
    repo.set_user_permission(1, codes.EDIT_COMPLIANCE, True)
    repo.set_user_permission(1, codes.EDIT_COMPLIANCE, None)
    assert resolver.resolve(1, codes.EDIT_COMPLIANCE) is False


def test_missing_rows_deny():
    _, resolver = _memory_resolver()
    assert resolver.resolve(1, codes.MANAGE_SMCR) is False
    assert resolver.resolve(1, "page:does-not-exist") is False


def test_unknown_user_is_unauthenticated():
    _, resolver = _memory_resolver()
    with pytest.raises(NotAuthenticated):
        resolver.resolve(999, codes.PAGE_AUDIT)


def test_resolve_all_merges_overrides():
    repo, resolver = _memory_resolver()
    repo.set_user_permission(1, codes.EDIT_COMPLIANCE, True)
    repo.set_user_permission(1, codes.PAGE_AUDIT, False)
    assert resolver.resolve_all(1) == {codes.EDIT_COMPLIANCE}


def test_require_role_and_assert_role():
    _, resolver = _memory_resolver()
    assert resolver.require_role(2, Role.CCRO_TEAM) is True
    assert resolver.require_role(1, Role.CCRO_TEAM) is False

    with pytest.raises(PermissionDenied):
        resolver.assert_role(1, Role.CCRO_TEAM)


def test_check_permission_raises_on_deny():
    _, resolver = _memory_resolver()
    resolver.check_permission(2, codes.EDIT_COMPLIANCE)
    with pytest.raises(PermissionDenied):
        resolver.check_permission(1, codes.EDIT_COMPLIANCE)


def test_incomplete_repository_cannot_be_created():
    class RolesOnly(PermissionRepository):
        def get_role(self, user_id):
            return Role.VIEWER

    with pytest.raises(TypeError):
        RolesOnly()


@pytest.mark.django_db
def test_seeded_matrix_drives_orm_resolution(ccro, owner, viewer):
    resolver = PermissionResolver()

    assert resolver.resolve(ccro.id, codes.MANAGE_USERS) is True
    assert resolver.resolve(owner.id, codes.CREATE_RISK) is True
    assert resolver.resolve(owner.id, codes.APPROVE_ENTITIES) is False
    assert resolver.resolve(viewer.id, codes.PAGE_DASHBOARD) is True
    assert resolver.resolve(viewer.id, codes.EDIT_COMPLIANCE) is False


@pytest.mark.django_db
def test_orm_override_beats_role_default(viewer, ccro):
    UserPermission.objects.create(user=viewer, permission=codes.EDIT_COMPLIANCE, granted=True)
    UserPermission.objects.create(user=ccro, permission=codes.PAGE_AUDIT, granted=False)

    resolver = PermissionResolver()
    assert resolver.resolve(viewer.id, codes.EDIT_COMPLIANCE) is True
    assert resolver.resolve(ccro.id, codes.PAGE_AUDIT) is False


@pytest.mark.django_db
def test_inactive_profile_is_unauthenticated(viewer):
    UserProfile.objects.filter(user=viewer).update(is_active=False)
    with pytest.raises(NotAuthenticated):
        PermissionResolver().resolve(viewer.id, codes.PAGE_DASHBOARD)


@pytest.mark.django_db
def test_new_user_gets_viewer_profile(django_user_model):
    user = django_user_model.objects.create_user(username="fresh", password="x")
    assert user.cg_profile.role == Role.VIEWER

    admin = django_user_model.objects.create_superuser(username="root", password="x", email="root@example.com")
    assert admin.cg_profile.role == Role.CCRO_TEAM
