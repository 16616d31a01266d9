import pytest

from cg_core.iam import permission_codes as codes
from cg_core.iam.models import Role
from cg_core.iam.services import PermissionResolver

pytestmark = pytest.mark.django_db


def test_viewer_cannot_edit_overrides(client_for, viewer, owner):
    res = client_for(viewer).put(
        f"/api/v1/permissions/users/{owner.id}/",
        {"permissions": {codes.APPROVE_ENTITIES: True}},
        format="json",
    )
    assert res.status_code == 403
    body = res.json()
    assert body["error"]["code"] == "permission_denied"
    assert codes.MANAGE_USERS in body["error"]["message"]


def test_ccro_sets_and_clears_override(client_for, ccro, viewer):
    client = client_for(ccro)

    res = client.put(
        f"/api/v1/permissions/users/{viewer.id}/",
        {"permissions": {codes.EDIT_COMPLIANCE: True}},
        format="json",
    )
    assert res.status_code == 200, res.content
    assert res.json() == [
        {
            "user": viewer.id,
            "permission": codes.EDIT_COMPLIANCE,
            "granted": True,
            "updated_at": res.json()[0]["updated_at"],
        }
    ]
    assert PermissionResolver().resolve(viewer.id, codes.EDIT_COMPLIANCE) is True

    res = client.put(
        f"/api/v1/permissions/users/{viewer.id}/",
        {"permissions": {codes.EDIT_COMPLIANCE: None}},
        format="json",
    )
    assert res.status_code == 200, res.content
    assert res.json() == []
    assert PermissionResolver().resolve(viewer.id, codes.EDIT_COMPLIANCE) is False


def test_role_matrix_listing_and_update(client_for, ccro):
    client = client_for(ccro)

    res = client.get("/api/v1/permissions/roles/", {"role": Role.CEO})
    assert res.status_code == 200
    rows = {r["permission"]: r["granted"] for r in res.json()}
    assert rows[codes.TOGGLE_RISK_FOCUS] is True
    assert rows[codes.MANAGE_USERS] is False

    res = client.put(
        "/api/v1/permissions/roles/",
        {"role": Role.CEO, "permissions": {codes.VIEW_PENDING: True}},
        format="json",
    )
    assert res.status_code == 200, res.content
    assert {r["permission"]: r["granted"] for r in res.json()}[codes.VIEW_PENDING] is True


def test_unknown_code_is_validation_error(client_for, ccro, viewer):
    res = client_for(ccro).put(
        f"/api/v1/permissions/users/{viewer.id}/",
        {"permissions": {"page:nowhere": True}},
        format="json",
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"


def test_assign_role_endpoint(client_for, ccro, viewer):
    res = client_for(ccro).put(f"/api/v1/users/{viewer.id}/role/", {"role": Role.CEO}, format="json")
    assert res.status_code == 200, res.content
    assert res.json() == {"role": Role.CEO}
    assert PermissionResolver().role_of(viewer.id) == Role.CEO
