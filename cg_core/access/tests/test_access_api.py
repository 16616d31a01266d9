import pytest

from cg_core.access.models import AccessRequestStatus
from cg_core.iam import permission_codes as codes

pytestmark = pytest.mark.django_db


def _create(client, **overrides):
    payload = {"permission": codes.MANAGE_SMCR, "reason": "Cover for holiday", "duration_hours": 8, **overrides}
    return client.post("/api/v1/access-requests/", payload, format="json")


def test_request_decide_flow(client_for, owner, ccro):
    res = _create(client_for(owner))
    assert res.status_code == 201, res.content
    request_id = res.json()["id"]
    assert res.json()["status"] == AccessRequestStatus.PENDING

    res = client_for(owner).post(f"/api/v1/access-requests/{request_id}/decide/", {"approve": True}, format="json")
    assert res.status_code == 403

    res = client_for(ccro).post(
        f"/api/v1/access-requests/{request_id}/decide/",
        {"approve": True, "note": "fine"},
        format="json",
    )
    assert res.status_code == 200, res.content
    body = res.json()
    assert body["status"] == AccessRequestStatus.APPROVED
    assert body["granted_until"] is not None
    assert body["reviewed_by_name"] == "ccro"

    me = client_for(owner).get("/api/v1/me/")
    assert codes.MANAGE_SMCR in me.json()["permissions"]


def test_duplicate_is_409(client_for, owner):
    client = client_for(owner)
    assert _create(client).status_code == 201

    res = _create(client)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "conflict"


def test_invalid_duration_is_400(client_for, owner):
    res = _create(client_for(owner), duration_hours=500)
    assert res.status_code == 400
    assert "duration_hours" in res.json()["error"]["details"]


def test_listing_is_scoped_to_requester(client_for, owner, viewer, ccro):
    _create(client_for(owner))
    _create(client_for(viewer), permission=codes.EDIT_COMPLIANCE)

    res = client_for(owner).get("/api/v1/access-requests/")
    assert res.status_code == 200
    assert [r["permission"] for r in res.json()["results"]] == [codes.MANAGE_SMCR]

    res = client_for(ccro).get("/api/v1/access-requests/")
    assert res.json()["count"] == 2

    res = client_for(ccro).get("/api/v1/access-requests/", {"status": "approved"})
    assert res.json()["count"] == 0


def test_cancel_endpoint(client_for, owner):
    request_id = _create(client_for(owner)).json()["id"]

    res = client_for(owner).post(f"/api/v1/access-requests/{request_id}/cancel/")
    assert res.status_code == 200, res.content
    assert res.json()["status"] == AccessRequestStatus.CANCELLED


def test_expire_endpoint_is_reviewer_only(client_for, owner, ccro):
    assert client_for(owner).post("/api/v1/access-requests/expire/").status_code == 403

    res = client_for(ccro).post("/api/v1/access-requests/expire/")
    assert res.status_code == 200
    assert res.json() == {"expired": 0}
