import pytest

from cg_core.audit.models import AuditLogEntry
from cg_core.audit.services import AuditService
from cg_core.iam import permission_codes as codes
from cg_core.iam.models import UserPermission

pytestmark = pytest.mark.django_db


@pytest.fixture
def entries(owner):
    AuditService.record(actor_id=owner.id, action="create_risk", entity_type="risk", entity_id="r-1")
    AuditService.record(actor_id=owner.id, action="propose_change", entity_type="risk", entity_id="r-1")
    AuditService.record(actor_id=owner.id, action="create_action", entity_type="action", entity_id="a-1")
    return AuditLogEntry.objects.all()


def test_list_is_newest_first_and_filterable(client_for, ccro, entries):
    client = client_for(ccro)

    res = client.get("/api/v1/audit/")
    assert res.status_code == 200, res.content
    body = res.json()
    assert body["count"] == 3
    timestamps = [r["timestamp"] for r in body["results"]]
    assert timestamps == sorted(timestamps, reverse=True)

    res = client.get("/api/v1/audit/", {"entity_type": "risk"})
    assert res.json()["count"] == 2

    res = client.get("/api/v1/audit/", {"action": "create_action"})
    assert [r["entity_id"] for r in res.json()["results"]] == ["a-1"]


def test_invalid_date_filter_is_400(client_for, ccro, entries):
    res = client_for(ccro).get("/api/v1/audit/", {"date_from": "not-a-date"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"


def test_entity_history(client_for, ccro, entries):
    res = client_for(ccro).get("/api/v1/audit/history/risk/r-1/")
    assert res.status_code == 200, res.content
    assert {r["action"] for r in res.json()["results"]} == {"create_risk", "propose_change"}


def test_list_requires_page_audit(client_for, viewer, entries):
    UserPermission.objects.create(user=viewer, permission=codes.PAGE_AUDIT, granted=False)
    res = client_for(viewer).get("/api/v1/audit/")
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "permission_denied"


def test_post_records_with_server_side_actor(client_for, viewer):
    res = client_for(viewer).post(
        "/api/v1/audit/",
        {"action": "export_report", "entity_type": "report", "report_id": "rep-9"},
        format="json",
        HTTP_USER_AGENT="browser",
    )
    assert res.status_code == 201, res.content
    body = res.json()
    assert body["user_id"] == viewer.id
    assert body["username"] == "viewer"
    assert body["report_id"] == "rep-9"
    assert body["user_agent"] == "browser"


@pytest.mark.parametrize("method", ["put", "patch", "delete"])
def test_mutations_answer_405(client_for, ccro, entries, method):
    entry = entries.first()
    res = getattr(client_for(ccro), method)(f"/api/v1/audit/{entry.id}/", {"action": "x"}, format="json")

    assert res.status_code == 405
    assert res.json()["error"]["code"] == "audit_log_immutable"
    assert AuditLogEntry.objects.get(id=entry.id).action == entry.action
