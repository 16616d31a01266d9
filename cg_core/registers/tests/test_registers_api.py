import pytest

from cg_core.registers.models import Risk
from cg_core.registers.services import RegisterService

pytestmark = pytest.mark.django_db


def test_create_and_list_risks(client_for, owner):
    client = client_for(owner)

    res = client.post("/api/v1/risks/", {"name": "Outsourcing failure", "residual_impact": 2}, format="json")
    assert res.status_code == 201, res.content
    assert res.json()["reference"] == "R0001"

    res = client.get("/api/v1/risks/")
    assert res.status_code == 200
    assert [r["reference"] for r in res.json()["results"]] == ["R0001"]


def test_retrieve_unknown_is_404(client_for, owner):
    res = client_for(owner).get("/api/v1/risks/00000000-0000-0000-0000-000000000000/")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "not_found"


def test_viewer_cannot_create_risk(client_for, viewer):
    res = client_for(viewer).post("/api/v1/risks/", {"name": "x"}, format="json")
    assert res.status_code == 403
    assert not Risk.objects.exists()


def test_action_status_filter(client_for, owner):
    RegisterService.create_action(actor_id=owner.id, title="one")
    done = RegisterService.create_action(actor_id=owner.id, title="two")
    done.status = "COMPLETED"
    done.save(update_fields=["status", "updated_at"])

    res = client_for(owner).get("/api/v1/actions/", {"status": "COMPLETED"})
    assert res.status_code == 200
    assert [a["title"] for a in res.json()["results"]] == ["two"]
