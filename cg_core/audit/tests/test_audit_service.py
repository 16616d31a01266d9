import logging

import pytest
from django.core.validators import validate_ipv46_address
from django.db import DatabaseError, connection, transaction

from cg_core.audit.models import SYSTEM_ROLE, AuditLogEntry
from cg_core.audit.services import AuditService
from cg_core.common.api.exceptions import ImmutableLedgerError
from cg_core.iam.models import Role

pytestmark = pytest.mark.django_db


def test_record_snapshots_actor_role(owner):
    record = AuditService.record(
        actor_id=owner.id,
        action="create_risk",
        entity_type="risk",
        entity_id="abc",
        changes={"reference": "R0001"},
    )
    assert record is not None
    assert record.actor_role == Role.OWNER

    entry = AuditLogEntry.objects.get(id=record.id)
    assert entry.user_id == owner.id
    assert entry.user_role == Role.OWNER
    assert entry.changes == {"reference": "R0001"}
    assert entry.timestamp is not None


def test_system_actions_have_no_user():
    record = AuditService.record(action="access_request_expire", entity_type="access_request", entity_id="x")
    entry = AuditLogEntry.objects.get(id=record.id)
    assert entry.user_id is None
    assert entry.user_role == SYSTEM_ROLE


def test_client_metadata_from_request(rf, viewer):
    request = rf.get("/", HTTP_X_FORWARDED_FOR="10.0.0.7, 172.16.0.1", HTTP_USER_AGENT="pytest-agent")
    record = AuditService.record(actor_id=viewer.id, action="export", entity_type="report", request=request)

    entry = AuditLogEntry.objects.get(id=record.id)
    assert entry.ip_address == "10.0.0.7"
    assert entry.user_agent == "pytest-agent"


def test_forged_forwarded_for_still_records_a_valid_entry(rf, viewer):
    request = rf.get("/", HTTP_X_FORWARDED_FOR="not-an-ip, 10.0.0.1", REMOTE_ADDR="192.168.1.5")
    record = AuditService.record(
        actor_id=viewer.id, action="export", entity_type="report", request=request, raise_on_error=True
    )

    entry = AuditLogEntry.objects.get(id=record.id)
    assert entry.ip_address == "192.168.1.5"
    validate_ipv46_address(entry.ip_address)


def test_failed_write_is_logged_and_swallowed(caplog, viewer):
    with caplog.at_level(logging.ERROR, logger="cg_core.audit.services"):
        record = AuditService.record(
            actor_id=viewer.id,
            action="broken",
            entity_type="risk",
            changes={"not_json": object()},
        )

    assert record is None
    assert "Audit write failed" in caplog.text
    assert not AuditLogEntry.objects.filter(action="broken").exists()

    # the surrounding transaction is still usable
    assert AuditService.record(actor_id=viewer.id, action="after", entity_type="risk") is not None


def test_failed_write_can_propagate(viewer):
    with pytest.raises(TypeError):
        AuditService.record(
            actor_id=viewer.id,
            action="broken",
            entity_type="risk",
            changes={"not_json": object()},
            raise_on_error=True,
        )


def test_entries_cannot_be_updated_or_deleted_through_the_orm(viewer):
    record = AuditService.record(actor_id=viewer.id, action="login", entity_type="user")
    entry = AuditLogEntry.objects.get(id=record.id)

    entry.action = "tampered"
    with pytest.raises(ImmutableLedgerError):
        entry.save()
    with pytest.raises(ImmutableLedgerError):
        entry.delete()
    with pytest.raises(ImmutableLedgerError):
        AuditLogEntry.objects.filter(id=record.id).update(action="tampered")
    with pytest.raises(ImmutableLedgerError):
        AuditLogEntry.objects.filter(id=record.id).delete()

    assert AuditLogEntry.objects.get(id=record.id).action == "login"


def test_database_rejects_raw_update_and_delete(viewer):
    record = AuditService.record(actor_id=viewer.id, action="login", entity_type="user")

    with pytest.raises(DatabaseError):
        with transaction.atomic(), connection.cursor() as cursor:
            cursor.execute("UPDATE audit_log_entry SET action = 'tampered'")

    with pytest.raises(DatabaseError):
        with transaction.atomic(), connection.cursor() as cursor:
            cursor.execute("DELETE FROM audit_log_entry")

    assert AuditLogEntry.objects.get(id=record.id).action == "login"
