import logging

import pytest
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from cg_core.audit.models import AuditLogEntry
from cg_core.changes.models import ChangeProposal, ProposalStatus
from cg_core.changes.services import ChangeProposalService
from cg_core.common.api.exceptions import ConflictError
from cg_core.registers.models import ActionStatus, BreachStatus
from cg_core.registers.services import RegisterService

pytestmark = pytest.mark.django_db


@pytest.fixture
def action(owner):
    return RegisterService.create_action(actor_id=owner.id, title="Update T&Cs")


@pytest.fixture
def risk(owner):
    return RegisterService.create_risk(actor_id=owner.id, name="Data loss", inherent_impact=2)


def _propose(actor, entity, kind, field, new, old=None):
    return ChangeProposalService.propose(
        actor_id=actor.id,
        entity_kind=kind,
        entity_id=entity.id,
        field_name=field,
        old_value=old,
        new_value=new,
        rationale="because",
    )


def _review(reviewer, proposal, decision=ProposalStatus.APPROVED, note=None):
    return ChangeProposalService.review(
        reviewer_id=reviewer.id,
        entity_kind=proposal.entity_kind,
        entity_id=proposal.entity_id,
        proposal_id=proposal.id,
        decision=decision,
        note=note,
    )


def test_propose_stores_text_and_audits(owner, risk):
    proposal = _propose(owner, risk, "risk", "inherent_impact", 5, old=2)

    assert proposal.status == ProposalStatus.PENDING
    assert proposal.old_value == "2"
    assert proposal.new_value == "5"
    assert proposal.proposed_by_id == owner.id

    entry = AuditLogEntry.objects.get(action="propose_change")
    assert entry.entity_type == "risk"
    assert entry.entity_id == str(risk.id)
    assert entry.changes["proposal_id"] == str(proposal.id)


def test_approve_applies_typed_value(owner, ccro, risk):
    proposal = _propose(owner, risk, "risk", "inherent_impact", "5")
    reviewed = _review(ccro, proposal, note="agreed")

    assert reviewed.status == ProposalStatus.APPROVED
    assert reviewed.applied is True
    assert reviewed.reviewed_by_id == ccro.id
    assert reviewed.reviewed_at is not None
    assert reviewed.review_note == "agreed"

    risk.refresh_from_db()
    assert risk.inherent_impact == 5
    assert AuditLogEntry.objects.filter(action="approve_change", entity_id=str(risk.id)).count() == 1


def test_reject_leaves_entity_untouched(owner, ccro, risk):
    proposal = _propose(owner, risk, "risk", "name", "Renamed")
    reviewed = _review(ccro, proposal, decision=ProposalStatus.REJECTED)

    assert reviewed.status == ProposalStatus.REJECTED
    assert reviewed.applied is False
    risk.refresh_from_db()
    assert risk.name == "Data loss"
    assert AuditLogEntry.objects.filter(action="reject_change").count() == 1


def test_second_review_conflicts(owner, ccro, risk):
    proposal = _propose(owner, risk, "risk", "name", "First")
    _review(ccro, proposal)

    with pytest.raises(ConflictError):
        _review(ccro, proposal, decision=ProposalStatus.REJECTED)

    proposal.refresh_from_db()
    assert proposal.status == ProposalStatus.APPROVED
    assert AuditLogEntry.objects.filter(action__in=["approve_change", "reject_change"]).count() == 1


def test_concurrent_review_loser_gets_conflict(monkeypatch, owner, ccro, make_user, risk):
    other_reviewer = make_user("CCRO_TEAM")
    proposal = _propose(owner, risk, "risk", "name", "Winner")

    # both reviewers loaded the proposal while it was still PENDING
    stale = ChangeProposal.objects.get(id=proposal.id)
    _review(ccro, proposal)

    monkeypatch.setattr(ChangeProposalService, "_load_for_review", staticmethod(lambda **kwargs: stale))
    with pytest.raises(ConflictError):
        ChangeProposalService.review(
            reviewer_id=other_reviewer.id,
            entity_kind="risk",
            entity_id=risk.id,
            proposal_id=proposal.id,
            decision=ProposalStatus.REJECTED,
        )

    proposal.refresh_from_db()
    assert proposal.status == ProposalStatus.APPROVED
    assert proposal.reviewed_by_id == ccro.id
    risk.refresh_from_db()
    assert risk.name == "Winner"
    assert AuditLogEntry.objects.filter(action__in=["approve_change", "reject_change"]).count() == 1


def test_completing_an_action_stamps_completed_at(owner, ccro, action):
    proposal = _propose(owner, action, "action", "status", ActionStatus.COMPLETED)
    _review(ccro, proposal)

    action.refresh_from_db()
    assert action.status == ActionStatus.COMPLETED
    assert action.completed_at is not None


def test_proposed_closed_is_stored_as_completed(owner, ccro, action):
    proposal = _propose(owner, action, "action", "status", ActionStatus.PROPOSED_CLOSED)
    _review(ccro, proposal)

    action.refresh_from_db()
    assert action.status == ActionStatus.COMPLETED
    assert action.completed_at is not None


def test_other_status_does_not_stamp(owner, ccro, action):
    proposal = _propose(owner, action, "action", "status", ActionStatus.IN_PROGRESS)
    _review(ccro, proposal)

    action.refresh_from_db()
    assert action.status == ActionStatus.IN_PROGRESS
    assert action.completed_at is None


def test_due_date_and_assignee(owner, ccro, viewer, action):
    _review(ccro, _propose(owner, action, "action", "due_date", "2025-03-31T00:00:00Z"))
    _review(ccro, _propose(owner, action, "action", "assigned_to", viewer.id))

    action.refresh_from_db()
    assert action.due_date.isoformat() == "2025-03-31"
    assert action.assigned_to_id == viewer.id


def test_unknown_field_is_approved_but_not_applied(caplog, owner, ccro, risk):
    proposal = _propose(owner, risk, "risk", "colour", "red")

    with caplog.at_level(logging.WARNING, logger="cg_core.changes.services"):
        reviewed = _review(ccro, proposal)

    assert reviewed.status == ProposalStatus.APPROVED
    assert reviewed.applied is False
    assert "not in allow-list" in caplog.text


def test_invalid_value_keeps_proposal_pending(owner, ccro, risk):
    proposal = _propose(owner, risk, "risk", "inherent_impact", "9")

    with pytest.raises(ValidationError):
        _review(ccro, proposal)

    proposal.refresh_from_db()
    assert proposal.status == ProposalStatus.PENDING
    risk.refresh_from_db()
    assert risk.inherent_impact == 2


def test_owner_cannot_review(owner, risk):
    proposal = _propose(owner, risk, "risk", "name", "x")
    with pytest.raises(PermissionDenied):
        _review(owner, proposal)


def test_breach_review_uses_manage_smcr(make_user, ccro):
    breach = RegisterService.create_breach(actor_id=ccro.id, title="Conduct rule 2")
    proposal = _propose(ccro, breach, "breach", "status", BreachStatus.CLOSED)
    _review(ccro, proposal)

    breach.refresh_from_db()
    assert breach.status == BreachStatus.CLOSED
    assert breach.closed_at is not None


def test_self_review_can_be_blocked(settings, ccro, make_user, risk):
    settings.CHANGE_PROPOSALS_ALLOW_SELF_REVIEW = False
    proposal = _propose(ccro, risk, "risk", "name", "mine")

    with pytest.raises(PermissionDenied):
        _review(ccro, proposal)

    _review(make_user("CCRO_TEAM"), proposal)
    proposal.refresh_from_db()
    assert proposal.status == ProposalStatus.APPROVED


def test_review_with_wrong_entity_is_404(owner, ccro, risk, action):
    proposal = _propose(owner, risk, "risk", "name", "x")
    with pytest.raises(NotFound):
        ChangeProposalService.review(
            reviewer_id=ccro.id,
            entity_kind="action",
            entity_id=action.id,
            proposal_id=proposal.id,
            decision=ProposalStatus.APPROVED,
        )


def test_propose_against_missing_entity_is_404(owner):
    with pytest.raises(NotFound):
        ChangeProposalService.propose(
            actor_id=owner.id,
            entity_kind="risk",
            entity_id="00000000-0000-0000-0000-000000000000",
            field_name="name",
            new_value="x",
        )


def test_propose_many_is_all_or_nothing(owner, risk):
    with pytest.raises(ValidationError):
        ChangeProposalService.propose_many(
            actor_id=owner.id,
            entity_kind="risk",
            entity_id=risk.id,
            changes=[
                {"field_name": "name", "new_value": "ok"},
                {"field_name": "  ", "new_value": "bad"},
            ],
        )
    assert not ChangeProposal.objects.exists()

    created = ChangeProposalService.propose_many(
        actor_id=owner.id,
        entity_kind="risk",
        entity_id=risk.id,
        changes=[
            {"field_name": "name", "new_value": "ok"},
            {"field_name": "review_requested", "new_value": True},
        ],
    )
    assert [p.new_value for p in created] == ["ok", "true"]
