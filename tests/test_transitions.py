import pytest
from schemas.approval import ApprovalStatus
from schemas.request import RequestStatus
from services.transitions import (
    APPROVAL_TRANSITIONS,
    REQUEST_TRANSITIONS,
    can_transition,
    sources_for,
)


def test_pending_request_can_be_accepted_or_rejected():
    assert can_transition(REQUEST_TRANSITIONS, RequestStatus.pending, RequestStatus.accepted)
    assert can_transition(REQUEST_TRANSITIONS, RequestStatus.pending, RequestStatus.rejected)


@pytest.mark.parametrize("terminal", [RequestStatus.accepted, RequestStatus.rejected])
def test_terminal_request_states_have_no_exits(terminal):
    for target in RequestStatus:
        assert not can_transition(REQUEST_TRANSITIONS, terminal, target)


def test_approval_table():
    assert can_transition(APPROVAL_TRANSITIONS, ApprovalStatus.pending, ApprovalStatus.approved)
    assert not can_transition(APPROVAL_TRANSITIONS, ApprovalStatus.rejected, ApprovalStatus.approved)
    assert not can_transition(APPROVAL_TRANSITIONS, ApprovalStatus.approved, ApprovalStatus.pending)


def test_sources_for_builds_update_filters():
    assert sources_for(APPROVAL_TRANSITIONS, ApprovalStatus.approved) == ["pending"]
    assert sources_for(REQUEST_TRANSITIONS, RequestStatus.rejected) == ["pending"]
    assert sources_for(REQUEST_TRANSITIONS, RequestStatus.pending) == []
