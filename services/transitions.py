from typing import Dict, FrozenSet
from schemas.approval import ApprovalStatus
from schemas.request import RequestStatus

APPROVAL_TRANSITIONS: Dict[ApprovalStatus, FrozenSet[ApprovalStatus]] = {
    ApprovalStatus.pending: frozenset({ApprovalStatus.approved, ApprovalStatus.rejected}),
    ApprovalStatus.approved: frozenset(),
    ApprovalStatus.rejected: frozenset(),
}

REQUEST_TRANSITIONS: Dict[RequestStatus, FrozenSet[RequestStatus]] = {
    RequestStatus.pending: frozenset({RequestStatus.accepted, RequestStatus.rejected}),
    RequestStatus.accepted: frozenset(),
    RequestStatus.rejected: frozenset(),
}

ALREADY_PROCESSED_MESSAGE = "Cererea a fost deja procesată"


def can_transition(table: Dict, current, target) -> bool:
    return target in table.get(current, frozenset())


def sources_for(table: Dict, target) -> list:
    """States from which `target` can be reached, used as the update filter."""
    return [state.value for state in table if can_transition(table, state, target)]
