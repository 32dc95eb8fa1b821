"""
Leave request lifecycle transitions
"""
from typing import Dict, FrozenSet

from leaveflow.models.leave import LeaveStatus

ALLOWED_TRANSITIONS: Dict[LeaveStatus, FrozenSet[LeaveStatus]] = {
    LeaveStatus.SUBMITTED: frozenset({
        LeaveStatus.PENDING,
        LeaveStatus.APPROVED,
        LeaveStatus.REJECTED,
        LeaveStatus.RETURNED,
        LeaveStatus.CANCELLED,
    }),
    LeaveStatus.PENDING: frozenset({
        LeaveStatus.APPROVED,
        LeaveStatus.REJECTED,
        LeaveStatus.RETURNED,
        LeaveStatus.CANCELLED,
    }),
    LeaveStatus.RETURNED: frozenset({
        LeaveStatus.PENDING,
        LeaveStatus.SUBMITTED,
        LeaveStatus.CANCELLED,
    }),
    LeaveStatus.APPROVED: frozenset(),
    LeaveStatus.REJECTED: frozenset(),
    LeaveStatus.CANCELLED: frozenset(),
}


def can_transition(current: LeaveStatus, target: LeaveStatus) -> bool:
    return LeaveStatus(target) in ALLOWED_TRANSITIONS.get(LeaveStatus(current), frozenset())


def sources_for(target: LeaveStatus) -> FrozenSet[LeaveStatus]:
    """Every status from which ``target`` can be reached."""
    target = LeaveStatus(target)
    return frozenset(status for status, targets in ALLOWED_TRANSITIONS.items() if target in targets)
