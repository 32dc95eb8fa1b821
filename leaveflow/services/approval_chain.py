"""
Approval chain resolution

The chain for a leave is derived from (leave type, requester role) every time
it is needed. The tables below are the only policy input, so the functions are
pure and memoized.
"""
import logging
from functools import lru_cache
from typing import Dict, Optional, Tuple

from sqlalchemy.orm import Session

from leaveflow.core.errors import NoApproverFoundError
from leaveflow.models.employee import Employee, Role
from leaveflow.models.leave import LeaveType

logger = logging.getLogger(__name__)

DEFAULT_CHAIN: Tuple[Role, ...] = (Role.HR_ADMIN, Role.DEPT_HEAD, Role.HR_HEAD, Role.CEO)

CHAINS_BY_TYPE: Dict[LeaveType, Tuple[Role, ...]] = {
    LeaveType.CASUAL: (Role.DEPT_HEAD,),
    LeaveType.MEDICAL: (Role.HR_ADMIN, Role.DEPT_HEAD, Role.HR_HEAD),
    LeaveType.QUARANTINE: (Role.HR_ADMIN, Role.DEPT_HEAD, Role.HR_HEAD),
}

# Single approver used when removing the requester's own role empties the chain
ESCALATION: Dict[Role, Role] = {
    Role.EMPLOYEE: Role.DEPT_HEAD,
    Role.DEPT_HEAD: Role.HR_HEAD,
    Role.HR_ADMIN: Role.HR_HEAD,
    Role.HR_HEAD: Role.CEO,
    Role.CEO: Role.HR_HEAD,
    Role.SYSTEM_ADMIN: Role.HR_HEAD,
}


@lru_cache(maxsize=None)
def get_chain_for(leave_type: LeaveType, requester_role: Role) -> Tuple[Role, ...]:
    """
    Ordered approver roles for a leave.

    The requester's own role is skipped so nobody approves their own request.

    Args:
        leave_type: Leave category
        requester_role: Role held by the employee applying

    Returns:
        Tuple of roles, first approver first; never empty
    """
    leave_type = LeaveType(leave_type)
    requester_role = Role(requester_role)
    base = CHAINS_BY_TYPE.get(leave_type, DEFAULT_CHAIN)
    chain = tuple(role for role in base if role != requester_role)
    if not chain:
        chain = (ESCALATION[requester_role],)
    return chain


def get_next_role_in_chain(current_role: Role, leave_type: LeaveType, requester_role: Role) -> Optional[Role]:
    """Role after ``current_role``; None when it is last or not part of the chain."""
    chain = get_chain_for(leave_type, requester_role)
    current_role = Role(current_role)
    if current_role not in chain:
        return None
    index = chain.index(current_role)
    if index + 1 >= len(chain):
        return None
    return chain[index + 1]


def is_final_approver(role: Role, leave_type: LeaveType, requester_role: Role) -> bool:
    chain = get_chain_for(leave_type, requester_role)
    return chain[-1] == Role(role)


def get_first_role(leave_type: LeaveType, requester_role: Role) -> Role:
    return get_chain_for(leave_type, requester_role)[0]


def resolve_approver(db: Session, role: Role, requester: Employee) -> Employee:
    """
    Find the employee who acts for ``role`` on ``requester``'s leave.

    Department heads are matched to the requester's department first. Among
    candidates the lowest id wins. The requester is never returned.

    Raises:
        NoApproverFoundError: If no active employee holds the role
    """
    role = Role(role)
    query = db.query(Employee).filter(
        Employee.role == role.value,
        Employee.active == True,  # noqa: E712
        Employee.id != requester.id,
    )
    approver = None
    if role == Role.DEPT_HEAD and requester.department_id is not None:
        approver = query.filter(Employee.department_id == requester.department_id).order_by(Employee.id).first()
    if approver is None:
        approver = query.order_by(Employee.id).first()
    if approver is None:
        logger.warning("no approver found: role=%s requester_id=%s", role.value, requester.id)
        raise NoApproverFoundError(
            f"No active employee holds the {role.value} role",
            details={"role": role.value},
        )
    return approver
