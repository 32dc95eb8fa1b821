"""
Tests for approval chain resolution
"""
import pytest

from leaveflow.core.errors import NoApproverFoundError
from leaveflow.models.department import Department
from leaveflow.models.employee import Role
from leaveflow.models.leave import LeaveType
from leaveflow.services.approval_chain import (
    DEFAULT_CHAIN,
    get_chain_for,
    get_first_role,
    get_next_role_in_chain,
    is_final_approver,
    resolve_approver,
)


def test_casual_leave_goes_to_department_head():
    assert get_chain_for(LeaveType.CASUAL, Role.EMPLOYEE) == (Role.DEPT_HEAD,)


def test_default_chain_for_earned_leave():
    assert get_chain_for(LeaveType.EARNED, Role.EMPLOYEE) == DEFAULT_CHAIN


def test_medical_chain_stops_at_hr_head():
    assert get_chain_for(LeaveType.MEDICAL, Role.EMPLOYEE) == (Role.HR_ADMIN, Role.DEPT_HEAD, Role.HR_HEAD)


@pytest.mark.parametrize("leave_type", list(LeaveType))
@pytest.mark.parametrize("requester_role", list(Role))
def test_requester_never_approves_own_role(leave_type, requester_role):
    chain = get_chain_for(leave_type, requester_role)
    assert chain
    assert requester_role not in chain


def test_empty_chain_escalates():
    assert get_chain_for(LeaveType.CASUAL, Role.DEPT_HEAD) == (Role.HR_HEAD,)


def test_chain_is_memoized():
    assert get_chain_for(LeaveType.EARNED, Role.EMPLOYEE) is get_chain_for(LeaveType.EARNED, Role.EMPLOYEE)


def test_next_role_and_final_approver():
    assert get_first_role(LeaveType.EARNED, Role.EMPLOYEE) == Role.HR_ADMIN
    assert get_next_role_in_chain(Role.HR_ADMIN, LeaveType.EARNED, Role.EMPLOYEE) == Role.DEPT_HEAD
    assert get_next_role_in_chain(Role.CEO, LeaveType.EARNED, Role.EMPLOYEE) is None
    assert get_next_role_in_chain(Role.CEO, LeaveType.MEDICAL, Role.EMPLOYEE) is None
    assert is_final_approver(Role.CEO, LeaveType.EARNED, Role.EMPLOYEE)
    assert not is_final_approver(Role.HR_HEAD, LeaveType.EARNED, Role.EMPLOYEE)
    assert is_final_approver(Role.DEPT_HEAD, LeaveType.CASUAL, Role.EMPLOYEE)


def test_resolve_department_head_prefers_requester_department(db, org, make_employee):
    finance = Department(name="Finance", active=True)
    db.add(finance)
    db.commit()
    finance_head = make_employee("DH002", "Finance Head", Role.DEPT_HEAD)
    accountant = make_employee("EMP002", "Accountant", Role.EMPLOYEE)
    finance_head.department_id = finance.id
    accountant.department_id = finance.id
    db.commit()

    assert resolve_approver(db, Role.DEPT_HEAD, accountant).id == finance_head.id
    assert resolve_approver(db, Role.DEPT_HEAD, org["employee"]).id == org["dept_head"].id


def test_resolve_picks_lowest_id_and_skips_requester(db, org, make_employee):
    second_admin = make_employee("HRA002", "Second Admin", Role.HR_ADMIN)

    assert resolve_approver(db, Role.HR_ADMIN, org["employee"]).id == org["hr_admin"].id
    assert resolve_approver(db, Role.HR_ADMIN, org["hr_admin"]).id == second_admin.id


def test_resolve_ignores_inactive_holders(db, org):
    org["ceo"].active = False
    db.commit()

    with pytest.raises(NoApproverFoundError):
        resolve_approver(db, Role.CEO, org["employee"])
