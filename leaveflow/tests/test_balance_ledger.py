"""
Tests for the balance ledger
"""
from datetime import date
from decimal import Decimal

import pytest

from leaveflow.core.errors import BalanceNotProvisionedError, StateConflictError
from leaveflow.models.balance import Balance, BalanceTransaction, BalanceTransactionAction
from leaveflow.models.leave import LeaveRequest, LeaveStatus, LeaveType
from leaveflow.services import balance_ledger


def _leave(db, requester, leave_type, start, end, working_days, status=LeaveStatus.APPROVED):
    leave = LeaveRequest(
        requester_id=requester.id,
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        working_days=working_days,
        status=status,
    )
    db.add(leave)
    db.commit()
    db.refresh(leave)
    return leave


def test_provision_creates_row_and_transaction(db, org):
    balance = balance_ledger.provision_balance(db, org["employee"].id, LeaveType.EARNED, 2026, opening=15, accrued=1.5)
    db.commit()

    assert balance_ledger.available_days(balance) == 16.5
    assert balance.closing == Decimal("16.5")
    transactions = db.query(BalanceTransaction).filter(BalanceTransaction.balance_id == balance.id).all()
    assert [t.action for t in transactions] == [BalanceTransactionAction.PROVISION.value]


def test_provision_twice_conflicts(db, org):
    balance_ledger.provision_balance(db, org["employee"].id, LeaveType.CASUAL, 2026, opening=8)
    db.commit()

    with pytest.raises(StateConflictError) as exc_info:
        balance_ledger.provision_balance(db, org["employee"].id, LeaveType.CASUAL, 2026, opening=8)
    assert exc_info.value.code == "balance_exists"


def test_untracked_types_cannot_be_provisioned(db, org):
    with pytest.raises(StateConflictError) as exc_info:
        balance_ledger.provision_balance(db, org["employee"].id, LeaveType.MATERNITY, 2026, opening=56)
    assert exc_info.value.code == "balance_not_tracked"


def test_deduct_happens_at_most_once(db, org, balances):
    leave = _leave(db, org["employee"], LeaveType.EARNED, date(2026, 3, 9), date(2026, 3, 11), 3)

    first = balance_ledger.deduct_for_leave(db, leave)
    second = balance_ledger.deduct_for_leave(db, leave)
    db.commit()

    assert first.id == second.id
    balance = balance_ledger.get_balance(db, org["employee"].id, LeaveType.EARNED, 2026)
    assert balance.used == Decimal("3")
    assert balance.closing == Decimal("17")
    deductions = db.query(BalanceTransaction).filter(
        BalanceTransaction.leave_id == leave.id,
        BalanceTransaction.action == BalanceTransactionAction.DEDUCT.value,
    ).count()
    assert deductions == 1


def test_deduct_increments_in_sql(db, org, balances):
    leave = _leave(db, org["employee"], LeaveType.EARNED, date(2026, 3, 9), date(2026, 3, 11), 3)
    earned = balances[LeaveType.EARNED]
    assert earned.used == Decimal("0")
    # Another writer deducts 2 days; the loaded row still shows 0 used
    db.query(Balance).filter(Balance.id == earned.id).update(
        {Balance.used: Balance.used + 2, Balance.closing: Balance.closing - 2},
        synchronize_session=False,
    )

    balance_ledger.deduct_for_leave(db, leave)
    db.commit()

    balance = balance_ledger.get_balance(db, org["employee"].id, LeaveType.EARNED, 2026)
    assert balance.used == Decimal("5")
    assert balance.closing == Decimal("15")


def test_deduct_without_balance_row_fails(db, org):
    leave = _leave(db, org["employee"], LeaveType.CASUAL, date(2026, 3, 9), date(2026, 3, 9), 1)

    with pytest.raises(BalanceNotProvisionedError) as exc_info:
        balance_ledger.deduct_for_leave(db, leave)

    assert exc_info.value.code == "balance_not_provisioned"
    assert exc_info.value.status_code == 404
    assert balance_ledger.get_balance(db, org["employee"].id, LeaveType.CASUAL, 2026) is None


def test_untracked_leave_types_are_not_deducted(db, org, balances):
    leave = _leave(db, org["employee"], LeaveType.QUARANTINE, date(2026, 3, 9), date(2026, 3, 13), 5)

    assert balance_ledger.deduct_for_leave(db, leave) is None
    assert db.query(BalanceTransaction).filter(BalanceTransaction.leave_id == leave.id).count() == 0


def test_deduction_uses_start_year(db, org, balances):
    next_year = balance_ledger.provision_balance(db, org["employee"].id, LeaveType.EARNED, 2027, opening=20)
    db.commit()
    leave = _leave(db, org["employee"], LeaveType.EARNED, date(2026, 12, 30), date(2027, 1, 4), 4)

    balance_ledger.deduct_for_leave(db, leave)
    db.commit()

    assert balance_ledger.get_balance(db, org["employee"].id, LeaveType.EARNED, 2026).used == Decimal("4")
    db.refresh(next_year)
    assert next_year.used == Decimal("0")


def test_pending_days_counts_in_chain_requests(db, org, balances):
    _leave(db, org["employee"], LeaveType.EARNED, date(2026, 3, 9), date(2026, 3, 10), 2, LeaveStatus.PENDING)
    held = _leave(db, org["employee"], LeaveType.EARNED, date(2026, 3, 16), date(2026, 3, 18), 3, LeaveStatus.PENDING)
    _leave(db, org["employee"], LeaveType.EARNED, date(2026, 3, 23), date(2026, 3, 23), 1, LeaveStatus.APPROVED)

    assert balance_ledger.pending_days(db, org["employee"].id, LeaveType.EARNED) == 5
    assert balance_ledger.pending_days(db, org["employee"].id, LeaveType.EARNED, exclude_leave_id=held.id) == 2


def test_accrual_adjusts_closing(db, org, balances):
    balance = balance_ledger.adjust_accrual(db, org["employee"].id, LeaveType.CASUAL, 2026, 1.5, remarks="monthly")
    db.commit()

    assert balance.accrued == Decimal("1.5")
    assert balance_ledger.snapshot(balance).available == 9.5
