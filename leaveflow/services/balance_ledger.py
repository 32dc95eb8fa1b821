"""
Balance ledger - per user / leave type / year day counts

Rows are provisioned explicitly; a deduction against a missing row is an
error, never an implicit create. closing = opening + accrued - used.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from leaveflow.core.errors import BalanceNotProvisionedError, StateConflictError
from leaveflow.models.balance import Balance, BalanceTransaction, BalanceTransactionAction
from leaveflow.models.leave import BALANCE_LEAVE_TYPES, LeaveRequest, LeaveType
from leaveflow.services.policy_engine import BalanceSnapshot
from leaveflow.services.repositories import LeaveRepository
from leaveflow.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


def _decimal(value) -> Decimal:
    return Decimal(str(value))


def get_balance(db: Session, user_id: int, leave_type: LeaveType, year: int) -> Optional[Balance]:
    return (
        db.query(Balance)
        .filter(
            Balance.user_id == user_id,
            Balance.leave_type == leave_type,
            Balance.year == year,
        )
        .first()
    )


def available_days(balance: Balance) -> float:
    """opening + accrued - used, computed at read time."""
    return float(balance.opening or 0) + float(balance.accrued or 0) - float(balance.used or 0)


def pending_days(
    db: Session,
    user_id: int,
    leave_type: LeaveType,
    exclude_leave_id: Optional[int] = None,
) -> float:
    """Working days held by the user's in-chain requests of ``leave_type``."""
    return LeaveRepository(db).pending_days(user_id, leave_type, exclude_leave_id)


def balances_for_user(db: Session, user_id: int, year: int) -> List[Balance]:
    return (
        db.query(Balance)
        .filter(Balance.user_id == user_id, Balance.year == year)
        .order_by(Balance.leave_type)
        .all()
    )


def snapshot(balance: Optional[Balance]) -> Optional[BalanceSnapshot]:
    if balance is None:
        return None
    return BalanceSnapshot(
        leave_type=LeaveType(balance.leave_type),
        year=balance.year,
        opening=float(balance.opening or 0),
        accrued=float(balance.accrued or 0),
        used=float(balance.used or 0),
    )


def _log_transaction(
    db: Session,
    balance: Balance,
    action: BalanceTransactionAction,
    delta_days: Decimal,
    leave_id: Optional[int] = None,
    remarks: Optional[str] = None,
) -> BalanceTransaction:
    transaction = BalanceTransaction(
        balance_id=balance.id,
        leave_id=leave_id,
        action=action.value,
        delta_days=delta_days,
        remarks=remarks,
        created_at=now_utc(),
    )
    db.add(transaction)
    return transaction


def provision_balance(
    db: Session,
    user_id: int,
    leave_type: LeaveType,
    year: int,
    opening: float,
    accrued: float = 0,
) -> Balance:
    """
    Create the yearly balance row for a user and leave type.

    Args:
        db: Database session
        user_id: Employee the balance belongs to
        leave_type: A ledger-tracked leave type
        year: Calendar year
        opening: Opening days
        accrued: Days accrued so far

    Returns:
        The new Balance (flushed, not committed)

    Raises:
        StateConflictError: If the row already exists
    """
    leave_type = LeaveType(leave_type)
    if leave_type not in BALANCE_LEAVE_TYPES:
        raise StateConflictError(
            f"{leave_type.value} leave is not tracked in the ledger",
            code="balance_not_tracked",
            details={"leave_type": leave_type.value},
        )
    if get_balance(db, user_id, leave_type, year) is not None:
        raise StateConflictError(
            f"Balance already provisioned for {leave_type.value} {year}",
            code="balance_exists",
            details={"user_id": user_id, "leave_type": leave_type.value, "year": year},
        )
    balance = Balance(
        user_id=user_id,
        leave_type=leave_type,
        year=year,
        opening=_decimal(opening),
        accrued=_decimal(accrued),
        used=Decimal("0"),
        closing=_decimal(opening) + _decimal(accrued),
    )
    db.add(balance)
    db.flush()
    _log_transaction(db, balance, BalanceTransactionAction.PROVISION, _decimal(opening) + _decimal(accrued))
    logger.info(
        "balance provisioned: user_id=%s leave_type=%s year=%s opening=%s accrued=%s",
        user_id, leave_type.value, year, opening, accrued,
    )
    return balance


def adjust_accrual(
    db: Session,
    user_id: int,
    leave_type: LeaveType,
    year: int,
    days: float,
    remarks: Optional[str] = None,
) -> Balance:
    """Add accrued days to an existing balance row."""
    balance = get_balance(db, user_id, leave_type, year)
    if balance is None:
        raise BalanceNotProvisionedError(
            f"No {LeaveType(leave_type).value} balance for {year}",
            details={"user_id": user_id, "leave_type": LeaveType(leave_type).value, "year": year},
        )
    balance.accrued = balance.accrued + _decimal(days)
    balance.closing = balance.opening + balance.accrued - balance.used
    _log_transaction(db, balance, BalanceTransactionAction.ACCRUAL, _decimal(days), remarks=remarks)
    db.flush()
    return balance


def deduct_for_leave(db: Session, leave: LeaveRequest) -> Optional[BalanceTransaction]:
    """
    Deduct an approved leave's working days from the balance of its start year.

    Runs inside the caller's transaction, which also flips the leave to
    APPROVED. A leave is deducted at most once: a repeated call finds the
    existing DEDUCT transaction and changes nothing.

    Returns:
        The DEDUCT transaction, or None for leave types without a balance

    Raises:
        BalanceNotProvisionedError: If the balance row does not exist
    """
    leave_type = LeaveType(leave.leave_type)
    if leave_type not in BALANCE_LEAVE_TYPES:
        logger.info("no ledger deduction for leave_request_id=%s leave_type=%s", leave.id, leave_type.value)
        return None

    existing = (
        db.query(BalanceTransaction)
        .filter(
            BalanceTransaction.leave_id == leave.id,
            BalanceTransaction.action == BalanceTransactionAction.DEDUCT.value,
        )
        .first()
    )
    if existing is not None:
        logger.warning("balance already deducted for leave_request_id=%s; skipping", leave.id)
        return existing

    year = leave.start_date.year
    balance = get_balance(db, leave.requester_id, leave_type, year)
    if balance is None:
        raise BalanceNotProvisionedError(
            f"No {leave_type.value} balance provisioned for {year}",
            details={"user_id": leave.requester_id, "leave_type": leave_type.value, "year": year},
        )

    days = _decimal(leave.working_days)
    # Increment in SQL so concurrent deductions on the same row both land
    db.flush()
    db.query(Balance).filter(Balance.id == balance.id).update(
        {Balance.used: Balance.used + days, Balance.closing: Balance.closing - days},
        synchronize_session=False,
    )
    db.refresh(balance)
    transaction = _log_transaction(
        db, balance, BalanceTransactionAction.DEDUCT, -days, leave_id=leave.id, remarks="leave approved"
    )
    db.flush()
    if balance.closing < 0:
        logger.warning(
            "balance overdrawn: user_id=%s leave_type=%s year=%s closing=%s",
            leave.requester_id, leave_type.value, year, balance.closing,
        )
    logger.info(
        "balance deducted: leave_request_id=%s user_id=%s leave_type=%s days=%s used=%s",
        leave.id, leave.requester_id, leave_type.value, days, balance.used,
    )
    return transaction
