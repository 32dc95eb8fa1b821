"""
Balance ledger models
"""
from sqlalchemy import (
    Column,
    Integer,
    DateTime,
    ForeignKey,
    String,
    Text,
    Numeric,
    Enum as SQLEnum,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
import enum
from leaveflow.db.base import Base
from leaveflow.models.leave import LeaveType


class BalanceTransactionAction(str, enum.Enum):
    PROVISION = "PROVISION"
    ACCRUAL = "ACCRUAL"
    DEDUCT = "DEDUCT"


class Balance(Base):
    """
    One row per (user_id, leave_type, year).
    closing = opening + accrued - used.
    """
    __tablename__ = "balances"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    leave_type = Column(SQLEnum(LeaveType), nullable=False)
    year = Column(Integer, nullable=False, index=True)
    opening = Column(Numeric(6, 2), nullable=False, default=0)
    accrued = Column(Numeric(6, 2), nullable=False, default=0)
    used = Column(Numeric(6, 2), nullable=False, default=0)
    closing = Column(Numeric(6, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    employee = relationship("Employee", backref="balances")

    __table_args__ = (
        UniqueConstraint("user_id", "leave_type", "year", name="uq_balances_user_type_year"),
    )


class BalanceTransaction(Base):
    """Ledger trail: provisioning, accrual and approval deductions."""
    __tablename__ = "balance_transactions"

    id = Column(Integer, primary_key=True, index=True)
    balance_id = Column(Integer, ForeignKey("balances.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_id = Column(Integer, ForeignKey("leave_requests.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(20), nullable=False)
    delta_days = Column(Numeric(6, 2), nullable=False)
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)

    balance = relationship("Balance", backref="transactions")

    __table_args__ = (
        # A leave is deducted at most once
        UniqueConstraint("leave_id", "action", name="uq_balance_transactions_leave_action"),
    )
