"""
Leave request model
"""
from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    ForeignKey,
    String,
    Text,
    Enum as SQLEnum,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
import enum
from leaveflow.db.base import Base


class LeaveType(str, enum.Enum):
    EARNED = "EARNED"
    CASUAL = "CASUAL"
    MEDICAL = "MEDICAL"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"
    STUDY = "STUDY"
    SPECIAL_DISABILITY = "SPECIAL_DISABILITY"
    QUARANTINE = "QUARANTINE"
    EXTRAWITHPAY = "EXTRAWITHPAY"
    EXTRAWITHOUTPAY = "EXTRAWITHOUTPAY"


class LeaveStatus(str, enum.Enum):
    SUBMITTED = "SUBMITTED"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    RETURNED = "RETURNED"
    CANCELLED = "CANCELLED"


# Types with a yearly balance row in the ledger
BALANCE_LEAVE_TYPES = (LeaveType.EARNED, LeaveType.CASUAL, LeaveType.MEDICAL)

EXTRAORDINARY_LEAVE_TYPES = (LeaveType.EXTRAWITHPAY, LeaveType.EXTRAWITHOUTPAY)

IN_CHAIN_STATUSES = frozenset({LeaveStatus.PENDING, LeaveStatus.SUBMITTED})

TERMINAL_LEAVE_STATUSES = frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED})


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    leave_type = Column(SQLEnum(LeaveType), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    working_days = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)
    status = Column(SQLEnum(LeaveStatus), nullable=False, server_default=text("'PENDING'"))
    certificate_ref = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    requester = relationship("Employee", back_populates="leave_requests")
    approvals = relationship(
        "Approval",
        back_populates="leave_request",
        cascade="all, delete-orphan",
        order_by="Approval.step",
    )

    __table_args__ = (
        Index('ix_leave_requests_requester_dates', 'requester_id', 'start_date', 'end_date'),
        CheckConstraint('start_date <= end_date', name='check_start_date_le_end_date'),
        CheckConstraint('working_days > 0', name='check_working_days_positive'),
    )
