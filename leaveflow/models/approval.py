"""
Approval step model and the decision variants written to it
"""
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import (
    Column,
    Integer,
    DateTime,
    ForeignKey,
    String,
    Text,
    Enum as SQLEnum,
    UniqueConstraint,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
import enum
from leaveflow.db.base import Base
from leaveflow.models.employee import Role


class ApprovalDecision(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    FORWARDED = "FORWARDED"
    RETURNED = "RETURNED"
    CANCELLED = "CANCELLED"


class Approval(Base):
    """One row per chain step per leave; steps are 1-based and gap-free."""
    __tablename__ = "approvals"

    id = Column(Integer, primary_key=True, index=True)
    leave_id = Column(Integer, ForeignKey("leave_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    approver_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    step = Column(Integer, nullable=False)
    decision = Column(SQLEnum(ApprovalDecision), nullable=False, server_default=text("'PENDING'"))
    to_role = Column(String(32), nullable=True)
    comment = Column(Text, nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)

    leave_request = relationship("LeaveRequest", back_populates="approvals")
    approver = relationship("Employee", foreign_keys=[approver_id])

    __table_args__ = (
        UniqueConstraint("leave_id", "step", name="uq_approvals_leave_step"),
        CheckConstraint("step >= 1", name="check_approval_step_positive"),
        CheckConstraint(
            "(decision = 'FORWARDED' AND to_role IS NOT NULL) OR (decision != 'FORWARDED' AND to_role IS NULL)",
            name="check_to_role_only_when_forwarded",
        ),
        Index(
            "uq_approvals_one_pending_per_leave",
            "leave_id",
            unique=True,
            sqlite_where=text("decision = 'PENDING'"),
            postgresql_where=text("decision = 'PENDING'"),
        ),
    )


@dataclass(frozen=True)
class Approved:
    comment: Optional[str] = None

    def to_columns(self) -> dict:
        return {"decision": ApprovalDecision.APPROVED, "to_role": None, "comment": self.comment}


@dataclass(frozen=True)
class Rejected:
    reason: str

    def to_columns(self) -> dict:
        return {"decision": ApprovalDecision.REJECTED, "to_role": None, "comment": self.reason}


@dataclass(frozen=True)
class ForwardedTo:
    role: Role
    comment: Optional[str] = None

    def to_columns(self) -> dict:
        return {"decision": ApprovalDecision.FORWARDED, "to_role": Role(self.role).value, "comment": self.comment}


@dataclass(frozen=True)
class ReturnedToEmployee:
    reason: str

    def to_columns(self) -> dict:
        return {"decision": ApprovalDecision.RETURNED, "to_role": None, "comment": self.reason}


@dataclass(frozen=True)
class Cancelled:
    """Closes a step left open when the requester cancels."""
    reason: Optional[str] = None

    def to_columns(self) -> dict:
        return {"decision": ApprovalDecision.CANCELLED, "to_role": None, "comment": self.reason}


Decision = Union[Approved, Rejected, ForwardedTo, ReturnedToEmployee, Cancelled]


def decision_of(approval: Approval) -> Optional[Decision]:
    """Read a decided row back as its variant; None while the row is PENDING."""
    decision = ApprovalDecision(approval.decision)
    if decision == ApprovalDecision.APPROVED:
        return Approved(approval.comment)
    if decision == ApprovalDecision.REJECTED:
        return Rejected(approval.comment or "")
    if decision == ApprovalDecision.FORWARDED:
        return ForwardedTo(Role(approval.to_role), approval.comment)
    if decision == ApprovalDecision.RETURNED:
        return ReturnedToEmployee(approval.comment or "")
    if decision == ApprovalDecision.CANCELLED:
        return Cancelled(approval.comment)
    return None
