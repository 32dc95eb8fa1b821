"""
Persistence for leave requests and approval steps

Every mutation that races with other approvers is a conditional UPDATE whose
affected-row count is returned to the caller; zero means the row was no longer
in the expected state.
"""
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from leaveflow.models.approval import Approval, ApprovalDecision, Decision
from leaveflow.models.leave import LeaveRequest, LeaveStatus, LeaveType, IN_CHAIN_STATUSES
from leaveflow.services.leave_state import sources_for
from leaveflow.utils.datetime_utils import now_utc


class LeaveRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        return self.db.query(LeaveRequest).filter(LeaveRequest.id == leave_id).first()

    def create(self, **values) -> LeaveRequest:
        leave = LeaveRequest(**values)
        self.db.add(leave)
        self.db.flush()
        return leave

    def update_status(
        self,
        leave_id: int,
        new_status: LeaveStatus,
        expected: Optional[Iterable[LeaveStatus]] = None,
        **values,
    ) -> int:
        """
        Move a leave to ``new_status`` only if it is currently in one of the
        ``expected`` statuses (defaults to every legal source status).

        Returns:
            Number of rows updated (0 or 1)
        """
        expected = frozenset(expected) if expected is not None else sources_for(new_status)
        values.update(status=new_status, updated_at=now_utc())
        self.db.flush()
        count = (
            self.db.query(LeaveRequest)
            .filter(LeaveRequest.id == leave_id, LeaveRequest.status.in_(list(expected)))
            .update(values, synchronize_session=False)
        )
        self.db.expire_all()
        return count

    def list_for_requester(self, requester_id: int, status: Optional[LeaveStatus] = None) -> List[LeaveRequest]:
        query = self.db.query(LeaveRequest).filter(LeaveRequest.requester_id == requester_id)
        if status is not None:
            query = query.filter(LeaveRequest.status == status)
        return query.order_by(LeaveRequest.start_date.desc(), LeaveRequest.id.desc()).all()

    def pending_days(
        self,
        requester_id: int,
        leave_type: LeaveType,
        exclude_leave_id: Optional[int] = None,
    ) -> float:
        query = self.db.query(func.coalesce(func.sum(LeaveRequest.working_days), 0)).filter(
            LeaveRequest.requester_id == requester_id,
            LeaveRequest.leave_type == leave_type,
            LeaveRequest.status.in_(list(IN_CHAIN_STATUSES)),
        )
        if exclude_leave_id is not None:
            query = query.filter(LeaveRequest.id != exclude_leave_id)
        return float(query.scalar() or 0)


class ApprovalRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, approval_id: int) -> Optional[Approval]:
        return self.db.query(Approval).filter(Approval.id == approval_id).first()

    def create(self, leave_id: int, approver_id: int, step: Optional[int] = None) -> Approval:
        """Open a PENDING step; ``step`` defaults to the next free step number."""
        approval = Approval(
            leave_id=leave_id,
            approver_id=approver_id,
            step=step if step is not None else self.get_next_step(leave_id),
            decision=ApprovalDecision.PENDING,
        )
        self.db.add(approval)
        self.db.flush()
        return approval

    def update_by_leave_and_approver(self, leave_id: int, approver_id: int, decision: Decision) -> int:
        """
        Record ``decision`` on the approver's PENDING row for the leave.

        Returns:
            Number of rows updated; 0 when no PENDING row matched
        """
        columns = decision.to_columns()
        values = {
            Approval.decision: columns["decision"],
            Approval.to_role: columns["to_role"],
            Approval.comment: columns["comment"],
            Approval.decided_at: now_utc(),
        }
        self.db.flush()
        count = (
            self.db.query(Approval)
            .filter(
                Approval.leave_id == leave_id,
                Approval.approver_id == approver_id,
                Approval.decision == ApprovalDecision.PENDING,
            )
            .update(values, synchronize_session=False)
        )
        self.db.expire_all()
        return count

    def close_pending(self, leave_id: int, decision: Decision) -> int:
        """Record ``decision`` on whichever step of the leave is still PENDING."""
        columns = decision.to_columns()
        self.db.flush()
        count = (
            self.db.query(Approval)
            .filter(Approval.leave_id == leave_id, Approval.decision == ApprovalDecision.PENDING)
            .update(
                {
                    Approval.decision: columns["decision"],
                    Approval.to_role: columns["to_role"],
                    Approval.comment: columns["comment"],
                    Approval.decided_at: now_utc(),
                },
                synchronize_session=False,
            )
        )
        self.db.expire_all()
        return count

    def get_next_step(self, leave_id: int) -> int:
        current = self.db.query(func.max(Approval.step)).filter(Approval.leave_id == leave_id).scalar()
        return (current or 0) + 1

    def are_all_approvals_approved(self, leave_id: int) -> bool:
        """True when every step on the leave ended in APPROVED or a hand-off to the next role."""
        decisions = [
            row[0] for row in self.db.query(Approval.decision).filter(Approval.leave_id == leave_id).all()
        ]
        if not decisions:
            return False
        return all(d in (ApprovalDecision.APPROVED, ApprovalDecision.FORWARDED) for d in decisions) and (
            ApprovalDecision.APPROVED in decisions
        )

    def find_pending(self, leave_id: int) -> Optional[Approval]:
        return (
            self.db.query(Approval)
            .filter(Approval.leave_id == leave_id, Approval.decision == ApprovalDecision.PENDING)
            .first()
        )

    def find_pending_for(self, leave_id: int, approver_id: int) -> Optional[Approval]:
        return (
            self.db.query(Approval)
            .filter(
                Approval.leave_id == leave_id,
                Approval.approver_id == approver_id,
                Approval.decision == ApprovalDecision.PENDING,
            )
            .first()
        )

    def has_decided(self, leave_id: int, approver_id: int) -> bool:
        return (
            self.db.query(Approval.id)
            .filter(
                Approval.leave_id == leave_id,
                Approval.approver_id == approver_id,
                Approval.decision != ApprovalDecision.PENDING,
            )
            .first()
            is not None
        )

    def list_for_leave(self, leave_id: int) -> List[Approval]:
        return self.db.query(Approval).filter(Approval.leave_id == leave_id).order_by(Approval.step).all()

    def latest_returned(self, leave_id: int) -> Optional[Approval]:
        return (
            self.db.query(Approval)
            .filter(Approval.leave_id == leave_id, Approval.decision == ApprovalDecision.RETURNED)
            .order_by(Approval.step.desc())
            .first()
        )

    def find_pending_for_approver(self, approver_id: int) -> List[Approval]:
        return (
            self.db.query(Approval)
            .join(LeaveRequest, LeaveRequest.id == Approval.leave_id)
            .filter(
                Approval.approver_id == approver_id,
                Approval.decision == ApprovalDecision.PENDING,
                LeaveRequest.status.in_(list(IN_CHAIN_STATUSES)),
            )
            .order_by(LeaveRequest.start_date, Approval.id)
            .all()
        )

    def get_approver_stats(self, approver_id: int) -> Dict[str, int]:
        rows = (
            self.db.query(Approval.decision, func.count(Approval.id))
            .filter(Approval.approver_id == approver_id)
            .group_by(Approval.decision)
            .all()
        )
        stats = {decision.value.lower(): 0 for decision in ApprovalDecision}
        for decision, count in rows:
            stats[ApprovalDecision(decision).value.lower()] = count
        stats["pending"] = len(self.find_pending_for_approver(approver_id))
        stats["total"] = sum(v for k, v in stats.items() if k != "pending") + stats["pending"]
        return stats
