"""
Approval state machine

Drives a leave request through its approval chain. Each approver decision is
a conditional update on that approver's PENDING step; losing the update to a
concurrent caller surfaces as StateConflictError. Whether an approval is the
final one is recomputed from (leave type, requester role) on every call.
"""
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from leaveflow.core.config import settings
from leaveflow.core.errors import (
    ApprovalNotFoundError,
    AuthorizationError,
    NoNextRoleError,
    ReasonRequiredError,
    StateConflictError,
)
from leaveflow.models.approval import Approved, Cancelled, ForwardedTo, Rejected, ReturnedToEmployee
from leaveflow.models.employee import Role
from leaveflow.models.leave import IN_CHAIN_STATUSES, TERMINAL_LEAVE_STATUSES, LeaveRequest, LeaveStatus, LeaveType
from leaveflow.schemas.common import ServiceResult
from leaveflow.schemas.leave import ApprovalOut, BulkApproveResult, LeaveOut
from leaveflow.services.approval_chain import (
    get_next_role_in_chain,
    is_final_approver,
    resolve_approver,
)
from leaveflow.services.balance_ledger import deduct_for_leave
from leaveflow.services.base import LeaveCoreService
from leaveflow.services.leave_state import can_transition
from leaveflow.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


def require_reason(reason: Optional[str], min_length: int = 1, action: str = "this action") -> str:
    """
    Return the stripped justification text.

    Raises:
        ReasonRequiredError: If the text is empty or shorter than ``min_length``
    """
    text = (reason or "").strip()
    if not text or len(text) < min_length:
        raise ReasonRequiredError(
            f"A reason of at least {min_length} character(s) is required for {action}",
            details={"min_length": min_length},
        )
    return text


class ApprovalService(LeaveCoreService):
    def __init__(
        self,
        db: Session,
        dispatcher: Optional[NotificationDispatcher] = None,
        reason_min_length: Optional[int] = None,
    ):
        super().__init__(db, dispatcher)
        self.reason_min_length = reason_min_length if reason_min_length is not None else settings.REASON_MIN_LENGTH

    # Public boundary

    def approve(self, leave_id: int, approver_id: int, comment: Optional[str] = None) -> ServiceResult:
        return self._run("approve", self._approve, leave_id, approver_id, comment)

    def reject(self, leave_id: int, approver_id: int, reason: Optional[str]) -> ServiceResult:
        return self._run("reject", self._reject, leave_id, approver_id, reason)

    def forward(self, leave_id: int, approver_id: int, comment: Optional[str] = None) -> ServiceResult:
        return self._run("forward", self._forward, leave_id, approver_id, comment)

    def return_for_modification(self, leave_id: int, approver_id: int, reason: Optional[str]) -> ServiceResult:
        return self._run("return_for_modification", self._return_for_modification, leave_id, approver_id, reason)

    def cancel(self, leave_id: int, actor_id: int, reason: Optional[str] = None) -> ServiceResult:
        return self._run("cancel", self._cancel, leave_id, actor_id, reason)

    def bulk_approve(self, leave_ids: Iterable[int], approver_id: int, comment: Optional[str] = None) -> ServiceResult:
        """
        Approve each leave independently. Not transactional across the set:
        every success is committed on its own and failures are reported.
        """
        success_count = 0
        failed_ids: List[int] = []
        for leave_id in leave_ids:
            result = self.approve(leave_id, approver_id, comment)
            if result.success:
                success_count += 1
            else:
                failed_ids.append(leave_id)
        logger.info(
            "bulk approve: approver_id=%s success_count=%s failed_ids=%s",
            approver_id, success_count, failed_ids,
        )
        return ServiceResult.ok(BulkApproveResult(success_count=success_count, failed_ids=failed_ids))

    def bulk_cancel(self, leave_ids: Iterable[int], actor_id: int, reason: Optional[str] = None) -> ServiceResult:
        """Cancel each of the actor's leaves independently, like ``bulk_approve``."""
        success_count = 0
        failed_ids: List[int] = []
        for leave_id in leave_ids:
            result = self.cancel(leave_id, actor_id, reason)
            if result.success:
                success_count += 1
            else:
                failed_ids.append(leave_id)
        logger.info(
            "bulk cancel: actor_id=%s success_count=%s failed_ids=%s",
            actor_id, success_count, failed_ids,
        )
        return ServiceResult.ok(BulkApproveResult(success_count=success_count, failed_ids=failed_ids))

    def pending_for(self, approver_id: int) -> ServiceResult:
        return self._run("pending_for", self._pending_for, approver_id)

    def approver_stats(self, approver_id: int) -> ServiceResult:
        return self._run("approver_stats", self.approvals.get_approver_stats, approver_id)

    # Domain operations; these raise and leave rollback to the boundary

    def _load_in_chain(self, leave_id: int, approver_id: int, action: str):
        leave = self._get_leave(leave_id)
        approver = self._get_employee(approver_id)
        if leave.status not in IN_CHAIN_STATUSES:
            raise StateConflictError(
                f"Cannot {action} leave in {LeaveStatus(leave.status).value} status",
                code="invalid_status",
                details={"status": LeaveStatus(leave.status).value},
            )
        pending = self.approvals.find_pending_for(leave_id, approver_id)
        if pending is None:
            if self.approvals.has_decided(leave_id, approver_id):
                raise StateConflictError(
                    "This approver has already acted on the leave request",
                    details={"leave_id": leave_id, "approver_id": approver_id},
                )
            raise ApprovalNotFoundError(
                "No pending approval for this approver",
                details={"leave_id": leave_id, "approver_id": approver_id},
            )
        return leave, approver, pending

    def _record(self, leave_id: int, approver_id: int, decision) -> None:
        if self.approvals.update_by_leave_and_approver(leave_id, approver_id, decision) == 0:
            raise StateConflictError(
                "The approval step was already decided by a concurrent request",
                details={"leave_id": leave_id, "approver_id": approver_id},
            )

    def _transition(self, leave: LeaveRequest, target: LeaveStatus, action: str, expected=None) -> None:
        before = LeaveStatus(leave.status).value
        leave_id = leave.id
        if not can_transition(leave.status, target):
            raise StateConflictError(
                f"Cannot move leave from {before} to {target.value}",
                code="invalid_status",
                details={"leave_id": leave_id, "status": before, "target": target.value},
            )
        if self.leaves.update_status(leave_id, target, expected=expected) == 0:
            raise StateConflictError(
                f"Leave request is no longer {before}",
                details={"leave_id": leave_id, "expected_status": before},
            )
        logger.info(
            "leave status transition: leave_request_id=%s before=%s after=%s action=%s",
            leave_id, before, target.value, action,
        )

    def _approve(self, leave_id: int, approver_id: int, comment: Optional[str]) -> Dict:
        leave, approver, _ = self._load_in_chain(leave_id, approver_id, "approve")
        leave_type = LeaveType(leave.leave_type)
        requester_role = Role(leave.requester.role)
        acting_role = Role(approver.role)

        is_final = is_final_approver(acting_role, leave_type, requester_role)
        next_approver = None
        if not is_final:
            next_role = get_next_role_in_chain(acting_role, leave_type, requester_role)
            if next_role is None:
                raise AuthorizationError(
                    f"{acting_role.value} is not part of the approval chain for this leave",
                    details={"role": acting_role.value},
                )
            next_approver = resolve_approver(self.db, next_role, leave.requester)

        self._record(leave_id, approver_id, Approved(comment))

        if is_final:
            self._transition(leave, LeaveStatus.APPROVED, "approve", expected=IN_CHAIN_STATUSES)
            deduct_for_leave(self.db, self._get_leave(leave_id))
        else:
            next_step = self.approvals.create(leave_id, next_approver.id)
            if LeaveStatus(leave.status) == LeaveStatus.SUBMITTED:
                self._transition(leave, LeaveStatus.PENDING, "approve", expected=[LeaveStatus.SUBMITTED])
            logger.info(
                "approval chain advanced: leave_request_id=%s step=%s approver_id=%s",
                leave_id, next_step.step, next_approver.id,
            )
        self.db.commit()

        self._audit(approver_id, "LEAVE_APPROVED", leave_id, {"comment": comment, "is_final": is_final})
        if is_final:
            self._notify("approved", self.dispatcher.notify_leave_approved, leave_id, approver.name)
        else:
            self._notify("forwarded", self.dispatcher.notify_leave_forwarded, leave_id, next_approver.id, approver.name)
        return {"approved": True, "is_final": is_final}

    def _reject(self, leave_id: int, approver_id: int, reason: Optional[str]) -> Dict:
        text = require_reason(reason, self.reason_min_length, "rejection")
        leave, approver, _ = self._load_in_chain(leave_id, approver_id, "reject")

        self._record(leave_id, approver_id, Rejected(text))
        self._transition(leave, LeaveStatus.REJECTED, "reject", expected=IN_CHAIN_STATUSES)
        self.db.commit()

        self._audit(approver_id, "LEAVE_REJECTED", leave_id, {"reason": text})
        self._notify("rejected", self.dispatcher.notify_leave_rejected, leave_id, approver.name, text)
        return {"rejected": True}

    def _forward(self, leave_id: int, approver_id: int, comment: Optional[str]) -> Dict:
        leave, approver, pending = self._load_in_chain(leave_id, approver_id, "forward")
        next_role = get_next_role_in_chain(
            Role(approver.role), LeaveType(leave.leave_type), Role(leave.requester.role)
        )
        if next_role is None:
            raise NoNextRoleError(
                "No further approver in the chain; approve or reject instead",
                details={"role": Role(approver.role).value},
            )
        next_approver = resolve_approver(self.db, next_role, leave.requester)

        self._record(leave_id, approver_id, ForwardedTo(next_role, comment))
        new_step = self.approvals.create(leave_id, next_approver.id)
        if LeaveStatus(leave.status) == LeaveStatus.SUBMITTED:
            self._transition(leave, LeaveStatus.PENDING, "forward", expected=[LeaveStatus.SUBMITTED])
        self.db.commit()
        logger.info(
            "leave forwarded: leave_request_id=%s from_step=%s to_step=%s to_role=%s approver_id=%s",
            leave_id, pending.step, new_step.step, next_role.value, next_approver.id,
        )

        self._audit(approver_id, "LEAVE_FORWARDED", leave_id, {"to_role": next_role, "comment": comment})
        self._notify("forwarded", self.dispatcher.notify_leave_forwarded, leave_id, next_approver.id, approver.name)
        return {
            "forwarded": True,
            "to_role": next_role.value,
            "new_approver_id": next_approver.id,
            "step": new_step.step,
        }

    def _return_for_modification(self, leave_id: int, approver_id: int, reason: Optional[str]) -> Dict:
        text = require_reason(reason, self.reason_min_length, "returning a request")
        leave, approver, _ = self._load_in_chain(leave_id, approver_id, "return")

        self._record(leave_id, approver_id, ReturnedToEmployee(text))
        self._transition(leave, LeaveStatus.RETURNED, "return", expected=IN_CHAIN_STATUSES)
        self.db.commit()

        self._audit(approver_id, "LEAVE_RETURNED", leave_id, {"reason": text})
        self._notify("returned", self.dispatcher.notify_leave_returned, leave_id, approver.name, text)
        return {"returned": True}

    def _cancel(self, leave_id: int, actor_id: int, reason: Optional[str]) -> Dict:
        leave = self._get_leave(leave_id)
        if leave.requester_id != actor_id:
            raise AuthorizationError(
                "Only the employee who applied can cancel this leave request",
                details={"leave_id": leave_id},
            )
        if leave.status in TERMINAL_LEAVE_STATUSES:
            raise StateConflictError(
                f"Cannot cancel leave in {LeaveStatus(leave.status).value} status",
                code="invalid_status",
                details={"status": LeaveStatus(leave.status).value},
            )

        self._transition(leave, LeaveStatus.CANCELLED, "cancel")
        closed = self.approvals.close_pending(leave_id, Cancelled(reason))
        self.db.commit()
        if closed:
            logger.info("open approval step closed: leave_request_id=%s", leave_id)

        self._audit(actor_id, "LEAVE_CANCELLED", leave_id, {"reason": reason})
        self._notify("cancelled", self.dispatcher.notify_leave_cancelled, leave_id)
        return {"cancelled": True}

    def _pending_for(self, approver_id: int) -> List[Dict]:
        self._get_employee(approver_id)
        items = []
        for approval in self.approvals.find_pending_for_approver(approver_id):
            items.append({
                "approval": ApprovalOut.model_validate(approval),
                "leave": LeaveOut.model_validate(approval.leave_request),
            })
        return items

