"""
Leave service - submission, resubmission and read access for leave requests
"""
import logging
from datetime import date
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from leaveflow.core.errors import AuthorizationError, StateConflictError, ValidationError
from leaveflow.models.employee import Employee, Role
from leaveflow.models.leave import BALANCE_LEAVE_TYPES, LeaveRequest, LeaveStatus, LeaveType
from leaveflow.schemas.common import ServiceResult
from leaveflow.schemas.leave import ApprovalOut, LeaveApplyRequest, LeaveDetailOut, LeaveOut, LeaveResubmitRequest
from leaveflow.services import balance_ledger
from leaveflow.services.approval_chain import get_chain_for, get_first_role, resolve_approver
from leaveflow.services.base import LeaveCoreService
from leaveflow.services.holiday_service import get_holiday_dates
from leaveflow.services.notification_service import NotificationDispatcher
from leaveflow.services.policy_engine import (
    LeaveRecord,
    PolicyEngine,
    RequesterProfile,
    ValidationContext,
    ValidationResult,
)
from leaveflow.services.working_days import count_working_days, shift_days
from leaveflow.utils.datetime_utils import today_utc

logger = logging.getLogger(__name__)

# Holiday lookups extend past the requested range so adjacency rules can see
# the days around it
HOLIDAY_LOOKAROUND_DAYS = 31


def build_validation_context(
    db: Session,
    requester: Employee,
    leave_type: LeaveType,
    start_date: Optional[date],
    end_date: Optional[date],
    current_date: date,
    weekend_days=(5, 6),
    reason: Optional[str] = None,
    certificate_ref: Optional[str] = None,
    exclude_leave_id: Optional[int] = None,
) -> ValidationContext:
    """
    Gather everything the rule engine reads for one candidate request.

    Args:
        db: Database session
        requester: Employee applying
        leave_type: Requested leave type
        start_date: First day (may be missing; the engine reports it)
        end_date: Last day (may be missing)
        current_date: The date the request is judged against
        weekend_days: Weekday numbers treated as weekend
        reason: Free-text reason
        certificate_ref: Certificate reference, if attached
        exclude_leave_id: Leave being edited; left out of overlap and pending sums

    Returns:
        A frozen ValidationContext
    """
    leave_type = LeaveType(leave_type)
    holidays = frozenset()
    working_days = 0
    if start_date is not None and end_date is not None:
        window_start = shift_days(min(start_date, end_date), -HOLIDAY_LOOKAROUND_DAYS)
        window_end = shift_days(max(start_date, end_date), HOLIDAY_LOOKAROUND_DAYS)
        holidays = get_holiday_dates(db, window_start, window_end)
        working_days = count_working_days(start_date, end_date, holidays, weekend_days)

    year = start_date.year if start_date is not None else current_date.year
    snapshots = [balance_ledger.snapshot(b) for b in balance_ledger.balances_for_user(db, requester.id, year)]
    balance = next((s for s in snapshots if s.leave_type == leave_type), None)
    other_balances = tuple(s for s in snapshots if s.leave_type != leave_type)

    pending = 0.0
    if leave_type in BALANCE_LEAVE_TYPES:
        pending = balance_ledger.pending_days(db, requester.id, leave_type, exclude_leave_id)

    history_query = db.query(LeaveRequest).filter(LeaveRequest.requester_id == requester.id)
    if exclude_leave_id is not None:
        history_query = history_query.filter(LeaveRequest.id != exclude_leave_id)
    history = tuple(
        LeaveRecord(
            id=leave.id,
            leave_type=LeaveType(leave.leave_type),
            start_date=leave.start_date,
            end_date=leave.end_date,
            status=LeaveStatus(leave.status),
            working_days=leave.working_days,
        )
        for leave in history_query.order_by(LeaveRequest.id).all()
    )

    return ValidationContext(
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        working_days=working_days,
        current_date=current_date,
        requester=RequesterProfile(
            id=requester.id,
            role=Role(requester.role).value,
            join_date=requester.join_date,
            retirement_date=requester.retirement_date,
        ),
        reason=reason,
        has_certificate=bool(certificate_ref and certificate_ref.strip()),
        balance=balance,
        other_balances=other_balances,
        pending_days=pending,
        holidays=holidays,
        existing_leaves=history,
        weekend_days=tuple(weekend_days),
    )


def raise_for_violations(result: ValidationResult) -> None:
    if not result.is_valid:
        raise ValidationError(
            "Leave request violates policy: " + ", ".join(result.violation_codes),
            details=result.to_dict(),
        )


class LeaveService(LeaveCoreService):
    def __init__(
        self,
        db: Session,
        engine: PolicyEngine,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Callable[[], date] = today_utc,
    ):
        super().__init__(db, dispatcher)
        self.engine = engine
        self.clock = clock

    def submit(self, requester_id: int, payload: LeaveApplyRequest) -> ServiceResult:
        return self._run("submit", self._submit, requester_id, payload)

    def validate_preview(self, requester_id: int, payload: LeaveApplyRequest) -> ServiceResult:
        return self._run("validate_preview", self._validate_preview, requester_id, payload)

    def explain(self, requester_id: int, payload: LeaveApplyRequest) -> ServiceResult:
        return self._run("explain", self._explain, requester_id, payload)

    def resubmit(self, leave_id: int, requester_id: int, changes: LeaveResubmitRequest) -> ServiceResult:
        return self._run("resubmit", self._resubmit, leave_id, requester_id, changes)

    def get_detail(self, leave_id: int, viewer_id: int) -> ServiceResult:
        return self._run("get_detail", self._get_detail, leave_id, viewer_id)

    def list_mine(self, requester_id: int, status: Optional[LeaveStatus] = None) -> ServiceResult:
        return self._run("list_mine", self._list_mine, requester_id, status)

    def _context(self, requester: Employee, leave_type, start_date, end_date, reason=None,
                 certificate_ref=None, exclude_leave_id=None) -> ValidationContext:
        return build_validation_context(
            self.db,
            requester,
            leave_type,
            start_date,
            end_date,
            current_date=self.clock(),
            weekend_days=self.engine.policy.weekend_days,
            reason=reason,
            certificate_ref=certificate_ref,
            exclude_leave_id=exclude_leave_id,
        )

    def _validate_preview(self, requester_id: int, payload: LeaveApplyRequest) -> Dict:
        requester = self._get_employee(requester_id)
        context = self._context(
            requester, payload.leave_type, payload.start_date, payload.end_date,
            payload.reason, payload.certificate_ref,
        )
        result = self.engine.validate(context)
        return {"working_days": context.working_days, **result.to_dict()}

    def _explain(self, requester_id: int, payload: LeaveApplyRequest) -> List[Dict]:
        requester = self._get_employee(requester_id)
        context = self._context(
            requester, payload.leave_type, payload.start_date, payload.end_date,
            payload.reason, payload.certificate_ref,
        )
        return self.engine.explain(context)

    def _submit(self, requester_id: int, payload: LeaveApplyRequest) -> Dict:
        requester = self._get_employee(requester_id)
        if not requester.active:
            raise AuthorizationError("Inactive employees cannot apply for leave")

        context = self._context(
            requester, payload.leave_type, payload.start_date, payload.end_date,
            payload.reason, payload.certificate_ref,
        )
        result = self.engine.validate(context)
        raise_for_violations(result)

        first_role = get_first_role(payload.leave_type, Role(requester.role))
        approver = resolve_approver(self.db, first_role, requester)

        leave = self.leaves.create(
            requester_id=requester.id,
            leave_type=payload.leave_type,
            start_date=payload.start_date,
            end_date=payload.end_date,
            working_days=context.working_days,
            reason=payload.reason,
            certificate_ref=payload.certificate_ref,
            status=LeaveStatus.PENDING,
        )
        self.approvals.create(leave.id, approver.id, step=1)
        self.db.commit()
        self.db.refresh(leave)
        logger.info(
            "leave status transition: leave_request_id=%s before=%s after=%s action=submit",
            leave.id, None, LeaveStatus.PENDING.value,
        )

        self._audit(requester.id, "LEAVE_SUBMITTED", leave.id, {
            "leave_type": payload.leave_type,
            "start_date": payload.start_date,
            "end_date": payload.end_date,
            "working_days": context.working_days,
            "warnings": result.warning_codes,
        })
        self._notify("submitted", self.dispatcher.notify_leave_submitted, leave.id, requester.id)
        return {
            "leave": LeaveOut.model_validate(leave),
            "approver_id": approver.id,
            "approver_role": first_role.value,
            "warnings": result.to_dict()["warnings"],
            "suggestions": result.to_dict()["suggestions"],
        }

    def _resubmit(self, leave_id: int, requester_id: int, changes: LeaveResubmitRequest) -> Dict:
        leave = self._get_leave(leave_id)
        if leave.requester_id != requester_id:
            raise AuthorizationError(
                "Only the employee who applied can resubmit this leave request",
                details={"leave_id": leave_id},
            )
        if LeaveStatus(leave.status) != LeaveStatus.RETURNED:
            raise StateConflictError(
                f"Only returned requests can be resubmitted (status is {LeaveStatus(leave.status).value})",
                code="invalid_status",
                details={"status": LeaveStatus(leave.status).value},
            )

        start_date = changes.start_date or leave.start_date
        end_date = changes.end_date or leave.end_date
        reason = changes.reason if changes.reason is not None else leave.reason
        certificate_ref = changes.certificate_ref if changes.certificate_ref is not None else leave.certificate_ref

        requester = leave.requester
        context = self._context(
            requester, leave.leave_type, start_date, end_date, reason, certificate_ref,
            exclude_leave_id=leave.id,
        )
        result = self.engine.validate(context)
        raise_for_violations(result)

        returned = self.approvals.latest_returned(leave.id)
        if returned is None:
            raise StateConflictError("Returned leave has no returning approval step", details={"leave_id": leave_id})

        updated = self.leaves.update_status(
            leave.id,
            LeaveStatus.PENDING,
            expected=[LeaveStatus.RETURNED],
            start_date=start_date,
            end_date=end_date,
            working_days=context.working_days,
            reason=reason,
            certificate_ref=certificate_ref,
        )
        if updated == 0:
            raise StateConflictError("Leave request is no longer RETURNED", details={"leave_id": leave_id})
        step = self.approvals.create(leave.id, returned.approver_id)
        self.db.commit()
        logger.info(
            "leave status transition: leave_request_id=%s before=%s after=%s action=resubmit step=%s",
            leave.id, LeaveStatus.RETURNED.value, LeaveStatus.PENDING.value, step.step,
        )

        self._audit(requester_id, "LEAVE_RESUBMITTED", leave.id, {
            "start_date": start_date,
            "end_date": end_date,
            "working_days": context.working_days,
        })
        self._notify("submitted", self.dispatcher.notify_leave_submitted, leave.id, requester_id)
        return {"leave": LeaveOut.model_validate(self._get_leave(leave.id)), "approver_id": returned.approver_id}

    def _get_detail(self, leave_id: int, viewer_id: int) -> LeaveDetailOut:
        leave = self._get_leave(leave_id)
        approvals = self.approvals.list_for_leave(leave_id)
        viewer = self._get_employee(viewer_id)
        involved = {leave.requester_id, *(a.approver_id for a in approvals)}
        if viewer.id not in involved and Role(viewer.role) not in (Role.HR_ADMIN, Role.HR_HEAD, Role.SYSTEM_ADMIN):
            raise AuthorizationError("Not allowed to view this leave request", details={"leave_id": leave_id})
        detail = LeaveDetailOut.model_validate(leave)
        detail.approvals = [ApprovalOut.model_validate(a) for a in approvals]
        detail.chain = [role.value for role in get_chain_for(leave.leave_type, Role(leave.requester.role))]
        return detail

    def _list_mine(self, requester_id: int, status: Optional[LeaveStatus]) -> List[LeaveOut]:
        self._get_employee(requester_id)
        return [LeaveOut.model_validate(leave) for leave in self.leaves.list_for_requester(requester_id, status)]
