"""
Service boundary shared by the leave and approval services

Public operations return a ServiceResult. Domain errors become failed
results, database integrity races become state conflicts, and anything else
is logged and reported as ``internal_error``. Side effects that run after a
commit (audit entries, notifications) are best-effort.
"""
import logging
from typing import Any, Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from leaveflow.core.errors import (
    EmployeeNotFoundError,
    LeaveflowError,
    LeaveNotFoundError,
    StateConflictError,
)
from leaveflow.models.employee import Employee
from leaveflow.models.leave import LeaveRequest
from leaveflow.schemas.common import ServiceResult
from leaveflow.services.audit_service import log_audit
from leaveflow.services.notification_service import NotificationDispatcher
from leaveflow.services.repositories import ApprovalRepository, LeaveRepository

logger = logging.getLogger(__name__)


class LeaveCoreService:
    def __init__(self, db: Session, dispatcher: Optional[NotificationDispatcher] = None):
        self.db = db
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.leaves = LeaveRepository(db)
        self.approvals = ApprovalRepository(db)

    def _run(self, operation: str, fn: Callable[..., Any], *args, **kwargs) -> ServiceResult:
        try:
            return ServiceResult.ok(fn(*args, **kwargs))
        except LeaveflowError as exc:
            self.db.rollback()
            logger.info("%s failed: code=%s message=%s", operation, exc.code, exc.message)
            return ServiceResult.fail(exc)
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("%s lost a concurrent update: %s", operation, exc.orig)
            return ServiceResult.fail(StateConflictError("The request was modified concurrently; reload and retry"))
        except Exception:
            self.db.rollback()
            logger.exception("%s failed with an unexpected error", operation)
            return ServiceResult.internal_error()

    def _notify(self, event: str, send: Callable[..., None], *args) -> None:
        try:
            send(*args)
        except Exception:
            logger.exception("notification dispatch failed: event=%s args=%s", event, args)

    def _audit(self, actor_id: int, action: str, leave_id: int, meta: Optional[dict] = None) -> None:
        log_audit(self.db, actor_id=actor_id, action=action, entity_type="leave_request", entity_id=leave_id, meta=meta)

    def _get_leave(self, leave_id: int) -> LeaveRequest:
        leave = self.leaves.find_by_id(leave_id)
        if leave is None:
            raise LeaveNotFoundError("Leave request not found", details={"leave_id": leave_id})
        return leave

    def _get_employee(self, employee_id: int) -> Employee:
        employee = self.db.query(Employee).filter(Employee.id == employee_id).first()
        if employee is None:
            raise EmployeeNotFoundError("Employee not found", details={"employee_id": employee_id})
        return employee
