"""
Dependencies and guards for FastAPI endpoints

Authentication happens upstream; the gateway forwards the authenticated
employee id in the ``X-Employee-Id`` header.
"""
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from leaveflow.core.errors import AuthorizationError, LeaveflowError
from leaveflow.db.session import SessionLocal, get_db
from leaveflow.models.employee import Employee, Role
from leaveflow.services.approval_service import ApprovalService
from leaveflow.services.leave_service import LeaveService
from leaveflow.services.notification_service import InboxNotificationDispatcher, NotificationDispatcher
from leaveflow.services.policy_engine import PolicyEngine


async def get_current_user(
    x_employee_id: str = Header(..., alias="X-Employee-Id"),
    db: Session = Depends(get_db)
) -> Employee:
    """
    Resolve the acting employee from the gateway header
    """
    try:
        employee_id = int(x_employee_id)
    except (ValueError, TypeError):
        raise LeaveflowError("Invalid employee header", code="unauthenticated", status_code=401)

    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if employee is None:
        raise LeaveflowError("Employee not found", code="unauthenticated", status_code=401)
    if not employee.active:
        raise AuthorizationError("Inactive user")
    return employee


def require_roles(*allowed_roles: Role):
    """
    Dependency factory for role-based access control

    Usage:
        @router.post("/balances")
        async def provision(user: Employee = Depends(require_roles(Role.HR_ADMIN))):
            ...
    """
    def role_checker(current_user: Employee = Depends(get_current_user)) -> Employee:
        if current_user.role == Role.SYSTEM_ADMIN.value:
            return current_user
        if current_user.role not in [r.value for r in allowed_roles]:
            raise AuthorizationError(
                f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return current_user
    return role_checker


def get_policy_engine(request: Request) -> PolicyEngine:
    """The engine instance built at startup for the active policy version"""
    return request.app.state.policy_engine


def get_notification_dispatcher() -> NotificationDispatcher:
    return InboxNotificationDispatcher(SessionLocal)


def get_leave_service(
    db: Session = Depends(get_db),
    engine: PolicyEngine = Depends(get_policy_engine),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> LeaveService:
    return LeaveService(db, engine, dispatcher)


def get_approval_service(
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> ApprovalService:
    return ApprovalService(db, dispatcher)
