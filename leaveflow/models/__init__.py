"""
Database models
"""
from leaveflow.models.department import Department
from leaveflow.models.employee import Employee, Role
from leaveflow.models.audit_log import AuditLog
from leaveflow.models.leave import (
    LeaveRequest,
    LeaveType,
    LeaveStatus,
    BALANCE_LEAVE_TYPES,
    EXTRAORDINARY_LEAVE_TYPES,
    IN_CHAIN_STATUSES,
    TERMINAL_LEAVE_STATUSES,
)
from leaveflow.models.approval import (
    Approval,
    ApprovalDecision,
    Approved,
    Rejected,
    ForwardedTo,
    ReturnedToEmployee,
    Decision,
)
from leaveflow.models.balance import Balance, BalanceTransaction, BalanceTransactionAction
from leaveflow.models.holiday import Holiday
from leaveflow.models.notification import Notification

__all__ = [
    "Department",
    "Employee",
    "Role",
    "AuditLog",
    "LeaveRequest",
    "LeaveType",
    "LeaveStatus",
    "BALANCE_LEAVE_TYPES",
    "EXTRAORDINARY_LEAVE_TYPES",
    "IN_CHAIN_STATUSES",
    "TERMINAL_LEAVE_STATUSES",
    "Approval",
    "ApprovalDecision",
    "Approved",
    "Rejected",
    "ForwardedTo",
    "ReturnedToEmployee",
    "Decision",
    "Balance",
    "BalanceTransaction",
    "BalanceTransactionAction",
    "Holiday",
    "Notification",
]
