"""
Leave request endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from leaveflow.api.responses import envelope_response
from leaveflow.core.deps import get_approval_service, get_current_user, get_leave_service
from leaveflow.models.employee import Employee
from leaveflow.models.leave import LeaveStatus
from leaveflow.schemas.leave import BulkCancelRequest, CancelRequest, LeaveApplyRequest, LeaveResubmitRequest
from leaveflow.services.approval_service import ApprovalService
from leaveflow.services.leave_service import LeaveService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_leave_endpoint(
    payload: LeaveApplyRequest,
    current_user: Employee = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    """
    Apply for leave

    The request is checked against every applicable policy rule. Blocking
    violations return ``policy_violation`` with the violations, warnings and
    ranked suggestions; nothing is stored in that case.
    """
    return envelope_response(service.submit(current_user.id, payload), status.HTTP_201_CREATED)


@router.post("/validate")
async def validate_leave_endpoint(
    payload: LeaveApplyRequest,
    current_user: Employee = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    """Dry-run validation of a leave request without saving it"""
    return envelope_response(service.validate_preview(current_user.id, payload))


@router.post("/bulk-cancel")
async def bulk_cancel_endpoint(
    payload: BulkCancelRequest,
    current_user: Employee = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    """
    Cancel several of your own leave requests

    Each id is cancelled on its own; ids that could not be cancelled are
    listed in ``failed_ids``.
    """
    return envelope_response(service.bulk_cancel(payload.leave_ids, current_user.id, payload.reason))


@router.get("/my")
async def list_my_leaves_endpoint(
    status_filter: Optional[LeaveStatus] = Query(None, alias="status"),
    current_user: Employee = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    return envelope_response(service.list_mine(current_user.id, status_filter))


@router.get("/{leave_id}")
async def get_leave_endpoint(
    leave_id: int,
    current_user: Employee = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    """Leave request with its approval steps and approver chain"""
    return envelope_response(service.get_detail(leave_id, current_user.id))


@router.post("/{leave_id}/resubmit")
async def resubmit_leave_endpoint(
    leave_id: int,
    payload: LeaveResubmitRequest,
    current_user: Employee = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    """Edit and resubmit a leave returned for modification"""
    return envelope_response(service.resubmit(leave_id, current_user.id, payload))


@router.post("/{leave_id}/cancel")
async def cancel_leave_endpoint(
    leave_id: int,
    payload: Optional[CancelRequest] = None,
    current_user: Employee = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    """Cancel one of your own leave requests that has not reached a final state"""
    reason = payload.reason if payload else None
    return envelope_response(service.cancel(leave_id, current_user.id, reason))
