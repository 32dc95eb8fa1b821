"""
Approval endpoints for approvers
"""
from typing import Optional

from fastapi import APIRouter, Depends

from leaveflow.api.responses import envelope_response
from leaveflow.core.deps import get_approval_service, get_current_user
from leaveflow.models.employee import Employee
from leaveflow.schemas.leave import BulkApproveRequest, CommentRequest, ReasonRequest
from leaveflow.services.approval_service import ApprovalService

router = APIRouter()


@router.get("/pending")
async def pending_approvals_endpoint(
    current_user: Employee = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    """Leave requests currently waiting on the caller"""
    return envelope_response(service.pending_for(current_user.id))


@router.get("/stats")
async def approver_stats_endpoint(
    current_user: Employee = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    return envelope_response(service.approver_stats(current_user.id))


@router.post("/bulk-approve")
async def bulk_approve_endpoint(
    payload: BulkApproveRequest,
    current_user: Employee = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    """
    Approve several leave requests

    Each request is approved on its own; failures are listed in ``failed_ids``
    and do not undo the successes.
    """
    return envelope_response(service.bulk_approve(payload.leave_ids, current_user.id, payload.comment))


@router.post("/{leave_id}/approve")
async def approve_leave_endpoint(
    leave_id: int,
    payload: Optional[CommentRequest] = None,
    current_user: Employee = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    comment = payload.comment if payload else None
    return envelope_response(service.approve(leave_id, current_user.id, comment))


@router.post("/{leave_id}/reject")
async def reject_leave_endpoint(
    leave_id: int,
    payload: ReasonRequest,
    current_user: Employee = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    return envelope_response(service.reject(leave_id, current_user.id, payload.reason))


@router.post("/{leave_id}/forward")
async def forward_leave_endpoint(
    leave_id: int,
    payload: Optional[CommentRequest] = None,
    current_user: Employee = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    """Hand the request to the holder of the next role in the chain"""
    comment = payload.comment if payload else None
    return envelope_response(service.forward(leave_id, current_user.id, comment))


@router.post("/{leave_id}/return")
async def return_leave_endpoint(
    leave_id: int,
    payload: ReasonRequest,
    current_user: Employee = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
):
    """Send the request back to the employee for changes"""
    return envelope_response(service.return_for_modification(leave_id, current_user.id, payload.reason))
