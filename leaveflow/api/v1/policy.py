"""
Policy introspection endpoints
"""
from fastapi import APIRouter, Depends, Query

from leaveflow.api.responses import envelope_response
from leaveflow.core.deps import get_current_user, get_leave_service, get_policy_engine
from leaveflow.models.employee import Employee, Role
from leaveflow.models.leave import LeaveType
from leaveflow.schemas.common import ServiceResult
from leaveflow.schemas.leave import LeaveApplyRequest
from leaveflow.services.approval_chain import get_chain_for
from leaveflow.services.leave_service import LeaveService
from leaveflow.services.policy_engine import PolicyEngine, describe_rules

router = APIRouter()


@router.get("/rules")
async def list_rules_endpoint(engine: PolicyEngine = Depends(get_policy_engine)):
    """Rule catalogue in evaluation order"""
    return envelope_response(ServiceResult.ok(describe_rules(engine.rules)))


@router.get("/chain")
async def approval_chain_endpoint(
    leave_type: LeaveType = Query(...),
    requester_role: Role = Query(...),
):
    chain = get_chain_for(leave_type, requester_role)
    return envelope_response(ServiceResult.ok({
        "leave_type": leave_type.value,
        "requester_role": requester_role.value,
        "chain": [role.value for role in chain],
    }))


@router.post("/explain")
async def explain_rules_endpoint(
    payload: LeaveApplyRequest,
    current_user: Employee = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    """Explain how each applicable rule judges the given request"""
    return envelope_response(service.explain(current_user.id, payload))
