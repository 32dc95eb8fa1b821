"""
Balance ledger endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from leaveflow.api.responses import envelope_response
from leaveflow.core.deps import get_current_user, get_db, require_roles
from leaveflow.models.employee import Employee, Role
from leaveflow.schemas.balance import BalanceCreate, BalanceOut
from leaveflow.schemas.common import ServiceResult
from leaveflow.services import balance_ledger
from leaveflow.services.audit_service import log_audit
from leaveflow.utils.datetime_utils import today_utc

router = APIRouter()


@router.get("/my")
async def my_balances_endpoint(
    year: Optional[int] = Query(None, description="Calendar year; defaults to the current year"),
    current_user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    year = year or today_utc().year
    rows = balance_ledger.balances_for_user(db, current_user.id, year)
    return envelope_response(ServiceResult.ok([BalanceOut.model_validate(row) for row in rows]))


@router.post("", status_code=status.HTTP_201_CREATED)
async def provision_balance_endpoint(
    payload: BalanceCreate,
    current_user: Employee = Depends(require_roles(Role.HR_ADMIN, Role.HR_HEAD)),
    db: Session = Depends(get_db),
):
    """
    Provision a yearly balance row

    Balances are never created implicitly; approval of a leave whose balance
    row is missing fails with ``balance_not_provisioned``.
    """
    balance = balance_ledger.provision_balance(
        db,
        user_id=payload.user_id,
        leave_type=payload.leave_type,
        year=payload.year,
        opening=payload.opening,
        accrued=payload.accrued,
    )
    db.commit()
    db.refresh(balance)
    log_audit(
        db,
        actor_id=current_user.id,
        action="BALANCE_PROVISIONED",
        entity_type="balance",
        entity_id=balance.id,
        meta=payload.model_dump(),
    )
    return envelope_response(ServiceResult.ok(BalanceOut.model_validate(balance)), status.HTTP_201_CREATED)
