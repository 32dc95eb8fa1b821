"""
Holiday calendar endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from leaveflow.api.responses import envelope_response
from leaveflow.core.deps import get_db, require_roles
from leaveflow.models.employee import Employee, Role
from leaveflow.schemas.common import ServiceResult
from leaveflow.schemas.holiday import HolidayCreate, HolidayOut
from leaveflow.services.holiday_service import create_holiday, list_holidays

router = APIRouter()


@router.get("")
async def list_holidays_endpoint(
    year: Optional[int] = Query(None),
    active_only: bool = Query(False),
    db: Session = Depends(get_db),
):
    holidays = list_holidays(db, year=year, active_only=active_only)
    return envelope_response(ServiceResult.ok([HolidayOut.model_validate(h) for h in holidays]))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_holiday_endpoint(
    payload: HolidayCreate,
    current_user: Employee = Depends(require_roles(Role.HR_ADMIN, Role.HR_HEAD)),
    db: Session = Depends(get_db),
):
    holiday = create_holiday(
        db,
        year=payload.year,
        holiday_date=payload.date,
        name=payload.name,
        active=payload.active,
        actor_id=current_user.id,
    )
    return envelope_response(ServiceResult.ok(HolidayOut.model_validate(holiday)), status.HTTP_201_CREATED)
