"""
Holiday calendar service
"""
import logging
from datetime import date
from typing import FrozenSet, List, Optional

from sqlalchemy.orm import Session

from leaveflow.core.errors import LeaveflowError, StateConflictError
from leaveflow.models.holiday import Holiday
from leaveflow.services.audit_service import log_audit

logger = logging.getLogger(__name__)


def create_holiday(
    db: Session,
    year: int,
    holiday_date: date,
    name: str,
    active: bool = True,
    actor_id: Optional[int] = None
) -> Holiday:
    """
    Create a new holiday

    Args:
        db: Database session
        year: Calendar year
        holiday_date: Holiday date
        name: Holiday name
        active: Whether holiday is active
        actor_id: ID of user creating the holiday

    Returns:
        Created Holiday instance

    Raises:
        LeaveflowError: If the date falls outside ``year``
        StateConflictError: If a holiday already exists on that date
    """
    if holiday_date.year != year:
        raise LeaveflowError(
            f"Date {holiday_date} does not fall within year {year}",
            code="invalid_holiday",
        )

    existing = db.query(Holiday).filter(
        Holiday.year == year,
        Holiday.date == holiday_date
    ).first()
    if existing:
        raise StateConflictError(
            f"Holiday already exists for date {holiday_date} in year {year}",
            code="holiday_exists",
        )

    holiday = Holiday(year=year, date=holiday_date, name=name, active=active)
    db.add(holiday)
    db.commit()
    db.refresh(holiday)
    logger.info("holiday created: id=%s date=%s name=%s", holiday.id, holiday_date, name)

    if actor_id is not None:
        log_audit(
            db,
            actor_id=actor_id,
            action="CREATE",
            entity_type="holiday",
            entity_id=holiday.id,
            meta={"year": year, "date": holiday_date, "name": name, "active": active},
        )
    return holiday


def list_holidays(db: Session, year: Optional[int] = None, active_only: bool = False) -> List[Holiday]:
    query = db.query(Holiday)
    if year is not None:
        query = query.filter(Holiday.year == year)
    if active_only:
        query = query.filter(Holiday.active == True)  # noqa: E712
    return query.order_by(Holiday.date).all()


def get_holiday_dates(db: Session, start_date: date, end_date: date) -> FrozenSet[date]:
    """Active holiday dates within [start_date, end_date]."""
    if start_date > end_date:
        return frozenset()
    rows = db.query(Holiday.date).filter(
        Holiday.active == True,  # noqa: E712
        Holiday.date >= start_date,
        Holiday.date <= end_date,
    ).all()
    return frozenset(row[0] for row in rows)
