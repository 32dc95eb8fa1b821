"""
Company holiday calendar

Only active rows count as non-working days for leave calculations.
"""
from sqlalchemy import Boolean, Column, Date, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from leaveflow.db.base import Base


class Holiday(Base):
    __tablename__ = "holidays"
    __table_args__ = (
        UniqueConstraint("year", "date", name="uq_holiday_year_date"),
        # Range lookups during validation filter on both columns
        Index("ix_holidays_active_date", "active", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    year = Column(Integer, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)

    def __repr__(self) -> str:
        return f"<Holiday {self.date.isoformat() if self.date else None} {self.name!r}>"
