"""
Balance schemas
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from leaveflow.models.leave import LeaveType


class BalanceCreate(BaseModel):
    user_id: int
    leave_type: LeaveType
    year: int = Field(..., ge=2000, le=2100)
    opening: float = Field(..., ge=0)
    accrued: float = Field(0, ge=0)


class BalanceOut(BaseModel):
    id: int
    user_id: int
    leave_type: LeaveType
    year: int
    opening: float
    accrued: float
    used: float
    closing: float
    available: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="after")
    def compute_available(self) -> "BalanceOut":
        if self.available is None:
            self.available = self.opening + self.accrued - self.used
        return self

    @field_serializer("opening", "accrued", "used", "closing", "available")
    def _ser_days(self, value: Optional[float]) -> Optional[float]:
        return round(value, 2) if value is not None else None
