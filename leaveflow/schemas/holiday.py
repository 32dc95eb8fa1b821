"""
Holiday calendar schemas
"""
from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class HolidayCreate(BaseModel):
    date: date_type
    name: str = Field(..., min_length=1, max_length=255)
    # Calendar year the holiday is filed under; defaults to the date's year
    year: Optional[int] = Field(None, ge=2000, le=2100)
    active: bool = True

    @model_validator(mode="after")
    def default_year(self) -> "HolidayCreate":
        if self.year is None:
            self.year = self.date.year
        return self


class HolidayOut(BaseModel):
    id: int
    year: int
    date: date_type
    name: str
    active: bool

    model_config = ConfigDict(from_attributes=True)
