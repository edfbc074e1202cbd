from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlmodel import Field, SQLModel


class AttendanceRead(SQLModel):
    id: int
    user_id: int
    work_date: date
    clock_in_at: datetime
    clock_out_at: Optional[datetime] = None
    work_hours: Decimal
    hourly_rate: Decimal
    earnings: Decimal


class HourlyRateUpdate(SQLModel):
    hourly_rate: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
