from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class AttendanceRecord(SQLModel, table=True):
    """One working day of a customer-service user, from clock-in to clock-out."""

    __tablename__ = "attendance_records"
    __table_args__ = (UniqueConstraint("user_id", "work_date", name="uq_attendance_user_day"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    work_date: date = Field(index=True)
    clock_in_at: datetime
    clock_out_at: Optional[datetime] = None
    work_hours: Decimal = Field(default=Decimal("0.00"), max_digits=6, decimal_places=2)
    hourly_rate: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    earnings: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_open(self) -> bool:
        return self.clock_out_at is None
