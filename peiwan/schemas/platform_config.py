from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlmodel import Field, SQLModel


class CommissionRateUpdate(SQLModel):
    commission_rate: Decimal = Field(ge=0, le=100, max_digits=5, decimal_places=2)


class CommissionRateRead(CommissionRateUpdate):
    updated_by: Optional[int] = None
    updated_at: datetime
