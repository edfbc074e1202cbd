from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlmodel import Field, SQLModel

from peiwan.models import OrderStatus


class OrderCreate(SQLModel):
    player_id: int
    amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    note: Optional[str] = Field(default=None, max_length=500)


class OrderReject(SQLModel):
    reason: str = Field(min_length=1, max_length=500)


class OrderRead(SQLModel):
    order_id: str
    user_id: int
    player_id: int
    amount: Decimal
    note: Optional[str] = None
    status: OrderStatus
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrderReviewRead(SQLModel):
    order: OrderRead
    settled_gift_count: int
    total_player_earning: Decimal
