from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import field_validator
from sqlmodel import Field, SQLModel


class GiftCreate(SQLModel):
    name: str = Field(min_length=1, max_length=50)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = None


class GiftUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "price", "is_active")
    @classmethod
    def reject_explicit_null(cls, value):
        # Omit a field to leave it unchanged; only image_url may be cleared.
        if value is None:
            raise ValueError("must not be null")
        return value


class GiftRead(SQLModel):
    id: int
    name: str
    price: Decimal
    image_url: Optional[str] = None
    is_active: bool


class GiftTipCreate(SQLModel):
    order_id: str
    player_id: int
    gift_id: int
    quantity: int = Field(default=1, ge=1, le=9999)


class GiftRecordRead(SQLModel):
    id: int
    user_id: int
    player_id: int
    order_id: str
    gift_id: int
    quantity: int
    total_price: Decimal
    platform_fee: Decimal
    is_settled: bool
    settled_at: Optional[datetime] = None
    created_at: datetime
