import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


class OrderStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    pending_review = "pending_review"
    completed = "completed"
    rejected = "rejected"
    cancelled = "cancelled"


REVIEWABLE_ORDER_STATUSES = frozenset({OrderStatus.pending_review})
# Gifts tipped on these orders could never be settled.
CLOSED_ORDER_STATUSES = frozenset({OrderStatus.rejected, OrderStatus.cancelled})


def generate_order_id() -> str:
    return f"ORD{datetime.utcnow():%Y%m%d%H%M%S}{uuid.uuid4().hex[:6].upper()}"


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    order_id: str = Field(default_factory=generate_order_id, primary_key=True, max_length=40)
    user_id: int = Field(foreign_key="users.id", index=True)
    player_id: int = Field(foreign_key="users.id", index=True)
    amount: Decimal = Field(default=Decimal("0.00"), ge=0, max_digits=10, decimal_places=2)
    note: Optional[str] = None
    status: OrderStatus = Field(default=OrderStatus.pending, index=True)
    reviewed_by: Optional[int] = Field(default=None, foreign_key="users.id")
    reviewed_at: Optional[datetime] = None
    review_reason: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    gift_records: List["GiftRecord"] = Relationship(back_populates="order")

    @property
    def is_completed(self) -> bool:
        return self.status == OrderStatus.completed
