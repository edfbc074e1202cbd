from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from sqlmodel import Field, Relationship, SQLModel


@dataclass(frozen=True)
class Unsettled:
    order_id: str


@dataclass(frozen=True)
class Settled:
    amount: Decimal
    settled_at: Optional[datetime]


GiftSettlementState = Union[Unsettled, Settled]


class GiftRecord(SQLModel, table=True):
    __tablename__ = "gift_records"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    player_id: int = Field(foreign_key="users.id", index=True)
    order_id: str = Field(foreign_key="orders.order_id", index=True, max_length=40)
    gift_id: int = Field(foreign_key="gifts.id", index=True)
    quantity: int = Field(ge=1)
    total_price: Decimal = Field(max_digits=10, decimal_places=2)
    platform_fee: Decimal = Field(max_digits=10, decimal_places=2)
    is_settled: bool = Field(default=False, index=True)
    settled_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)

    order: "Order" = Relationship(back_populates="gift_records")
    gift: "Gift" = Relationship()

    @property
    def player_earning(self) -> Decimal:
        return self.total_price - self.platform_fee

    @property
    def settlement(self) -> GiftSettlementState:
        if self.is_settled:
            return Settled(amount=self.player_earning, settled_at=self.settled_at)
        return Unsettled(order_id=self.order_id)
