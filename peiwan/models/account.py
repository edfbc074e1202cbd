from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlmodel import Field, Relationship, SQLModel


class Account(SQLModel, table=True):
    """Balance sheet of a player or customer-service user, keyed by user id."""

    __tablename__ = "accounts"

    user_id: int = Field(foreign_key="users.id", primary_key=True)
    available_balance: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    total_earnings: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    total_withdrawals: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    # Customer service only; None falls back to settings.default_hourly_rate.
    hourly_rate: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    user: "User" = Relationship(back_populates="account")


class BalanceChangeType(str, Enum):
    gift_settlement = "gift_settlement"
    withdrawal = "withdrawal"
    attendance_earning = "attendance_earning"


class BalanceLog(SQLModel, table=True):
    __tablename__ = "balance_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="accounts.user_id", index=True)
    change_type: BalanceChangeType = Field(index=True)
    # Signed: credits are positive, withdrawals negative.
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    balance_before: Decimal = Field(max_digits=10, decimal_places=2)
    balance_after: Decimal = Field(max_digits=10, decimal_places=2)
    reference: Optional[str] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
