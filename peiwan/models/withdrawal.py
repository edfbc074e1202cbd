import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class WithdrawalStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class WithdrawalDecision(str, Enum):
    approved = "approved"
    rejected = "rejected"


def generate_withdrawal_id() -> str:
    return f"WD{datetime.utcnow():%Y%m%d%H%M%S}{uuid.uuid4().hex[:6].upper()}"


class Withdrawal(SQLModel, table=True):
    __tablename__ = "withdrawals"

    withdrawal_id: str = Field(default_factory=generate_withdrawal_id, primary_key=True, max_length=40)
    beneficiary_id: int = Field(foreign_key="accounts.user_id", index=True)
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    platform_fee: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    final_amount: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    alipay_account: Optional[str] = None
    status: WithdrawalStatus = Field(default=WithdrawalStatus.pending, index=True)
    notes: Optional[str] = None
    processed_by: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    processed_at: Optional[datetime] = None
