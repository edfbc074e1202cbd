from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import model_validator
from sqlmodel import Field, SQLModel

from peiwan.models import WithdrawalDecision, WithdrawalStatus


class WithdrawalCreate(SQLModel):
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    alipay_account: Optional[str] = Field(default=None, max_length=100)


class WithdrawalProcess(SQLModel):
    status: WithdrawalDecision
    notes: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def require_notes_when_rejecting(self) -> "WithdrawalProcess":
        if self.status == WithdrawalDecision.rejected and not (self.notes or "").strip():
            raise ValueError("notes are required when rejecting a withdrawal")
        return self


class WithdrawalRead(SQLModel):
    withdrawal_id: str
    beneficiary_id: int
    amount: Decimal
    platform_fee: Decimal
    final_amount: Decimal
    alipay_account: Optional[str] = None
    status: WithdrawalStatus
    notes: Optional[str] = None
    processed_by: Optional[int] = None
    created_at: datetime
    processed_at: Optional[datetime] = None


class WithdrawalPage(SQLModel):
    total: int
    page: int
    page_size: int
    withdrawals: list[WithdrawalRead] = Field(default_factory=list)
