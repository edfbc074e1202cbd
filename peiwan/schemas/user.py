from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import field_validator
from sqlmodel import Field, SQLModel

from peiwan.models import ActivityType, BalanceChangeType, Role

SELF_REGISTER_ROLES = {Role.customer, Role.player}


class UserCreate(SQLModel):
    username: str = Field(min_length=3, max_length=50)
    password: str
    phone: Optional[str] = None
    display_name: Optional[str] = None
    role: Role = Role.customer

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("Password must contain at least 8 characters")
        return value

    @field_validator("role")
    @classmethod
    def validate_role(cls, value: Role) -> Role:
        if value not in SELF_REGISTER_ROLES:
            raise ValueError("Only customer or player accounts can be self-registered")
        return value


class UserRead(SQLModel):
    id: int
    username: str
    phone: Optional[str] = None
    display_name: Optional[str] = None
    role: Role
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AccountRead(SQLModel):
    user_id: int
    available_balance: Decimal
    total_earnings: Decimal
    total_withdrawals: Decimal
    hourly_rate: Optional[Decimal] = None
    updated_at: datetime


class BalanceLogRead(SQLModel):
    id: int
    change_type: BalanceChangeType
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    reference: Optional[str] = None
    created_at: datetime


class UserActivityRead(SQLModel):
    id: int
    action_type: ActivityType
    title: str
    detail: Optional[str] = None
    reference: Optional[str] = None
    created_at: datetime
