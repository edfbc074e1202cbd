from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlmodel import Field, SQLModel

DEFAULT_SCOPE = "default"


class PlatformConfig(SQLModel, table=True):
    __tablename__ = "platform_configs"

    id: Optional[int] = Field(default=None, primary_key=True)
    # One row per scope; the unique constraint keeps "the" config unambiguous.
    scope: str = Field(default=DEFAULT_SCOPE, index=True, sa_column_kwargs={"unique": True})
    commission_rate: Decimal = Field(default=Decimal("10.00"), ge=0, le=100, max_digits=5, decimal_places=2)
    updated_by: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
