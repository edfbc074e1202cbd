from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


class Role(str, Enum):
    customer = "customer"
    player = "player"
    customer_service = "customer_service"
    admin = "admin"


# Roles that own an account and may be paid out.
EARNING_ROLES = frozenset({Role.player, Role.customer_service})
STAFF_ROLES = frozenset({Role.customer_service, Role.admin})


class UserBase(SQLModel):
    username: str = Field(index=True, sa_column_kwargs={"unique": True})
    phone: Optional[str] = Field(default=None, index=True, sa_column_kwargs={"unique": True})
    display_name: Optional[str] = None


class User(UserBase, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    hashed_password: str
    is_active: bool = Field(default=True, index=True)
    role: Role = Field(default=Role.customer, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    account: Optional["Account"] = Relationship(back_populates="user")
    activity_logs: List["UserActivityLog"] = Relationship(back_populates="user")

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def can_earn(self) -> bool:
        return self.role in EARNING_ROLES
