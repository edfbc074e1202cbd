from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, Relationship, SQLModel


class ActivityType(str, Enum):
    registered = "registered"
    order_created = "order_created"
    gift_received = "gift_received"
    order_completed = "order_completed"
    order_rejected = "order_rejected"
    withdrawal_requested = "withdrawal_requested"
    withdrawal_approved = "withdrawal_approved"
    withdrawal_rejected = "withdrawal_rejected"
    commission_rate_updated = "commission_rate_updated"
    clocked_in = "clocked_in"
    clocked_out = "clocked_out"
    hourly_rate_updated = "hourly_rate_updated"


class UserActivityLog(SQLModel, table=True):
    """Per-user business event shown in the user's activity feed."""

    __tablename__ = "user_activity_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    action_type: ActivityType = Field(index=True)
    title: str
    detail: Optional[str] = None
    # Order, withdrawal or attendance reference the event belongs to.
    reference: Optional[str] = Field(default=None, index=True, max_length=40)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)

    user: "User" = Relationship(back_populates="activity_logs")
