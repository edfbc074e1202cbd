from .account import Account, BalanceChangeType, BalanceLog
from .attendance import AttendanceRecord
from .gift import Gift
from .gift_record import GiftRecord, GiftSettlementState, Settled, Unsettled
from .order import (
    CLOSED_ORDER_STATUSES,
    REVIEWABLE_ORDER_STATUSES,
    Order,
    OrderStatus,
)
from .platform_config import DEFAULT_SCOPE, PlatformConfig
from .user import EARNING_ROLES, STAFF_ROLES, Role, User
from .user_activity_log import ActivityType, UserActivityLog
from .withdrawal import Withdrawal, WithdrawalDecision, WithdrawalStatus

__all__ = [
    "Account",
    "BalanceChangeType",
    "BalanceLog",
    "AttendanceRecord",
    "Gift",
    "GiftRecord",
    "GiftSettlementState",
    "Settled",
    "Unsettled",
    "CLOSED_ORDER_STATUSES",
    "REVIEWABLE_ORDER_STATUSES",
    "Order",
    "OrderStatus",
    "DEFAULT_SCOPE",
    "PlatformConfig",
    "EARNING_ROLES",
    "STAFF_ROLES",
    "Role",
    "User",
    "ActivityType",
    "UserActivityLog",
    "Withdrawal",
    "WithdrawalDecision",
    "WithdrawalStatus",
]
