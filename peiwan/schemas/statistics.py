from datetime import datetime
from decimal import Decimal

from sqlmodel import SQLModel


class PlatformStatisticsRead(SQLModel):
    generated_at: datetime
    gift_count: int
    gift_total_value: Decimal
    gift_platform_fee: Decimal
    unsettled_gift_value: Decimal
    withdrawal_platform_fee: Decimal
    total_withdrawn: Decimal
    total_platform_income: Decimal
    pending_withdrawal_count: int
    orders_pending_review: int
