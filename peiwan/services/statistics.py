from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func
from sqlmodel import Session, select

from peiwan.core.money import to_money
from peiwan.models import GiftRecord, Order, OrderStatus, Withdrawal, WithdrawalStatus


@dataclass(frozen=True)
class PlatformRevenueSummary:
    gift_count: int
    gift_total_value: Decimal
    gift_platform_fee: Decimal
    unsettled_gift_value: Decimal
    withdrawal_platform_fee: Decimal
    total_withdrawn: Decimal
    pending_withdrawal_count: int
    orders_pending_review: int

    @property
    def total_platform_income(self) -> Decimal:
        return self.gift_platform_fee + self.withdrawal_platform_fee


def _money(value: object) -> Decimal:
    return to_money(value if value is not None else 0)


def get_platform_revenue_summary(session: Session) -> PlatformRevenueSummary:
    gift_count, gift_total_value = session.exec(
        select(
            func.count(GiftRecord.id),
            func.coalesce(func.sum(GiftRecord.total_price), 0),
        )
    ).one()

    # Commission is only earned once the gift is settled to the player.
    gift_platform_fee = session.exec(
        select(func.coalesce(func.sum(GiftRecord.platform_fee), 0)).where(
            GiftRecord.is_settled.is_(True)
        )
    ).one()
    unsettled_gift_value = session.exec(
        select(
            func.coalesce(func.sum(GiftRecord.total_price - GiftRecord.platform_fee), 0)
        ).where(GiftRecord.is_settled.is_(False))
    ).one()

    withdrawal_platform_fee, total_withdrawn = session.exec(
        select(
            func.coalesce(func.sum(Withdrawal.platform_fee), 0),
            func.coalesce(func.sum(Withdrawal.amount), 0),
        ).where(Withdrawal.status == WithdrawalStatus.approved)
    ).one()
    pending_withdrawal_count = session.exec(
        select(func.count()).select_from(Withdrawal).where(Withdrawal.status == WithdrawalStatus.pending)
    ).one()
    orders_pending_review = session.exec(
        select(func.count()).select_from(Order).where(Order.status == OrderStatus.pending_review)
    ).one()

    return PlatformRevenueSummary(
        gift_count=int(gift_count or 0),
        gift_total_value=_money(gift_total_value),
        gift_platform_fee=_money(gift_platform_fee),
        unsettled_gift_value=_money(unsettled_gift_value),
        withdrawal_platform_fee=_money(withdrawal_platform_fee),
        total_withdrawn=_money(total_withdrawn),
        pending_withdrawal_count=int(pending_withdrawal_count or 0),
        orders_pending_review=int(orders_pending_review or 0),
    )
