"""
Gift tipping and settlement.

A tip is priced from the gift catalog, charged the platform commission that
is current at tip time, and stored as a ``GiftRecord``. If the order it was
tipped on is already completed, the player's net earning is credited right
away; otherwise the record waits until staff complete the order
(see ``peiwan.services.order_review``).

Lock order: the order row first, then the player's account row. Order review
takes the same locks in the same order, so a tip racing a completion is
either settled immediately or picked up by the completion, never both.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from sqlmodel import Session, select

from peiwan.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from peiwan.core.money import ZERO, percentage_of, to_money
from peiwan.db.database import unit_of_work
from peiwan.models import CLOSED_ORDER_STATUSES, ActivityType, Gift, GiftRecord, Order
from peiwan.services.activity import log_activity
from peiwan.services.config_store import CommissionRateProvider, ConfigStore
from peiwan.services.ledger import credit_earnings, lock_account
from peiwan.services.orders import lock_order

logger = logging.getLogger(__name__)


def calculate_gift_amounts(price: Decimal, quantity: int, rate: Decimal) -> tuple[Decimal, Decimal]:
    """Return ``(total_price, platform_fee)`` for ``quantity`` gifts at ``price``."""
    if quantity < 1:
        raise ValidationError("quantity must be >= 1", details={"quantity": quantity})
    total_price = to_money(Decimal(price) * quantity)
    return total_price, percentage_of(total_price, rate)


def record_gift(
    session: Session,
    *,
    user_id: int,
    player_id: int,
    order_id: str,
    gift_id: int,
    quantity: int,
    rate_provider: CommissionRateProvider | None = None,
) -> int:
    provider = rate_provider or ConfigStore(session)

    with unit_of_work(session):
        gift = session.get(Gift, gift_id)
        if gift is None or not gift.is_active:
            raise NotFoundError("Gift not found", details={"gift_id": gift_id})

        total_price, platform_fee = calculate_gift_amounts(
            gift.price, quantity, provider.get_commission_rate()
        )

        order = lock_order(session, order_id)
        if order.user_id != user_id:
            raise InvalidStateError(
                "Only the customer who booked the order can tip on it",
                details={"order_id": order_id, "user_id": user_id},
            )
        if order.player_id != player_id:
            raise InvalidStateError(
                "Order is assigned to another player",
                details={"order_id": order_id, "player_id": player_id},
            )
        if order.status in CLOSED_ORDER_STATUSES:
            raise InvalidStateError(
                f"Cannot tip on a {order.status.value} order",
                details={"order_id": order_id, "status": order.status.value},
            )

        record = GiftRecord(
            user_id=user_id,
            player_id=player_id,
            order_id=order_id,
            gift_id=gift_id,
            quantity=quantity,
            total_price=total_price,
            platform_fee=platform_fee,
            is_settled=False,
        )

        if order.is_completed:
            account = lock_account(session, player_id)
            credit_earnings(session, account, record.player_earning, reference=f"gift:{order_id}")
            record.is_settled = True
            record.settled_at = datetime.utcnow()

        session.add(record)
        log_activity(
            session,
            user_id=player_id,
            action_type=ActivityType.gift_received,
            reference=order_id,
            title="收到礼物打赏",
            detail=(
                f"订单号: {order_id}; 礼物: {gift.name} x{quantity}; "
                f"总价: {total_price:.2f}; 平台抽成: {platform_fee:.2f}; "
                f"{'已结算' if record.is_settled else '待订单审核后结算'}"
            ),
        )
        session.flush()
        record_id = record.id
        settled = record.is_settled

    logger.info(
        "Gift record %s: order=%s player_id=%s total=%s fee=%s settled=%s",
        record_id,
        order_id,
        player_id,
        total_price,
        platform_fee,
        settled,
    )
    return record_id


def settle_order_gifts(session: Session, order: Order) -> tuple[int, Decimal]:
    """
    Settle every unsettled gift record of ``order`` in one credit.

    Runs inside the caller's transaction with the order row already locked.
    Returns ``(settled_count, total_player_earning)``.
    """
    unsettled = session.exec(
        select(GiftRecord)
        .where(GiftRecord.order_id == order.order_id)
        .where(GiftRecord.is_settled.is_(False))
        .with_for_update()
        .execution_options(populate_existing=True)
    ).all()
    if not unsettled:
        return 0, ZERO

    total_player_earning = to_money(sum((record.player_earning for record in unsettled), ZERO))
    if total_player_earning != ZERO:
        account = lock_account(session, order.player_id)
        credit_earnings(session, account, total_player_earning, reference=f"order:{order.order_id}")

    settled_at = datetime.utcnow()
    for record in unsettled:
        record.is_settled = True
        record.settled_at = settled_at
        session.add(record)

    return len(unsettled), total_player_earning


def get_gift_record(session: Session, record_id: int) -> GiftRecord:
    record = session.get(GiftRecord, record_id)
    if record is None:
        raise NotFoundError("Gift record not found", details={"gift_record_id": record_id})
    return record


def list_gift_records_for_user(session: Session, user_id: int) -> list[GiftRecord]:
    return list(
        session.exec(
            select(GiftRecord)
            .where(GiftRecord.user_id == user_id)
            .order_by(GiftRecord.created_at.desc(), GiftRecord.id.desc())
        ).all()
    )


def list_gift_records_for_player(session: Session, player_id: int) -> list[GiftRecord]:
    return list(
        session.exec(
            select(GiftRecord)
            .where(GiftRecord.player_id == player_id)
            .order_by(GiftRecord.created_at.desc(), GiftRecord.id.desc())
        ).all()
    )
