from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlmodel import Session

from peiwan.core.exceptions import InvalidStateError, ValidationError
from peiwan.db.database import unit_of_work
from peiwan.models import REVIEWABLE_ORDER_STATUSES, ActivityType, Order, OrderStatus
from peiwan.services.activity import log_activity
from peiwan.services.gift_settlement import settle_order_gifts
from peiwan.services.orders import lock_order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderReviewResult:
    order: Order
    settled_gift_count: int
    total_player_earning: Decimal


def _ensure_reviewable(order: Order) -> None:
    if order.status not in REVIEWABLE_ORDER_STATUSES:
        raise InvalidStateError(
            f"Order in status {order.status.value} cannot be reviewed",
            details={"order_id": order.order_id, "status": order.status.value},
        )


def complete_order(session: Session, order_id: str, reviewer_id: int) -> OrderReviewResult:
    """
    Approve a delivered order and settle every gift still pending on it.

    The status change and the gift settlement commit together; a second call
    on the same order fails with ``InvalidStateError`` and changes nothing.
    """
    with unit_of_work(session):
        order = lock_order(session, order_id)
        _ensure_reviewable(order)

        reviewed_at = datetime.utcnow()
        order.status = OrderStatus.completed
        order.reviewed_by = reviewer_id
        order.reviewed_at = reviewed_at
        order.review_reason = None
        order.updated_at = reviewed_at
        session.add(order)

        settled_count, total_player_earning = settle_order_gifts(session, order)

        log_activity(
            session,
            user_id=order.player_id,
            action_type=ActivityType.order_completed,
            reference=order_id,
            title="订单审核通过",
            detail=(
                f"订单号: {order_id}; 审核人ID: {reviewer_id}; "
                f"结算礼物: {settled_count} 条; 礼物收益: {total_player_earning:.2f}"
            ),
        )

    session.refresh(order)
    logger.info(
        "Order %s completed by reviewer_id=%s; settled %s gift records worth %s",
        order_id,
        reviewer_id,
        settled_count,
        total_player_earning,
    )
    return OrderReviewResult(
        order=order,
        settled_gift_count=settled_count,
        total_player_earning=total_player_earning,
    )


def reject_order(session: Session, order_id: str, reviewer_id: int, reason: str) -> Order:
    """Reject a delivered order; gifts tipped on it are never paid out."""
    if not (reason or "").strip():
        raise ValidationError("A reason is required when rejecting an order")

    with unit_of_work(session):
        order = lock_order(session, order_id)
        _ensure_reviewable(order)

        reviewed_at = datetime.utcnow()
        order.status = OrderStatus.rejected
        order.reviewed_by = reviewer_id
        order.reviewed_at = reviewed_at
        order.review_reason = reason.strip()
        order.updated_at = reviewed_at
        session.add(order)
        log_activity(
            session,
            user_id=order.player_id,
            action_type=ActivityType.order_rejected,
            reference=order_id,
            title="订单审核未通过",
            detail=f"订单号: {order_id}; 审核人ID: {reviewer_id}; 原因: {reason.strip()}",
        )

    session.refresh(order)
    logger.info("Order %s rejected by reviewer_id=%s", order_id, reviewer_id)
    return order
