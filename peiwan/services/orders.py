from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from sqlmodel import Session, select

from peiwan.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from peiwan.core.money import to_money
from peiwan.db.database import unit_of_work
from peiwan.models import ActivityType, Order, OrderStatus, Role, User
from peiwan.services.activity import log_activity

logger = logging.getLogger(__name__)


def lock_order(session: Session, order_id: str) -> Order:
    order = session.exec(
        select(Order)
        .where(Order.order_id == order_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).first()
    if order is None:
        raise NotFoundError("Order not found", details={"order_id": order_id})
    return order


def _transition(order: Order, *, allowed: set[OrderStatus], target: OrderStatus) -> None:
    if order.status not in allowed:
        raise InvalidStateError(
            f"Order cannot move from {order.status.value} to {target.value}",
            details={"order_id": order.order_id, "status": order.status.value},
        )
    order.status = target
    order.updated_at = datetime.utcnow()


def create_order(
    session: Session,
    *,
    user_id: int,
    player_id: int,
    amount: Decimal,
    note: str | None = None,
) -> Order:
    with unit_of_work(session):
        player = session.get(User, player_id)
        if player is None or player.role != Role.player or not player.is_active:
            raise NotFoundError("Player not found", details={"player_id": player_id})
        if user_id == player_id:
            raise ValidationError("Players cannot book themselves")

        order = Order(user_id=user_id, player_id=player_id, amount=to_money(amount), note=note)
        session.add(order)
        log_activity(
            session,
            user_id=player_id,
            action_type=ActivityType.order_created,
            reference=order.order_id,
            title="收到新订单",
            detail=f"订单号: {order.order_id}; 金额: {order.amount:.2f}",
        )

    session.refresh(order)
    logger.info("Order %s created by user_id=%s for player_id=%s", order.order_id, user_id, player_id)
    return order


def accept_order(session: Session, order_id: str, *, player_id: int) -> Order:
    with unit_of_work(session):
        order = lock_order(session, order_id)
        if order.player_id != player_id:
            raise InvalidStateError("Order is assigned to another player", details={"order_id": order_id})
        _transition(order, allowed={OrderStatus.pending}, target=OrderStatus.in_progress)
        session.add(order)

    session.refresh(order)
    return order


def finish_order(session: Session, order_id: str, *, player_id: int) -> Order:
    """Player marks the service as delivered; the order then waits for staff review."""
    with unit_of_work(session):
        order = lock_order(session, order_id)
        if order.player_id != player_id:
            raise InvalidStateError("Order is assigned to another player", details={"order_id": order_id})
        _transition(order, allowed={OrderStatus.in_progress}, target=OrderStatus.pending_review)
        session.add(order)

    session.refresh(order)
    return order


def cancel_order(session: Session, order_id: str, *, user_id: int) -> Order:
    with unit_of_work(session):
        order = lock_order(session, order_id)
        if order.user_id != user_id:
            raise InvalidStateError("Order belongs to another customer", details={"order_id": order_id})
        _transition(order, allowed={OrderStatus.pending}, target=OrderStatus.cancelled)
        session.add(order)

    session.refresh(order)
    return order


def list_orders(
    session: Session,
    *,
    status: OrderStatus | None = None,
    user_id: int | None = None,
    player_id: int | None = None,
) -> list[Order]:
    statement = select(Order).order_by(Order.created_at.desc())
    if status is not None:
        statement = statement.where(Order.status == status)
    if user_id is not None:
        statement = statement.where(Order.user_id == user_id)
    if player_id is not None:
        statement = statement.where(Order.player_id == player_id)
    return list(session.exec(statement).all())
