from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from peiwan.dependencies import get_current_active_user, get_current_player, get_db
from peiwan.models import Order, OrderStatus, Role, User
from peiwan.schemas.order import OrderCreate, OrderRead
from peiwan.services import orders as order_service

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Order:
    return order_service.create_order(
        db,
        user_id=current_user.id,
        player_id=payload.player_id,
        amount=payload.amount,
        note=payload.note,
    )


@router.get("/me", response_model=list[OrderRead])
def list_my_orders(
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[Order]:
    if current_user.role == Role.player:
        return order_service.list_orders(db, status=status_filter, player_id=current_user.id)
    return order_service.list_orders(db, status=status_filter, user_id=current_user.id)


@router.post("/{order_id}/accept", response_model=OrderRead)
def accept_order(
    order_id: str,
    db: Session = Depends(get_db),
    current_player: User = Depends(get_current_player),
) -> Order:
    return order_service.accept_order(db, order_id, player_id=current_player.id)


@router.post("/{order_id}/finish", response_model=OrderRead)
def finish_order(
    order_id: str,
    db: Session = Depends(get_db),
    current_player: User = Depends(get_current_player),
) -> Order:
    return order_service.finish_order(db, order_id, player_id=current_player.id)


@router.post("/{order_id}/cancel", response_model=OrderRead)
def cancel_order(
    order_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Order:
    return order_service.cancel_order(db, order_id, user_id=current_user.id)
