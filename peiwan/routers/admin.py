from __future__ import annotations

from datetime import datetime
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session, select

from peiwan.db.database import unit_of_work
from peiwan.dependencies import get_current_active_admin_user, get_current_staff_user, get_db
from peiwan.models import (
    Account,
    ActivityType,
    AttendanceRecord,
    Gift,
    Order,
    OrderStatus,
    User,
    Withdrawal,
    WithdrawalStatus,
)
from peiwan.schemas.attendance import AttendanceRead, HourlyRateUpdate
from peiwan.schemas.gift import GiftCreate, GiftRead, GiftUpdate
from peiwan.schemas.order import OrderRead, OrderReject, OrderReviewRead
from peiwan.schemas.platform_config import CommissionRateRead, CommissionRateUpdate
from peiwan.schemas.statistics import PlatformStatisticsRead
from peiwan.schemas.user import AccountRead
from peiwan.schemas.withdrawal import WithdrawalPage, WithdrawalProcess, WithdrawalRead
from peiwan.services import attendance as attendance_service
from peiwan.services import order_review
from peiwan.services import orders as order_service
from peiwan.services import withdrawals as withdrawal_service
from peiwan.services.activity import log_activity
from peiwan.services.config_store import ConfigStore
from peiwan.services.statistics import get_platform_revenue_summary

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


def _get_gift_or_404(db: Session, gift_id: int) -> Gift:
    gift = db.get(Gift, gift_id)
    if gift is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Gift not found")
    return gift


def _ensure_gift_name_free(db: Session, name: str, *, exclude_id: int | None = None) -> None:
    statement = select(Gift).where(Gift.name == name)
    if exclude_id is not None:
        statement = statement.where(Gift.id != exclude_id)
    if db.exec(statement).first() is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Gift name already exists")


@router.get("/orders", response_model=list[OrderRead])
def list_orders(
    status_filter: OrderStatus | None = Query(default=OrderStatus.pending_review, alias="status"),
    db: Session = Depends(get_db),
    current_staff: User = Depends(get_current_staff_user),
) -> list[Order]:
    del current_staff
    return order_service.list_orders(db, status=status_filter)


@router.post("/orders/{order_id}/complete", response_model=OrderReviewRead)
def complete_order(
    order_id: str,
    db: Session = Depends(get_db),
    current_staff: User = Depends(get_current_staff_user),
) -> OrderReviewRead:
    result = order_review.complete_order(db, order_id, reviewer_id=current_staff.id)
    return OrderReviewRead(
        order=OrderRead.model_validate(result.order),
        settled_gift_count=result.settled_gift_count,
        total_player_earning=result.total_player_earning,
    )


@router.post("/orders/{order_id}/reject", response_model=OrderRead)
def reject_order(
    order_id: str,
    payload: OrderReject,
    db: Session = Depends(get_db),
    current_staff: User = Depends(get_current_staff_user),
) -> Order:
    return order_review.reject_order(db, order_id, reviewer_id=current_staff.id, reason=payload.reason)


@router.get("/withdrawals", response_model=WithdrawalPage)
def list_withdrawals(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=withdrawal_service.MAX_PAGE_SIZE),
    status_filter: WithdrawalStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    current_staff: User = Depends(get_current_staff_user),
) -> WithdrawalPage:
    del current_staff
    total, items = withdrawal_service.list_withdrawals(db, page=page, page_size=page_size, status=status_filter)
    return WithdrawalPage(
        total=total,
        page=page,
        page_size=page_size,
        withdrawals=[WithdrawalRead.model_validate(item) for item in items],
    )


@router.post("/withdrawals/{withdrawal_id}/process", response_model=WithdrawalRead)
def process_withdrawal(
    withdrawal_id: str,
    payload: WithdrawalProcess,
    db: Session = Depends(get_db),
    current_staff: User = Depends(get_current_staff_user),
) -> Withdrawal:
    return withdrawal_service.process_withdrawal(
        db,
        withdrawal_id,
        payload.status,
        payload.notes,
        processed_by=current_staff.id,
    )


@router.get("/config/commission", response_model=CommissionRateRead)
def read_commission_rate(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_active_admin_user),
) -> CommissionRateRead:
    del current_admin
    config = ConfigStore(db).get_config()
    return CommissionRateRead(
        commission_rate=config.commission_rate,
        updated_by=config.updated_by,
        updated_at=config.updated_at,
    )


@router.put("/config/commission", response_model=CommissionRateRead)
def update_commission_rate(
    payload: CommissionRateUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_active_admin_user),
) -> CommissionRateRead:
    with unit_of_work(db):
        config = ConfigStore(db).update_commission_rate(payload.commission_rate, updated_by=current_admin.id)
        log_activity(
            db,
            user_id=current_admin.id,
            action_type=ActivityType.commission_rate_updated,
            title="修改平台抽成比例",
            detail=f"新比例: {payload.commission_rate}%",
        )
    db.refresh(config)
    return CommissionRateRead(
        commission_rate=config.commission_rate,
        updated_by=config.updated_by,
        updated_at=config.updated_at,
    )


@router.post("/gifts", response_model=GiftRead, status_code=status.HTTP_201_CREATED)
def create_gift(
    payload: GiftCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_active_admin_user),
) -> Gift:
    _ensure_gift_name_free(db, payload.name)
    gift = Gift(name=payload.name, price=payload.price, image_url=payload.image_url)
    with unit_of_work(db):
        db.add(gift)
    db.refresh(gift)
    logger.info("Gift %s (%s) created by user_id=%s", gift.id, gift.name, current_admin.id)
    return gift


@router.patch("/gifts/{gift_id}", response_model=GiftRead)
def update_gift(
    gift_id: int,
    payload: GiftUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_active_admin_user),
) -> Gift:
    del current_admin
    gift = _get_gift_or_404(db, gift_id)
    updates = payload.model_dump(exclude_unset=True)
    if updates.get("name"):
        _ensure_gift_name_free(db, updates["name"], exclude_id=gift_id)
    with unit_of_work(db):
        for key, value in updates.items():
            setattr(gift, key, value)
        gift.updated_at = datetime.utcnow()
        db.add(gift)
    db.refresh(gift)
    return gift


@router.delete("/gifts/{gift_id}", response_model=GiftRead)
def deactivate_gift(
    gift_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_active_admin_user),
) -> Gift:
    gift = _get_gift_or_404(db, gift_id)
    with unit_of_work(db):
        gift.is_active = False
        gift.updated_at = datetime.utcnow()
        db.add(gift)
    db.refresh(gift)
    logger.info("Gift %s deactivated by user_id=%s", gift_id, current_admin.id)
    return gift


@router.get("/attendance", response_model=list[AttendanceRead])
def list_attendance(
    user_id: int | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_staff: User = Depends(get_current_staff_user),
) -> list[AttendanceRecord]:
    del current_staff
    return attendance_service.list_attendance(db, user_id=user_id, limit=limit)


@router.put("/accounts/{user_id}/hourly-rate", response_model=AccountRead)
def update_hourly_rate(
    user_id: int,
    payload: HourlyRateUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_active_admin_user),
) -> Account:
    return attendance_service.set_hourly_rate(db, user_id, payload.hourly_rate, updated_by=current_admin.id)


@router.get("/statistics", response_model=PlatformStatisticsRead)
def read_statistics(
    db: Session = Depends(get_db),
    current_staff: User = Depends(get_current_staff_user),
) -> PlatformStatisticsRead:
    del current_staff
    summary = get_platform_revenue_summary(db)
    return PlatformStatisticsRead(
        generated_at=datetime.utcnow(),
        gift_count=summary.gift_count,
        gift_total_value=summary.gift_total_value,
        gift_platform_fee=summary.gift_platform_fee,
        unsettled_gift_value=summary.unsettled_gift_value,
        withdrawal_platform_fee=summary.withdrawal_platform_fee,
        total_withdrawn=summary.total_withdrawn,
        total_platform_income=summary.total_platform_income,
        pending_withdrawal_count=summary.pending_withdrawal_count,
        orders_pending_review=summary.orders_pending_review,
    )
