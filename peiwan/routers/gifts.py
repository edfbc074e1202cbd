from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from peiwan.dependencies import get_current_active_user, get_current_player, get_db
from peiwan.models import Gift, GiftRecord, User
from peiwan.schemas.gift import GiftRead, GiftRecordRead, GiftTipCreate
from peiwan.services import gift_settlement

router = APIRouter(prefix="/gifts", tags=["gifts"])


@router.get("", response_model=list[GiftRead])
def list_gifts(db: Session = Depends(get_db)) -> list[Gift]:
    return list(db.exec(select(Gift).where(Gift.is_active.is_(True)).order_by(Gift.price, Gift.id)).all())


@router.post("/records", response_model=GiftRecordRead, status_code=status.HTTP_201_CREATED)
def tip_gift(
    payload: GiftTipCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> GiftRecord:
    record_id = gift_settlement.record_gift(
        db,
        user_id=current_user.id,
        player_id=payload.player_id,
        order_id=payload.order_id,
        gift_id=payload.gift_id,
        quantity=payload.quantity,
    )
    return gift_settlement.get_gift_record(db, record_id)


@router.get("/records/me", response_model=list[GiftRecordRead])
def list_my_gift_records(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[GiftRecord]:
    return gift_settlement.list_gift_records_for_user(db, current_user.id)


@router.get("/records/received", response_model=list[GiftRecordRead])
def list_received_gift_records(
    db: Session = Depends(get_db),
    current_player: User = Depends(get_current_player),
) -> list[GiftRecord]:
    return gift_settlement.list_gift_records_for_player(db, current_player.id)


@router.get("/records/{record_id}", response_model=GiftRecordRead)
def read_gift_record(
    record_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> GiftRecord:
    record = gift_settlement.get_gift_record(db, record_id)
    if not current_user.is_staff and current_user.id not in (record.user_id, record.player_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough privileges")
    return record
