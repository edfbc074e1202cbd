from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session, select

from peiwan.dependencies import get_current_active_user, get_current_earner, get_db
from peiwan.models import Account, BalanceLog, User, UserActivityLog
from peiwan.schemas.user import AccountRead, BalanceLogRead, UserActivityRead, UserRead
from peiwan.services.activity import list_activities

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_active_user)) -> User:
    return current_user


@router.get("/me/activities", response_model=list[UserActivityRead])
def list_my_activities(
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[UserActivityLog]:
    return list_activities(db, current_user.id, limit=limit)


@router.get("/me/account", response_model=AccountRead)
def read_my_account(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_earner),
) -> Account:
    account = db.get(Account, current_user.id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")
    return account


@router.get("/me/balance-logs", response_model=list[BalanceLogRead])
def list_my_balance_logs(
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_earner),
) -> list[BalanceLog]:
    return list(
        db.exec(
            select(BalanceLog)
            .where(BalanceLog.user_id == current_user.id)
            .order_by(BalanceLog.created_at.desc(), BalanceLog.id.desc())
            .limit(limit)
        ).all()
    )
