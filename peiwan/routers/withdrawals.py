from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from peiwan.dependencies import get_current_earner, get_db
from peiwan.models import User, Withdrawal
from peiwan.schemas.withdrawal import WithdrawalCreate, WithdrawalRead
from peiwan.services import withdrawals as withdrawal_service

router = APIRouter(prefix="/withdrawals", tags=["withdrawals"])


@router.post("", response_model=WithdrawalRead, status_code=status.HTTP_201_CREATED)
def create_withdrawal(
    payload: WithdrawalCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_earner),
) -> Withdrawal:
    return withdrawal_service.request_withdrawal(
        db,
        beneficiary_id=current_user.id,
        amount=payload.amount,
        alipay_account=payload.alipay_account,
    )


@router.get("/me", response_model=list[WithdrawalRead])
def list_my_withdrawals(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_earner),
) -> list[Withdrawal]:
    _, items = withdrawal_service.list_withdrawals(
        db,
        page_size=withdrawal_service.MAX_PAGE_SIZE,
        beneficiary_id=current_user.id,
    )
    return items
