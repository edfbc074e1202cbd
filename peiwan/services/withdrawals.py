"""
Withdrawal requests and their approval.

Requesting a withdrawal only records it; the balance is debited when staff
approve it, after re-checking the balance under the account row lock.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func
from sqlmodel import Session, select

from peiwan.core.exceptions import (
    InsufficientBalanceError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from peiwan.core.money import percentage_of, to_money
from peiwan.db.database import unit_of_work
from peiwan.models import Account, ActivityType, Withdrawal, WithdrawalDecision, WithdrawalStatus
from peiwan.services.activity import log_activity
from peiwan.services.config_store import CommissionRateProvider, ConfigStore
from peiwan.services.ledger import debit_withdrawal, lock_account

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def request_withdrawal(
    session: Session,
    *,
    beneficiary_id: int,
    amount: Decimal,
    alipay_account: str | None = None,
    rate_provider: CommissionRateProvider | None = None,
) -> Withdrawal:
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError("amount must be > 0", details={"amount": str(amount)})
    provider = rate_provider or ConfigStore(session)

    with unit_of_work(session):
        account = session.get(Account, beneficiary_id)
        if account is None:
            raise NotFoundError("Account not found", details={"user_id": beneficiary_id})
        available = to_money(account.available_balance)
        if available < amount:
            raise InsufficientBalanceError(beneficiary_id, required=amount, available=available)

        platform_fee = percentage_of(amount, provider.get_commission_rate())
        withdrawal = Withdrawal(
            beneficiary_id=beneficiary_id,
            amount=amount,
            platform_fee=platform_fee,
            final_amount=amount - platform_fee,
            alipay_account=alipay_account,
            status=WithdrawalStatus.pending,
        )
        session.add(withdrawal)
        log_activity(
            session,
            user_id=beneficiary_id,
            action_type=ActivityType.withdrawal_requested,
            reference=withdrawal.withdrawal_id,
            title="提交提现申请",
            detail=f"提现单号: {withdrawal.withdrawal_id}; 金额: {amount:.2f}; 手续费: {platform_fee:.2f}",
        )

    session.refresh(withdrawal)
    logger.info(
        "Withdrawal %s requested by user_id=%s amount=%s",
        withdrawal.withdrawal_id,
        beneficiary_id,
        amount,
    )
    return withdrawal


def process_withdrawal(
    session: Session,
    withdrawal_id: str,
    decision: WithdrawalDecision,
    notes: str | None = None,
    *,
    processed_by: int | None = None,
) -> Withdrawal:
    decision = WithdrawalDecision(decision)

    with unit_of_work(session):
        withdrawal = session.exec(
            select(Withdrawal)
            .where(Withdrawal.withdrawal_id == withdrawal_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()
        if withdrawal is None:
            raise NotFoundError("Withdrawal not found", details={"withdrawal_id": withdrawal_id})
        if withdrawal.status != WithdrawalStatus.pending:
            raise InvalidStateError(
                "Only pending withdrawals can be processed",
                details={"withdrawal_id": withdrawal_id, "status": withdrawal.status.value},
            )

        if decision == WithdrawalDecision.approved:
            account = lock_account(session, withdrawal.beneficiary_id)
            debit_withdrawal(session, account, withdrawal.amount, reference=f"withdrawal:{withdrawal_id}")
            withdrawal.status = WithdrawalStatus.approved
            title = "提现申请已批准"
        else:
            withdrawal.status = WithdrawalStatus.rejected
            title = "提现申请已拒绝"

        withdrawal.notes = notes
        withdrawal.processed_by = processed_by
        withdrawal.processed_at = datetime.utcnow()
        session.add(withdrawal)
        log_activity(
            session,
            user_id=withdrawal.beneficiary_id,
            action_type=ActivityType(f"withdrawal_{decision.value}"),
            reference=withdrawal_id,
            title=title,
            detail=(
                f"提现单号: {withdrawal_id}; 金额: {withdrawal.amount:.2f}; "
                f"操作人ID: {processed_by}; 备注: {notes or '-'}"
            ),
        )

    session.refresh(withdrawal)
    logger.info(
        "Withdrawal %s %s by user_id=%s",
        withdrawal_id,
        decision.value,
        processed_by,
    )
    return withdrawal


def list_withdrawals(
    session: Session,
    *,
    page: int = 1,
    page_size: int = 20,
    status: WithdrawalStatus | None = None,
    beneficiary_id: int | None = None,
) -> tuple[int, list[Withdrawal]]:
    page = max(1, page)
    page_size = max(1, min(MAX_PAGE_SIZE, page_size))

    count_statement = select(func.count()).select_from(Withdrawal)
    statement = select(Withdrawal).order_by(Withdrawal.created_at.desc())
    if status is not None:
        count_statement = count_statement.where(Withdrawal.status == status)
        statement = statement.where(Withdrawal.status == status)
    if beneficiary_id is not None:
        count_statement = count_statement.where(Withdrawal.beneficiary_id == beneficiary_id)
        statement = statement.where(Withdrawal.beneficiary_id == beneficiary_id)

    total = session.exec(count_statement).one()
    items = session.exec(statement.offset((page - 1) * page_size).limit(page_size)).all()
    return int(total), list(items)
