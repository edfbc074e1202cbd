"""
Single code path for every account balance mutation.

Callers lock the account row with ``lock_account`` inside their own
transaction, then apply changes with ``credit_earnings`` or
``debit_withdrawal``. Nothing here commits.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from sqlmodel import Session, select

from peiwan.core.exceptions import InsufficientBalanceError, NotFoundError, ValidationError
from peiwan.core.money import to_money
from peiwan.models import Account, BalanceChangeType, BalanceLog

logger = logging.getLogger(__name__)


def open_account(session: Session, user_id: int) -> Account:
    account = session.get(Account, user_id)
    if account is None:
        account = Account(user_id=user_id)
        session.add(account)
    return account


def lock_account(session: Session, user_id: int) -> Account:
    account = session.exec(
        select(Account)
        .where(Account.user_id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).first()
    if account is None:
        raise NotFoundError("Account not found", details={"user_id": user_id})
    return account


def _record_change(
    session: Session,
    account: Account,
    *,
    change_type: BalanceChangeType,
    amount: Decimal,
    balance_before: Decimal,
    reference: str | None,
) -> None:
    account.updated_at = datetime.utcnow()
    session.add(account)
    session.add(
        BalanceLog(
            user_id=account.user_id,
            change_type=change_type,
            amount=amount,
            balance_before=balance_before,
            balance_after=account.available_balance,
            reference=reference,
        )
    )


def credit_earnings(
    session: Session,
    account: Account,
    amount: Decimal,
    *,
    reference: str | None = None,
    change_type: BalanceChangeType = BalanceChangeType.gift_settlement,
) -> Account:
    amount = to_money(amount)
    if amount < 0:
        raise ValidationError("credit amount must not be negative", details={"amount": str(amount)})

    balance_before = to_money(account.available_balance)
    account.available_balance = balance_before + amount
    account.total_earnings = to_money(account.total_earnings) + amount
    _record_change(
        session,
        account,
        change_type=change_type,
        amount=amount,
        balance_before=balance_before,
        reference=reference,
    )
    logger.info(
        "Credited %s (%s) to account user_id=%s (ref=%s)", amount, change_type.value, account.user_id, reference
    )
    return account


def debit_withdrawal(
    session: Session,
    account: Account,
    amount: Decimal,
    *,
    reference: str | None = None,
) -> Account:
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError("withdrawal amount must be > 0", details={"amount": str(amount)})

    balance_before = to_money(account.available_balance)
    if balance_before < amount:
        raise InsufficientBalanceError(account.user_id, required=amount, available=balance_before)

    account.available_balance = balance_before - amount
    account.total_withdrawals = to_money(account.total_withdrawals) + amount
    _record_change(
        session,
        account,
        change_type=BalanceChangeType.withdrawal,
        amount=-amount,
        balance_before=balance_before,
        reference=reference,
    )
    logger.info("Debited %s from account user_id=%s (ref=%s)", amount, account.user_id, reference)
    return account
