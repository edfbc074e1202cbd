"""
Customer-service attendance.

A customer-service user clocks in once per day and clocks out later. Clocking
out prices the attended hours at the account's hourly rate (or
``settings.default_hourly_rate``) and credits the result through the ledger,
so the earnings can be withdrawn like gift earnings.

Lock order: the open attendance row first, then the account row.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from sqlmodel import Session, select

from peiwan.core.config import settings
from peiwan.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from peiwan.core.money import ZERO, to_money
from peiwan.db.database import unit_of_work
from peiwan.models import Account, ActivityType, AttendanceRecord, BalanceChangeType, Role, User
from peiwan.services.activity import log_activity
from peiwan.services.ledger import credit_earnings, lock_account

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = Decimal(3600)


def calculate_work_hours(clock_in_at: datetime, clock_out_at: datetime) -> Decimal:
    """Attended hours between two timestamps, rounded to cents of an hour."""
    seconds = Decimal(str((clock_out_at - clock_in_at).total_seconds()))
    if seconds < 0:
        raise ValidationError(
            "clock-out must not precede clock-in",
            details={"clock_in_at": clock_in_at.isoformat(), "clock_out_at": clock_out_at.isoformat()},
        )
    return to_money(seconds / SECONDS_PER_HOUR)


def _get_customer_service_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found", details={"user_id": user_id})
    if user.role != Role.customer_service:
        raise ValidationError(
            "Only customer service staff keep attendance",
            details={"user_id": user_id, "role": user.role.value},
        )
    return user


def _open_record(session: Session, user_id: int, *, for_update: bool = False) -> AttendanceRecord | None:
    statement = (
        select(AttendanceRecord)
        .where(AttendanceRecord.user_id == user_id)
        .where(AttendanceRecord.clock_out_at.is_(None))
    )
    if for_update:
        statement = statement.with_for_update().execution_options(populate_existing=True)
    return session.exec(statement).first()


def effective_hourly_rate(account: Account) -> Decimal:
    if account.hourly_rate is not None:
        return to_money(account.hourly_rate)
    return to_money(settings.default_hourly_rate)


def clock_in(session: Session, user_id: int, *, now: datetime | None = None) -> AttendanceRecord:
    now = now or datetime.utcnow()

    with unit_of_work(session):
        _get_customer_service_user(session, user_id)
        if _open_record(session, user_id) is not None:
            raise InvalidStateError("Already clocked in", details={"user_id": user_id})
        already_worked = session.exec(
            select(AttendanceRecord)
            .where(AttendanceRecord.user_id == user_id)
            .where(AttendanceRecord.work_date == now.date())
        ).first()
        if already_worked is not None:
            raise InvalidStateError(
                "Already clocked out today",
                details={"user_id": user_id, "work_date": now.date().isoformat()},
            )

        record = AttendanceRecord(user_id=user_id, work_date=now.date(), clock_in_at=now)
        session.add(record)
        session.flush()
        log_activity(
            session,
            user_id=user_id,
            action_type=ActivityType.clocked_in,
            reference=f"attendance:{record.id}",
            title="上班打卡",
            detail=f"日期: {record.work_date.isoformat()}; 时间: {now:%H:%M:%S}",
        )

    session.refresh(record)
    logger.info("user_id=%s clocked in at %s", user_id, now.isoformat())
    return record


def clock_out(session: Session, user_id: int, *, now: datetime | None = None) -> AttendanceRecord:
    now = now or datetime.utcnow()

    with unit_of_work(session):
        record = _open_record(session, user_id, for_update=True)
        if record is None:
            raise InvalidStateError("Not clocked in", details={"user_id": user_id})

        work_hours = calculate_work_hours(record.clock_in_at, now)
        account = lock_account(session, user_id)
        hourly_rate = effective_hourly_rate(account)
        earnings = to_money(work_hours * hourly_rate)

        record.clock_out_at = now
        record.work_hours = work_hours
        record.hourly_rate = hourly_rate
        record.earnings = earnings
        session.add(record)

        reference = f"attendance:{record.id}"
        if earnings > ZERO:
            credit_earnings(
                session,
                account,
                earnings,
                reference=reference,
                change_type=BalanceChangeType.attendance_earning,
            )
        log_activity(
            session,
            user_id=user_id,
            action_type=ActivityType.clocked_out,
            reference=reference,
            title="下班打卡",
            detail=f"工作时长: {work_hours:.2f}小时; 时薪: {hourly_rate:.2f}; 收入: {earnings:.2f}",
        )

    session.refresh(record)
    logger.info(
        "user_id=%s clocked out: hours=%s rate=%s earnings=%s",
        user_id,
        record.work_hours,
        record.hourly_rate,
        record.earnings,
    )
    return record


def set_hourly_rate(
    session: Session,
    user_id: int,
    hourly_rate: Decimal,
    *,
    updated_by: int | None = None,
) -> Account:
    hourly_rate = to_money(hourly_rate)
    if hourly_rate < 0:
        raise ValidationError("hourly rate must not be negative", details={"hourly_rate": str(hourly_rate)})

    with unit_of_work(session):
        _get_customer_service_user(session, user_id)
        account = lock_account(session, user_id)
        account.hourly_rate = hourly_rate
        account.updated_at = datetime.utcnow()
        session.add(account)
        log_activity(
            session,
            user_id=user_id,
            action_type=ActivityType.hourly_rate_updated,
            title="时薪调整",
            detail=f"新时薪: {hourly_rate:.2f}",
        )

    session.refresh(account)
    logger.info("Hourly rate of user_id=%s set to %s by user_id=%s", user_id, hourly_rate, updated_by)
    return account


def list_attendance(
    session: Session,
    *,
    user_id: int | None = None,
    limit: int = 50,
) -> list[AttendanceRecord]:
    statement = select(AttendanceRecord)
    if user_id is not None:
        statement = statement.where(AttendanceRecord.user_id == user_id)
    return list(
        session.exec(
            statement.order_by(AttendanceRecord.clock_in_at.desc(), AttendanceRecord.id.desc()).limit(limit)
        ).all()
    )
