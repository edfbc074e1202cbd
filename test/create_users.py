#!/usr/bin/env python3

import sys
from decimal import Decimal
from pathlib import Path

from sqlmodel import Session, select

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from peiwan.core.config import settings
from peiwan.core.security import get_password_hash
from peiwan.db.database import create_db_and_tables, engine
from peiwan.models import Gift, Role, User
from peiwan.services.config_store import ConfigStore
from peiwan.services.ledger import open_account

DEMO_PASSWORD = "password123"

DEMO_GIFTS = [
    ("玫瑰", Decimal("1.00")),
    ("棒棒糖", Decimal("5.00")),
    ("奶茶", Decimal("20.00")),
    ("跑车", Decimal("520.00")),
]


def _create_user(session: Session, *, username: str, phone: str, role: Role) -> None:
    existing = session.exec(select(User).where(User.username == username)).first()
    if existing:
        print(f"User already exists: {username}")
        return

    user = User(
        username=username,
        phone=phone,
        display_name=username,
        hashed_password=get_password_hash(DEMO_PASSWORD),
        role=role,
    )
    session.add(user)
    session.flush()
    if user.can_earn:
        open_account(session, user.id)
    session.commit()
    print(f"Created {role.value}: {username} / {DEMO_PASSWORD}")


def _create_gifts(session: Session) -> None:
    for name, price in DEMO_GIFTS:
        if session.exec(select(Gift).where(Gift.name == name)).first() is None:
            session.add(Gift(name=name, price=price))
    session.commit()
    print(f"Gift catalog ready: {', '.join(name for name, _ in DEMO_GIFTS)}")


def main() -> int:
    create_db_and_tables()
    with Session(engine) as session:
        ConfigStore(session).ensure_default(settings.default_commission_rate)
        session.commit()

        _create_user(session, username="kefu1", phone="13000000001", role=Role.customer_service)
        _create_user(session, username="player1", phone="13100000001", role=Role.player)
        _create_user(session, username="player2", phone="13100000002", role=Role.player)
        _create_user(session, username="customer1", phone="13200000001", role=Role.customer)
        _create_gifts(session)
    return 0


if __name__ == "__main__":
    sys.exit(main())
