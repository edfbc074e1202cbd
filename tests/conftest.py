"""Fixtures shared by the service and API tests.

Every test gets its own temp-file SQLite database with the default
commission rate (10%) seeded.
"""
import os
import shutil
import tempfile
from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from peiwan.core.security import get_password_hash
from peiwan.db.database import build_engine, create_db_and_tables, unit_of_work
from peiwan.dependencies import get_db
from peiwan.main import app
from peiwan.models import Gift, Order, OrderStatus, Role, User
from peiwan.services.config_store import ConfigStore
from peiwan.services.ledger import credit_earnings, lock_account, open_account

DEFAULT_RATE = Decimal("10.00")
TEST_PASSWORD = "password123"


@pytest.fixture
def engine():
    """Yield an engine bound to a fresh temp SQLite database."""
    temp_dir = tempfile.mkdtemp(prefix="peiwan-tests-")
    db_engine = build_engine(f"sqlite:///{os.path.join(temp_dir, 'test.db')}")
    create_db_and_tables(db_engine)
    with Session(db_engine) as seed_session:
        ConfigStore(seed_session).ensure_default(DEFAULT_RATE)
        seed_session.commit()

    try:
        yield db_engine
    finally:
        db_engine.dispose()
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def session(engine):
    with Session(engine) as db_session:
        yield db_session


class Factory:
    """Creates committed rows for tests."""

    def __init__(self, session: Session):
        self.session = session
        self._seq = count(1)

    def user(self, role: Role = Role.customer, username: str | None = None) -> User:
        n = next(self._seq)
        user = User(
            username=username or f"{role.value}{n}",
            display_name=username or f"{role.value}{n}",
            hashed_password=get_password_hash(TEST_PASSWORD),
            role=role,
        )
        with unit_of_work(self.session):
            self.session.add(user)
            self.session.flush()
            if user.can_earn:
                open_account(self.session, user.id)
        self.session.refresh(user)
        return user

    def player(self) -> User:
        return self.user(Role.player)

    def customer(self) -> User:
        return self.user(Role.customer)

    def gift(self, price: str = "20.00", name: str | None = None, is_active: bool = True) -> Gift:
        gift = Gift(name=name or f"gift{next(self._seq)}", price=Decimal(price), is_active=is_active)
        with unit_of_work(self.session):
            self.session.add(gift)
        self.session.refresh(gift)
        return gift

    def order(
        self,
        customer: User,
        player: User,
        status: OrderStatus = OrderStatus.pending_review,
        amount: str = "100.00",
    ) -> Order:
        order = Order(user_id=customer.id, player_id=player.id, amount=Decimal(amount), status=status)
        with unit_of_work(self.session):
            self.session.add(order)
        self.session.refresh(order)
        return order

    def fund(self, user: User, amount: str) -> None:
        with unit_of_work(self.session):
            account = lock_account(self.session, user.id)
            credit_earnings(self.session, account, Decimal(amount), reference="test-fund")


@pytest.fixture
def factory(session):
    return Factory(session)


@pytest.fixture
def client(engine):
    def override_get_db():
        with Session(engine) as db_session:
            yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
