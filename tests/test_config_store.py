"""平台配置（抽成比例）测试。"""
from decimal import Decimal

import pytest
from sqlmodel import select

from peiwan.core.exceptions import NotFoundError, ValidationError
from peiwan.models import PlatformConfig
from peiwan.services.config_store import ConfigStore, FixedCommissionRate


class TestConfigStore:
    def test_default_rate_is_seeded(self, session):
        assert ConfigStore(session).get_commission_rate() == Decimal("10.00")

    def test_update_is_visible_to_the_next_read(self, session, factory):
        admin = factory.user()
        store = ConfigStore(session)
        store.update_commission_rate(Decimal("15.5"), updated_by=admin.id)
        session.commit()

        assert ConfigStore(session).get_commission_rate() == Decimal("15.50")
        assert store.get_config().updated_by == admin.id

    @pytest.mark.parametrize("rate", ["0", "100"])
    def test_bounds_are_inclusive(self, session, rate):
        store = ConfigStore(session)
        store.update_commission_rate(rate)
        session.commit()
        assert store.get_commission_rate() == Decimal(rate)

    @pytest.mark.parametrize("rate", ["-0.01", "100.01", "150"])
    def test_out_of_range_rate_is_rejected(self, session, rate):
        store = ConfigStore(session)
        with pytest.raises(ValidationError):
            store.update_commission_rate(rate)
        session.rollback()
        assert store.get_commission_rate() == Decimal("10.00")

    def test_missing_config_raises_not_found(self, session):
        store = ConfigStore(session, scope="unseeded")
        with pytest.raises(NotFoundError):
            store.get_commission_rate()
        with pytest.raises(NotFoundError):
            store.update_commission_rate("5")

    def test_ensure_default_keeps_existing_row(self, session):
        store = ConfigStore(session)
        store.update_commission_rate("12")
        session.commit()

        store.ensure_default(Decimal("30"))
        session.commit()

        rows = session.exec(select(PlatformConfig)).all()
        assert len(rows) == 1
        assert store.get_commission_rate() == Decimal("12.00")

    def test_fixed_rate_provider(self):
        assert FixedCommissionRate(Decimal("7.5")).get_commission_rate() == Decimal("7.5")
