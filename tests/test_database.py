"""SQLite 事务行为测试：只读会话不阻塞写事务。"""
from decimal import Decimal

import pytest
from sqlmodel import Session, select

from peiwan.db.database import unit_of_work
from peiwan.models import Gift, PlatformConfig
from peiwan.services.config_store import ConfigStore


class TestReadAndWriteTransactions:
    def test_open_read_does_not_block_writer(self, engine):
        """一个会话读取后未结束事务，另一个会话的写事务仍可提交。"""
        with Session(engine) as reader, Session(engine) as writer:
            assert ConfigStore(reader).get_commission_rate() == Decimal("10.00")
            assert reader.in_transaction()

            with unit_of_work(writer):
                ConfigStore(writer).update_commission_rate(Decimal("15.00"))

            # 读会话结束事务后读到新值
            reader.commit()
            assert ConfigStore(reader).get_commission_rate() == Decimal("15.00")

    def test_plain_reads_run_alongside_each_other(self, engine):
        with Session(engine) as first, Session(engine) as second:
            first.exec(select(PlatformConfig)).all()
            second.exec(select(PlatformConfig)).all()
            assert first.in_transaction() and second.in_transaction()

            with unit_of_work(first):
                first.add(Gift(name="玫瑰", price=Decimal("1.00")))

            second.commit()
            assert second.exec(select(Gift).where(Gift.name == "玫瑰")).first() is not None

    def test_unit_of_work_rolls_back_on_error(self, session):
        with pytest.raises(RuntimeError):
            with unit_of_work(session):
                session.add(Gift(name="火箭", price=Decimal("500.00")))
                raise RuntimeError("boom")

        assert session.exec(select(Gift).where(Gift.name == "火箭")).first() is None
