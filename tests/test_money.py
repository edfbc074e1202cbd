"""金额取整测试。"""
from decimal import Decimal

from peiwan.core.money import percentage_of, to_money


class TestMoney:
    def test_half_cent_rounds_up(self):
        assert to_money(Decimal("0.005")) == Decimal("0.01")
        assert to_money(Decimal("0.015")) == Decimal("0.02")
        assert to_money(Decimal("2.675")) == Decimal("2.68")

    def test_float_goes_through_str(self):
        assert to_money(0.1 + 0.2) == Decimal("0.30")
        assert str(to_money(54)) == "54.00"

    def test_percentage_of(self):
        assert percentage_of(Decimal("60.00"), Decimal("10")) == Decimal("6.00")
        assert percentage_of(Decimal("33.33"), Decimal("15")) == Decimal("5.00")
        assert percentage_of(Decimal("0.05"), Decimal("10")) == Decimal("0.01")
        assert percentage_of(Decimal("100.00"), Decimal("0")) == Decimal("0.00")
