"""平台收入统计测试。"""
from decimal import Decimal

from peiwan.models import OrderStatus, Role, WithdrawalDecision
from peiwan.services.gift_settlement import record_gift
from peiwan.services.statistics import get_platform_revenue_summary
from peiwan.services.withdrawals import process_withdrawal, request_withdrawal


class TestPlatformRevenueSummary:
    def test_empty_platform(self, session):
        summary = get_platform_revenue_summary(session)
        assert summary.gift_count == 0
        assert summary.gift_total_value == Decimal("0.00")
        assert summary.total_platform_income == Decimal("0.00")
        assert summary.pending_withdrawal_count == 0

    def test_settled_and_pending_amounts(self, session, factory):
        customer = factory.customer()
        player = factory.player()
        staff = factory.user(Role.customer_service)
        gift = factory.gift("20.00")
        completed = factory.order(customer, player, status=OrderStatus.completed)
        waiting = factory.order(customer, player, status=OrderStatus.pending_review)

        for order, quantity in ((completed, 3), (waiting, 1)):
            record_gift(
                session,
                user_id=customer.id,
                player_id=player.id,
                order_id=order.order_id,
                gift_id=gift.id,
                quantity=quantity,
            )
        approved = request_withdrawal(session, beneficiary_id=player.id, amount=Decimal("50"))
        process_withdrawal(session, approved.withdrawal_id, WithdrawalDecision.approved, processed_by=staff.id)
        request_withdrawal(session, beneficiary_id=player.id, amount=Decimal("4"))

        summary = get_platform_revenue_summary(session)

        assert summary.gift_count == 2
        assert summary.gift_total_value == Decimal("80.00")
        assert summary.gift_platform_fee == Decimal("6.00")
        assert summary.unsettled_gift_value == Decimal("18.00")
        assert summary.withdrawal_platform_fee == Decimal("5.00")
        assert summary.total_withdrawn == Decimal("50.00")
        assert summary.total_platform_income == Decimal("11.00")
        assert summary.pending_withdrawal_count == 1
        assert summary.orders_pending_review == 1
