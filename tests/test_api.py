"""HTTP 接口端到端测试。"""
from decimal import Decimal

import pytest
from sqlmodel import Session

from peiwan.core.config import settings
from peiwan.core.security import get_password_hash
from peiwan.models import Role, User

API = settings.api_v1_prefix
ADMIN_PASSWORD = "admin-password"


def _login(client, username, password):
    response = client.post(f"{API}/auth/token", data={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _register(client, username, role):
    response = client.post(
        f"{API}/auth/register",
        json={"username": username, "password": "password123", "role": role},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def admin_headers(engine, client):
    with Session(engine) as session:
        session.add(User(username="root", hashed_password=get_password_hash(ADMIN_PASSWORD), role=Role.admin))
        session.commit()
    return _login(client, "root", ADMIN_PASSWORD)


class TestAuth:
    def test_register_and_read_me(self, client):
        created = _register(client, "player_a", "player")
        assert created["role"] == "player"
        assert "hashed_password" not in created

        headers = _login(client, "player_a", "password123")
        me = client.get(f"{API}/users/me", headers=headers)
        assert me.status_code == 200
        assert me.json()["username"] == "player_a"

        account = client.get(f"{API}/users/me/account", headers=headers)
        assert account.status_code == 200
        assert Decimal(account.json()["available_balance"]) == Decimal("0")

    def test_cannot_self_register_as_admin(self, client):
        response = client.post(
            f"{API}/auth/register",
            json={"username": "sneaky", "password": "password123", "role": "admin"},
        )
        assert response.status_code == 422

    def test_duplicate_username(self, client):
        _register(client, "dup_user", "customer")
        response = client.post(
            f"{API}/auth/register",
            json={"username": "dup_user", "password": "password123"},
        )
        assert response.status_code == 400

    def test_wrong_password(self, client):
        _register(client, "someone", "customer")
        response = client.post(f"{API}/auth/token", data={"username": "someone", "password": "nope-nope"})
        assert response.status_code == 401

    def test_requires_token(self, client):
        assert client.get(f"{API}/users/me").status_code == 401


class TestSettlementFlow:
    def test_tip_review_and_withdraw(self, client, admin_headers):
        player_id = _register(client, "player_b", "player")["id"]
        _register(client, "customer_b", "customer")
        player = _login(client, "player_b", "password123")
        customer = _login(client, "customer_b", "password123")

        gift = client.post(f"{API}/admin/gifts", json={"name": "奶茶", "price": "20.00"}, headers=admin_headers)
        assert gift.status_code == 201, gift.text
        gift_id = gift.json()["id"]
        assert [g["id"] for g in client.get(f"{API}/gifts").json()] == [gift_id]

        order = client.post(f"{API}/orders", json={"player_id": player_id, "amount": "100"}, headers=customer)
        assert order.status_code == 201, order.text
        order_id = order.json()["order_id"]
        assert client.post(f"{API}/orders/{order_id}/accept", headers=player).json()["status"] == "in_progress"
        assert client.post(f"{API}/orders/{order_id}/finish", headers=player).json()["status"] == "pending_review"

        tip = client.post(
            f"{API}/gifts/records",
            json={"order_id": order_id, "player_id": player_id, "gift_id": gift_id, "quantity": 3},
            headers=customer,
        )
        assert tip.status_code == 201, tip.text
        assert Decimal(tip.json()["total_price"]) == Decimal("60.00")
        assert Decimal(tip.json()["platform_fee"]) == Decimal("6.00")
        assert tip.json()["is_settled"] is False

        received = client.get(f"{API}/gifts/records/received", headers=player).json()
        assert [r["id"] for r in received] == [tip.json()["id"]]

        review = client.post(f"{API}/admin/orders/{order_id}/complete", headers=admin_headers)
        assert review.status_code == 200, review.text
        assert review.json()["settled_gift_count"] == 1
        assert Decimal(review.json()["total_player_earning"]) == Decimal("54.00")
        assert review.json()["order"]["status"] == "completed"

        again = client.post(f"{API}/admin/orders/{order_id}/complete", headers=admin_headers)
        assert again.status_code == 409
        assert again.json()["error_code"] == "INVALID_STATE"

        self_tip = client.post(
            f"{API}/gifts/records",
            json={"order_id": order_id, "player_id": player_id, "gift_id": gift_id, "quantity": 100},
            headers=player,
        )
        assert self_tip.status_code == 409

        account = client.get(f"{API}/users/me/account", headers=player).json()
        assert Decimal(account["available_balance"]) == Decimal("54.00")

        too_much = client.post(f"{API}/withdrawals", json={"amount": "100"}, headers=player)
        assert too_much.status_code == 400
        assert too_much.json()["error_code"] == "INSUFFICIENT_BALANCE"

        withdrawal = client.post(
            f"{API}/withdrawals",
            json={"amount": "50", "alipay_account": "player_b@example.com"},
            headers=player,
        )
        assert withdrawal.status_code == 201, withdrawal.text
        withdrawal_id = withdrawal.json()["withdrawal_id"]
        assert Decimal(withdrawal.json()["platform_fee"]) == Decimal("5.00")
        assert Decimal(withdrawal.json()["final_amount"]) == Decimal("45.00")

        no_notes = client.post(
            f"{API}/admin/withdrawals/{withdrawal_id}/process",
            json={"status": "rejected"},
            headers=admin_headers,
        )
        assert no_notes.status_code == 422

        approved = client.post(
            f"{API}/admin/withdrawals/{withdrawal_id}/process",
            json={"status": "approved", "notes": "已打款"},
            headers=admin_headers,
        )
        assert approved.status_code == 200, approved.text
        assert approved.json()["status"] == "approved"

        twice = client.post(
            f"{API}/admin/withdrawals/{withdrawal_id}/process",
            json={"status": "approved"},
            headers=admin_headers,
        )
        assert twice.status_code == 409

        account = client.get(f"{API}/users/me/account", headers=player).json()
        assert Decimal(account["available_balance"]) == Decimal("4.00")
        logs = client.get(f"{API}/users/me/balance-logs", headers=player).json()
        assert sorted(Decimal(log["amount"]) for log in logs) == [Decimal("-50.00"), Decimal("54.00")]

        activities = client.get(f"{API}/users/me/activities", headers=player).json()
        action_types = {entry["action_type"] for entry in activities}
        assert {"registered", "order_created", "gift_received", "order_completed", "withdrawal_approved"} <= action_types
        assert withdrawal_id in {entry["reference"] for entry in activities}

        page = client.get(f"{API}/admin/withdrawals", params={"status": "approved"}, headers=admin_headers).json()
        assert page["total"] == 1
        assert page["withdrawals"][0]["withdrawal_id"] == withdrawal_id

        stats = client.get(f"{API}/admin/statistics", headers=admin_headers).json()
        assert Decimal(stats["gift_platform_fee"]) == Decimal("6.00")
        assert Decimal(stats["withdrawal_platform_fee"]) == Decimal("5.00")
        assert Decimal(stats["total_platform_income"]) == Decimal("11.00")

    def test_customer_cannot_review(self, client, admin_headers):
        _register(client, "customer_c", "customer")
        customer = _login(client, "customer_c", "password123")
        response = client.post(f"{API}/admin/orders/ORD-x/complete", headers=customer)
        assert response.status_code == 403

    def test_unknown_order_is_404(self, client, admin_headers):
        response = client.post(f"{API}/admin/orders/ORD-missing/complete", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"


class TestCommissionConfig:
    def test_update_rate(self, client, admin_headers):
        assert Decimal(client.get(f"{API}/public/config").json()["commission_rate"]) == Decimal("10.00")

        invalid = client.put(f"{API}/admin/config/commission", json={"commission_rate": "150"}, headers=admin_headers)
        assert invalid.status_code == 422

        updated = client.put(f"{API}/admin/config/commission", json={"commission_rate": "20"}, headers=admin_headers)
        assert updated.status_code == 200, updated.text
        assert Decimal(updated.json()["commission_rate"]) == Decimal("20.00")

        assert Decimal(client.get(f"{API}/public/config").json()["commission_rate"]) == Decimal("20.00")
        current = client.get(f"{API}/admin/config/commission", headers=admin_headers).json()
        assert current["updated_by"] is not None

    def test_gift_soft_delete(self, client, admin_headers):
        gift_id = client.post(
            f"{API}/admin/gifts", json={"name": "跑车", "price": "520.00"}, headers=admin_headers
        ).json()["id"]

        repriced = client.patch(f"{API}/admin/gifts/{gift_id}", json={"price": "521.00"}, headers=admin_headers)
        assert Decimal(repriced.json()["price"]) == Decimal("521.00")

        for field in ("name", "price", "is_active"):
            nulled = client.patch(f"{API}/admin/gifts/{gift_id}", json={field: None}, headers=admin_headers)
            assert nulled.status_code == 422, nulled.text
        cleared = client.patch(f"{API}/admin/gifts/{gift_id}", json={"image_url": None}, headers=admin_headers)
        assert cleared.status_code == 200
        assert cleared.json()["image_url"] is None
        assert cleared.json()["name"] == "跑车"

        removed = client.delete(f"{API}/admin/gifts/{gift_id}", headers=admin_headers)
        assert removed.status_code == 200
        assert removed.json()["is_active"] is False
        assert client.get(f"{API}/gifts").json() == []
