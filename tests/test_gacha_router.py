from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from gachaapi.database.session import session_scope
from gachaapi.deps import get_app_settings, get_db, get_fulfillment_service
from gachaapi.main import create_app


@pytest.fixture
def fulfillment_service():
    return Mock()


@pytest.fixture
def client(session_factory, settings, fulfillment_service):
    """테스트 클라이언트 픽스처 (sqlite 세션 + 주문 생성 mock)"""
    app = create_app()

    def override_get_db():
        yield from session_scope(session_factory)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_fulfillment_service] = lambda: fulfillment_service
    return TestClient(app)


def spin(client, customer_id="cust-1", cost=10, pool_id="pool-1"):
    return client.post(
        "/api/gacha/spin",
        json={"customer_id": customer_id, "gacha_cost": cost, "gacha_pool_id": pool_id},
    )


class TestSpinRoute:
    """POST /api/gacha/spin"""

    def test_spin_success(self, client, set_balance, add_item, fulfillment_service):
        # Given
        set_balance("cust-1", 100)
        item = add_item(name="Miku Keychain", rank="C", base_price=120000)

        # When
        response = spin(client, cost=30)

        # Then
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "success"
        assert data["draw_id"]
        assert data["won_item_id"] == item.id
        assert data["won_item_details"] == {
            "name": "Miku Keychain",
            "image_url": item.image_url,
            "rank": "C",
            "price": 120000,
        }
        assert data["current_xu"] == 70
        # 연결된 Haravan 상품이 없으면 주문 생성 안 함
        fulfillment_service.place_reward_order.assert_not_called()

    def test_spin_schedules_fulfillment(self, client, set_balance, add_item, fulfillment_service):
        # Given
        set_balance("cust-1", 100)
        add_item(haravan_product_id="1055")

        # When
        response = spin(client)

        # Then
        assert response.status_code == 200
        fulfillment_service.place_reward_order.assert_called_once()
        request = fulfillment_service.place_reward_order.call_args.args[0]
        assert request.haravan_product_id == "1055"
        assert request.draw_id == response.json()["draw_id"]

    def test_numeric_customer_id_is_coerced(self, client, set_balance, add_item):
        set_balance("12345", 50)
        add_item()

        response = spin(client, customer_id=12345)

        assert response.status_code == 200
        assert response.json()["current_xu"] == 40

    @pytest.mark.parametrize("customer_id", [12345.5, 12344.9])
    def test_fractional_customer_id_is_rejected(
        self, client, set_balance, add_item, balance_of, customer_id
    ):
        """소수 고객 ID 를 잘라서 다른 고객 잔액을 차감하지 않음"""
        # Given
        set_balance("12345", 50)
        set_balance("12344", 50)
        add_item()

        # When
        response = spin(client, customer_id=customer_id)

        # Then
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_001"
        assert balance_of("12345") == 50
        assert balance_of("12344") == 50

    def test_insufficient_xu(self, client, set_balance, add_item, balance_of):
        # Given
        set_balance("cust-1", 100)
        add_item()

        # When
        response = spin(client, cost=150)

        # Then
        assert response.status_code == 402
        data = response.json()
        assert data["success"] is False
        assert data["status"] == "insufficient_xu"
        assert data["error"]["code"] == "INSUFFICIENT_XU"
        assert balance_of("cust-1") == 100

    def test_empty_pool_refunded(self, client, set_balance, balance_of):
        # Given
        set_balance("cust-1", 100)

        # When
        response = spin(client, cost=50, pool_id="nothing-here")

        # Then
        assert response.status_code == 404
        data = response.json()
        assert data["status"] == "refunded_xu"
        assert data["error"]["code"] == "NO_ELIGIBLE_ITEMS"
        assert data["error"]["details"]["refunded_xu"] == 50
        assert balance_of("cust-1") == 100

    def test_misconfigured_pool_refunded(self, client, set_balance, add_item, balance_of):
        set_balance("cust-1", 100)
        add_item(weight=0)

        response = spin(client, cost=50)

        assert response.status_code == 500
        assert response.json()["status"] == "refunded_xu"
        assert response.json()["error"]["code"] == "MISCONFIGURED_POOL"
        assert balance_of("cust-1") == 100

    @pytest.mark.parametrize(
        "body",
        [
            {"gacha_cost": 10, "gacha_pool_id": "pool-1"},
            {"customer_id": "c", "gacha_cost": 0, "gacha_pool_id": "pool-1"},
            {"customer_id": "c", "gacha_cost": 10, "gacha_pool_id": ""},
        ],
    )
    def test_invalid_body(self, client, body):
        response = client.post("/api/gacha/spin", json=body)

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_001"


class TestSpinClientIp:
    """추첨 기록의 ip_address"""

    def spin_from(self, client, forwarded_for):
        return client.post(
            "/api/gacha/spin",
            json={"customer_id": "cust-1", "gacha_cost": 10, "gacha_pool_id": "pool-1"},
            headers={"X-Forwarded-For": forwarded_for},
        )

    def test_forwarded_for_ignored_without_trusted_proxy(
        self, client, set_balance, add_item, history_rows
    ):
        # Given
        set_balance("cust-1", 100)
        add_item()

        # When
        self.spin_from(client, "6.6.6.6")

        # Then
        assert history_rows("cust-1")[0].ip_address == "testclient"

    def test_spoofed_hop_left_of_trusted_proxy_is_ignored(
        self, client, settings, set_balance, add_item, history_rows
    ):
        """클라이언트가 보낸 값(6.6.6.6) 뒤에 프록시가 실제 주소를 덧붙인 경우"""
        # Given
        settings.TRUSTED_PROXY_COUNT = 1
        set_balance("cust-1", 100)
        add_item()

        # When
        self.spin_from(client, "6.6.6.6, 203.0.113.7")

        # Then
        assert history_rows("cust-1")[0].ip_address == "203.0.113.7"

    def test_two_trusted_proxies(self, client, settings, set_balance, add_item, history_rows):
        settings.TRUSTED_PROXY_COUNT = 2
        set_balance("cust-1", 100)
        add_item()

        self.spin_from(client, "6.6.6.6, 203.0.113.7, 10.0.0.2")

        assert history_rows("cust-1")[0].ip_address == "203.0.113.7"

    def test_short_chain_uses_leftmost_hop(self, client, settings, set_balance, add_item, history_rows):
        settings.TRUSTED_PROXY_COUNT = 3
        set_balance("cust-1", 100)
        add_item()

        self.spin_from(client, "203.0.113.7, 10.0.0.2")

        assert history_rows("cust-1")[0].ip_address == "203.0.113.7"


class TestQueryRoutes:
    def test_items_filtered_by_pool(self, client, add_item):
        # Given
        add_item(name="Here", rank="S", pool_id="pool-1")
        add_item(name="There", rank="A", pool_id="pool-2")

        # When
        filtered = client.get("/api/gacha/items", params={"gacha_pool_id": "pool-1"})
        everything = client.get("/api/gacha/items")

        # Then
        assert filtered.status_code == 200
        assert [i["name"] for i in filtered.json()] == ["Here"]
        assert [i["name"] for i in everything.json()] == ["Here", "There"]

    def test_history(self, client, set_balance, add_item):
        # Given
        set_balance("cust-1", 100)
        add_item()
        spin(client)
        spin(client, pool_id="nothing-here")

        # When
        response = client.get(
            "/api/gacha/history", params={"customer_id": "cust-1", "limit": 10, "offset": 0}
        )

        # Then
        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 2
        assert data["has_next"] is False
        newest, oldest = data["history"]
        assert newest["status"] == "refunded"
        assert newest["item_id"] is None
        assert oldest["status"] == "success"
        assert oldest["item_name"] == "Miku Keychain"
        assert oldest["xu_deducted"] == 10

    def test_xu_balance(self, client, set_balance):
        set_balance("cust-1", 321)

        response = client.get("/api/user/xu-balance", params={"customer_id": "cust-1"})

        assert response.status_code == 200
        assert response.json() == {"customer_id": "cust-1", "xu_amount": 321}

    def test_xu_balance_creates_zero(self, client, balance_of):
        response = client.get("/api/user/xu-balance", params={"customer_id": "new"})

        assert response.json()["xu_amount"] == 0
        assert balance_of("new") == 0

    def test_xu_balance_missing_customer(self, client):
        response = client.get("/api/user/xu-balance")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST_001"

    def test_inventory(self, client, set_balance, add_item):
        set_balance("cust-1", 100)
        add_item()
        spin(client)
        spin(client)

        response = client.get("/api/user/inventory", params={"customer_id": "cust-1"})

        assert response.status_code == 200
        assert response.json()["total_quantity"] == 2
        assert response.json()["items"][0]["quantity"] == 2


class TestHealthRoutes:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "ok"

    def test_root(self, client):
        assert client.get("/").status_code == 200
