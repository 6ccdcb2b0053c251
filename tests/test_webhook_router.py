import pytest
from fastapi.testclient import TestClient

from gachaapi.database.session import session_scope
from gachaapi.deps import get_app_settings, get_db
from gachaapi.main import create_app

WEBHOOK_URL = "/haravan/webhook/order-paid"


@pytest.fixture
def client(session_factory, settings):
    app = create_app()

    def override_get_db():
        yield from session_scope(session_factory)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_app_settings] = lambda: settings
    return TestClient(app)


@pytest.fixture
def paid_order(settings):
    return {
        "id": 880001,
        "financial_status": "paid",
        "customer": {"id": 42, "email": "buyer@example.com"},
        "line_items": [
            {"product_id": settings.XU_PRODUCT_ID, "price": 20000, "quantity": 1},
        ],
    }


class TestOrderPaidWebhook:
    """POST /haravan/webhook/order-paid"""

    def test_credits_once(self, client, paid_order, balance_of):
        # When
        first = client.post(WEBHOOK_URL, json=paid_order)
        second = client.post(WEBHOOK_URL, json=paid_order)

        # Then
        assert first.status_code == 200
        assert first.json() == {
            "received": True,
            "outcome": "CREDITED",
            "credited_xu": 200,
            "current_xu": 200,
        }
        assert second.status_code == 200
        assert second.json()["outcome"] == "DUPLICATE"
        assert balance_of("42") == 200

    def test_not_paid_is_acknowledged(self, client, paid_order, balance_of):
        paid_order["financial_status"] = "pending"

        response = client.post(WEBHOOK_URL, json=paid_order)

        assert response.status_code == 200
        assert response.json()["received"] is True
        assert response.json()["outcome"] == "NOT_PAID"
        assert balance_of("42") is None

    def test_other_product_is_acknowledged(self, client, paid_order):
        paid_order["line_items"] = [{"product_id": 1, "price": 20000, "quantity": 1}]

        response = client.post(WEBHOOK_URL, json=paid_order)

        assert response.status_code == 200
        assert response.json()["outcome"] == "NOT_CURRENCY_ORDER"

    @pytest.mark.parametrize("missing", ["id", "customer", "line_items"])
    def test_missing_required_field(self, client, paid_order, missing):
        paid_order.pop(missing)

        response = client.post(WEBHOOK_URL, json=paid_order)

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["error"]["code"] == "INVALID_WEBHOOK_PAYLOAD"

    def test_customer_without_id(self, client, paid_order):
        paid_order["customer"] = {"email": "buyer@example.com"}

        response = client.post(WEBHOOK_URL, json=paid_order)

        assert response.status_code == 400

    def test_non_object_payload(self, client):
        response = client.post(WEBHOOK_URL, json=[1, 2, 3])

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_WEBHOOK_PAYLOAD"

    def test_invalid_json(self, client):
        response = client.post(
            WEBHOOK_URL,
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["order", "customer"])
    def test_fractional_id_is_rejected(self, client, paid_order, balance_of, field):
        """소수 ID 를 잘라서 다른 고객/주문으로 처리하지 않음"""
        # Given
        if field == "order":
            paid_order["id"] = 880001.5
        else:
            paid_order["customer"]["id"] = 42.9

        # When
        response = client.post(WEBHOOK_URL, json=paid_order)

        # Then
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_WEBHOOK_PAYLOAD"
        assert balance_of("42") is None

    def test_fractional_order_id_does_not_collide(self, client, paid_order, balance_of):
        # Given
        client.post(WEBHOOK_URL, json=paid_order)
        paid_order["id"] = 880001.5

        # When
        response = client.post(WEBHOOK_URL, json=paid_order)

        # Then
        assert response.status_code == 400
        assert balance_of("42") == 200

    def test_integral_float_id_is_accepted(self, client, paid_order, balance_of):
        paid_order["customer"]["id"] = 42.0

        response = client.post(WEBHOOK_URL, json=paid_order)

        assert response.status_code == 200
        assert balance_of("42") == 200

    @pytest.mark.parametrize("literal", ["Infinity", "-Infinity", "NaN"])
    def test_non_finite_id_is_rejected(self, client, balance_of, settings, literal):
        body = (
            '{"id": 880002, "financial_status": "paid", '
            f'"customer": {{"id": {literal}}}, '
            f'"line_items": [{{"product_id": "{settings.XU_PRODUCT_ID}", "price": 20000, "quantity": 1}}]}}'
        )

        response = client.post(
            WEBHOOK_URL,
            content=body.encode(),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_WEBHOOK_PAYLOAD"

    @pytest.mark.parametrize("field", ["order", "customer", "product"])
    def test_overlong_id_is_rejected(self, client, paid_order, field):
        """String(64) 컬럼보다 긴 ID 는 DB 에 닿기 전에 400"""
        long_id = "9" * 65
        if field == "order":
            paid_order["id"] = long_id
        elif field == "customer":
            paid_order["customer"]["id"] = long_id
        else:
            paid_order["line_items"][0]["product_id"] = long_id

        response = client.post(WEBHOOK_URL, json=paid_order)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_WEBHOOK_PAYLOAD"

    def test_id_at_column_limit_is_accepted(self, client, paid_order, balance_of):
        paid_order["customer"]["id"] = "c" * 64

        response = client.post(WEBHOOK_URL, json=paid_order)

        assert response.status_code == 200
        assert balance_of("c" * 64) == 200
