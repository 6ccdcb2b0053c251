from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from gachaapi.config import Settings

logger = logging.getLogger(__name__)

GACHA_REWARD_TAG = "Gacha_Reward"


class CommerceAPIError(Exception):
    """Haravan Admin API 연동 중 발생한 오류를 표현합니다."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        self.status_code = status_code
        self.message = message
        self.body = body
        super().__init__(message)


class HaravanClient:
    """Haravan Admin API 클라이언트 (주문 생성)"""

    _ORDERS_PATH = "/orders.json"

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = settings.haravan_admin_base_url.rstrip("/")
        self._access_token = settings.HARAVAN_ACCESS_TOKEN
        self._timeout = httpx.Timeout(settings.HARAVAN_TIMEOUT_SECONDS, connect=5.0)
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._access_token}",
        }

    @staticmethod
    def build_reward_order(
        product_id: str, customer_id: str, note: str, tags: str = GACHA_REWARD_TAG
    ) -> Dict[str, Any]:
        """xu 로 이미 지불된 당첨 아이템 주문 (0원, paid)"""
        return {
            "order": {
                "line_items": [
                    {
                        "product_id": product_id,
                        "quantity": 1,
                        "price": 0,
                    }
                ],
                "customer": {"id": customer_id},
                "financial_status": "paid",
                "note": note,
                "tags": tags,
            }
        }

    async def create_order(
        self, product_id: str, customer_id: str, note: str, tags: str = GACHA_REWARD_TAG
    ) -> str:
        """주문 생성 후 Haravan 주문 ID 반환"""
        payload = self.build_reward_order(product_id, customer_id, note, tags)

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self._ORDERS_PATH, json=payload, headers=self._headers()
                )
        except httpx.TimeoutException as exc:
            raise CommerceAPIError("Haravan order request timed out") from exc
        except httpx.RequestError as exc:
            raise CommerceAPIError(f"Haravan request error: {exc}") from exc

        if response.status_code >= 400:
            raise CommerceAPIError(
                f"Haravan order creation failed with {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            order_id = response.json()["order"]["id"]
        except (ValueError, KeyError, TypeError) as exc:
            raise CommerceAPIError(
                "Unexpected Haravan order response",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        logger.info(f"Haravan order {order_id} created for product {product_id}")
        return str(order_id)
