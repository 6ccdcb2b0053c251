import logging
from typing import Optional

from sqlalchemy.orm import sessionmaker

from gachaapi.config import Settings
from gachaapi.database.session import get_db_context
from gachaapi.models.gacha import InventoryStatusEnum
from gachaapi.providers.commerce.haravan import HaravanClient
from gachaapi.providers.queue.events import FulfillmentRetryEvent
from gachaapi.providers.queue.sqs import SQSClient
from gachaapi.repositories.fulfillment_repository import FulfillmentRepository
from gachaapi.repositories.inventory_repository import InventoryRepository
from gachaapi.schemas.gacha import FulfillmentRequest

logger = logging.getLogger(__name__)


class FulfillmentService:
    """
    당첨 아이템의 Haravan 주문 생성 (best-effort)

    추첨 응답 이후 BackgroundTask 로 실행되며 요청 세션과 별개의 세션을 연다.
    실패해도 추첨/차감/인벤토리는 되돌리지 않고 gacha_fulfillment_orders 에 failed 로 남긴 뒤
    재시도 큐가 설정되어 있으면 SQS 로 재시도 메시지를 보낸다.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        haravan_client: HaravanClient,
        settings: Settings,
        sqs_client: Optional[SQSClient] = None,
    ):
        self.session_factory = session_factory
        self.haravan_client = haravan_client
        self.settings = settings
        self.sqs_client = sqs_client

    @staticmethod
    def build_note(request: FulfillmentRequest) -> str:
        return (
            f"Gacha reward: {request.item_name} "
            f"(pool {request.gacha_pool_id}, draw {request.draw_id})"
        )

    async def place_reward_order(self, request: FulfillmentRequest) -> Optional[str]:
        """주문 생성 시도 - 성공하면 Haravan 주문 ID, 실패하면 None (예외를 올리지 않음)"""
        try:
            with get_db_context(self.session_factory) as db:
                order = FulfillmentRepository(db).create_pending(
                    user_id=request.user_id,
                    item_id=request.item_id,
                    spin_history_id=request.spin_history_id,
                    haravan_product_id=request.haravan_product_id,
                )
        except Exception as e:
            logger.error(
                f"Failed to record fulfillment for draw {request.draw_id}: {str(e)}"
            )
            return None

        try:
            external_order_id = await self.haravan_client.create_order(
                product_id=request.haravan_product_id,
                customer_id=request.user_id,
                note=self.build_note(request),
            )
        except Exception as e:
            self._handle_failure(order.id, request, str(e))
            return None

        try:
            with get_db_context(self.session_factory) as db:
                FulfillmentRepository(db).mark_placed(
                    order.id, external_order_id, commit=False
                )
                InventoryRepository(db).set_status(
                    request.user_id,
                    request.item_id,
                    InventoryStatusEnum.PENDING_DELIVERY,
                    commit=False,
                )
        except Exception as e:
            logger.error(
                f"Haravan order {external_order_id} placed but fulfillment {order.id} "
                f"could not be updated: {str(e)}"
            )
            return external_order_id

        logger.info(
            f"Fulfillment {order.id} placed as Haravan order {external_order_id} "
            f"for draw {request.draw_id}"
        )
        return external_order_id

    def _handle_failure(
        self, order_id: int, request: FulfillmentRequest, error_message: str
    ) -> None:
        logger.error(
            f"Haravan order creation failed for draw {request.draw_id} "
            f"(user {request.user_id}, product {request.haravan_product_id}): {error_message}"
        )

        try:
            with get_db_context(self.session_factory) as db:
                FulfillmentRepository(db).mark_failed(order_id, error_message, commit=False)
        except Exception as e:
            logger.error(f"Failed to mark fulfillment {order_id} as failed: {str(e)}")

        self._publish_retry(order_id, request, error_message)

    def _publish_retry(
        self, order_id: int, request: FulfillmentRequest, error_message: str
    ) -> None:
        queue_url = self.settings.FULFILLMENT_RETRY_QUEUE_URL
        if not queue_url or self.sqs_client is None:
            return

        event = FulfillmentRetryEvent(
            fulfillment_order_id=order_id,
            user_id=request.user_id,
            item_id=request.item_id,
            haravan_product_id=request.haravan_product_id,
            spin_history_id=request.spin_history_id,
            error_message=error_message,
        )
        try:
            message_id = self.sqs_client.send_message(
                queue_url, event, delay_seconds=self.settings.FULFILLMENT_RETRY_DELAY_SECONDS
            )
            logger.info(f"Fulfillment {order_id} queued for retry: {message_id}")
        except Exception as e:
            logger.error(f"Failed to queue fulfillment {order_id} for retry: {str(e)}")
