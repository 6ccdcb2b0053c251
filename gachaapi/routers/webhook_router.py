import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError as PydanticValidationError

from gachaapi.core.exceptions import InvalidWebhookPayloadError
from gachaapi.deps import get_payment_webhook_service
from gachaapi.schemas.webhook import HaravanOrderEvent, WebhookAckResponse
from gachaapi.services.payment_webhook_service import PaymentWebhookService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/haravan/webhook", tags=["webhook"])


async def _parse_order_event(request: Request) -> HaravanOrderEvent:
    # 형식 오류는 422 가 아니라 400 으로 응답
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidWebhookPayloadError("Request body is not valid JSON")

    if not isinstance(payload, dict):
        raise InvalidWebhookPayloadError("Webhook payload must be a JSON object")

    try:
        return HaravanOrderEvent.model_validate(payload)
    except PydanticValidationError as e:
        raise InvalidWebhookPayloadError(
            details={
                "errors": jsonable_encoder(
                    e.errors(include_url=False, include_context=False)
                )
            }
        )


@router.post("/order-paid", response_model=WebhookAckResponse)
async def order_paid(
    request: Request,
    webhook_service: PaymentWebhookService = Depends(get_payment_webhook_service),
) -> WebhookAckResponse:
    """Haravan orders/paid 웹훅 - 서명 검증은 앞단에서 처리된다고 가정"""
    event = await _parse_order_event(request)
    result = webhook_service.apply_external_payment(event)
    logger.info(f"Webhook order {result.order_id} handled: {result.outcome.value}")

    return WebhookAckResponse(
        outcome=result.outcome,
        credited_xu=result.credited_xu,
        current_xu=result.current_xu,
    )
