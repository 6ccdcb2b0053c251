"""
가챠 API 라우터

- POST /api/gacha/spin: 추첨 1회 (xu 차감, 실패 시 환불)
- GET /api/gacha/items: 활성 아이템 목록
- GET /api/gacha/history: 추첨 기록 (최신순)
"""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request

from gachaapi.config import Settings
from gachaapi.deps import get_app_settings, get_fulfillment_service, get_gacha_service
from gachaapi.schemas.gacha import (
    GachaItemPublic,
    SpinHistoryResponse,
    SpinRequest,
    SpinResponse,
)
from gachaapi.services.fulfillment_service import FulfillmentService
from gachaapi.services.gacha_service import GachaService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/gacha", tags=["gacha"])


def _client_ip(request: Request, trusted_proxy_count: int) -> Optional[str]:
    """감사 기록용 클라이언트 IP

    X-Forwarded-For 는 오른쪽에서부터 신뢰하는 프록시 수만큼만 인정한다.
    가장 바깥 신뢰 프록시가 덧붙인 항목이 클라이언트 주소이고 그 왼쪽은 클라이언트가 보낸 값이다.
    """
    peer = request.client.host if request.client else None
    if trusted_proxy_count <= 0:
        return peer

    forwarded = request.headers.get("x-forwarded-for", "")
    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    if not hops:
        return peer
    return hops[-min(trusted_proxy_count, len(hops))]


@router.post("/spin", response_model=SpinResponse)
async def spin(
    payload: SpinRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    gacha_service: GachaService = Depends(get_gacha_service),
    fulfillment_service: FulfillmentService = Depends(get_fulfillment_service),
    settings: Settings = Depends(get_app_settings),
) -> SpinResponse:
    """가챠 추첨

    HTTP Status:
        200: 당첨
        402: 잔액 부족 (status=insufficient_xu)
        404: 풀에 활성 아이템 없음 (status=refunded_xu)
        500: 풀 설정 오류/내부 오류 (status=refunded_xu), 환불 실패 (status=critical_error)
    """
    result = gacha_service.execute_draw(
        user_id=payload.customer_id,
        pool_id=payload.gacha_pool_id,
        cost=payload.gacha_cost,
        ip_address=_client_ip(request, settings.TRUSTED_PROXY_COUNT),
    )

    # Haravan 주문은 응답을 보낸 뒤에 시도
    if result.fulfillment is not None:
        background_tasks.add_task(
            fulfillment_service.place_reward_order, result.fulfillment
        )

    return result.response


@router.get("/items", response_model=List[GachaItemPublic])
async def list_items(
    gacha_pool_id: Optional[str] = Query(None, description="풀 ID (없으면 전체)"),
    gacha_service: GachaService = Depends(get_gacha_service),
) -> List[GachaItemPublic]:
    return gacha_service.list_items(gacha_pool_id)


@router.get("/history", response_model=SpinHistoryResponse)
async def get_history(
    customer_id: Optional[str] = Query(None, description="고객 ID (없으면 전체)"),
    limit: int = Query(10, ge=1, description="페이지 크기 (최대 100)"),
    offset: int = Query(0, ge=0, description="오프셋"),
    gacha_service: GachaService = Depends(get_gacha_service),
) -> SpinHistoryResponse:
    return gacha_service.get_history(user_id=customer_id, limit=limit, offset=offset)
