from typing import Optional

from fastapi import APIRouter, Depends, Query

from gachaapi.core.exceptions import BadRequestError
from gachaapi.deps import get_balance_service, get_gacha_service
from gachaapi.schemas.balance import XuBalanceResponse
from gachaapi.schemas.gacha import InventoryResponse
from gachaapi.services.balance_service import BalanceService
from gachaapi.services.gacha_service import GachaService

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/xu-balance", response_model=XuBalanceResponse)
async def get_xu_balance(
    customer_id: Optional[str] = Query(None, description="Haravan 고객 ID"),
    balance_service: BalanceService = Depends(get_balance_service),
) -> XuBalanceResponse:
    """xu 잔액 조회 - 레코드가 없으면 0 으로 생성"""
    if not customer_id:
        raise BadRequestError("Missing customer_id")
    return balance_service.get_balance(customer_id)


@router.get("/inventory", response_model=InventoryResponse)
async def get_inventory(
    customer_id: Optional[str] = Query(None, description="Haravan 고객 ID"),
    gacha_service: GachaService = Depends(get_gacha_service),
) -> InventoryResponse:
    if not customer_id:
        raise BadRequestError("Missing customer_id")
    return gacha_service.get_inventory(customer_id)
