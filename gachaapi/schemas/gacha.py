import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def coerce_external_id(value):
    # Haravan customer id 는 숫자로 오지만 내부에서는 불투명 문자열로 다룬다
    if isinstance(value, bool):
        raise ValueError("id must be a string or integer")
    if isinstance(value, float):
        # 소수/Infinity/NaN 은 잘라내지 않고 거절
        if not math.isfinite(value) or not value.is_integer():
            raise ValueError("id must be an integer, not a fractional or non-finite number")
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    return value


class GachaItemPublic(BaseModel):
    """프론트엔드 노출용 아이템 정보"""

    id: int = Field(..., description="아이템 ID")
    haravan_product_id: Optional[str] = Field(None, description="연결된 Haravan 상품 ID")
    name: str = Field(..., description="아이템 이름")
    image_url: str = Field(..., description="이미지 URL")
    rank: str = Field(..., description="등급 (S/A/B/C/D/F)")
    base_price: int = Field(0, description="참고 가격")
    weight: float = Field(..., description="추첨 가중치")
    gacha_pool_id: str = Field(..., description="풀 ID")

    class Config:
        from_attributes = True


class SpinRequest(BaseModel):
    """가챠 추첨 요청"""

    customer_id: str = Field(..., min_length=1, max_length=64, description="Haravan 고객 ID")
    gacha_cost: int = Field(..., gt=0, description="추첨 비용 (xu)")
    gacha_pool_id: str = Field(..., min_length=1, max_length=128, description="풀 ID")

    @field_validator("customer_id", mode="before")
    @classmethod
    def normalize_customer_id(cls, value):
        return coerce_external_id(value)


class WonItemDetails(BaseModel):
    name: str
    image_url: str
    rank: str
    price: int


class SpinResponse(BaseModel):
    """가챠 추첨 성공 응답"""

    status: str = "success"
    draw_id: str
    won_item_id: int
    won_item_details: WonItemDetails
    current_xu: int


class SpinHistoryEntry(BaseModel):
    """추첨 기록 (아이템 정보는 조회 시점 기준)"""

    id: int
    user_id: str
    item_id: Optional[int] = None
    item_name: str
    item_image: str
    gacha_pool_id: str
    xu_deducted: int
    status: str
    error_kind: Optional[str] = None
    spin_time: Optional[datetime] = None


class SpinHistoryResponse(BaseModel):
    history: List[SpinHistoryEntry]
    total_count: int
    has_next: bool


class InventoryEntry(BaseModel):
    item_id: int
    item_name: str
    item_image: str
    rank: Optional[str] = None
    quantity: int
    status: str


class InventoryResponse(BaseModel):
    customer_id: str
    items: List[InventoryEntry]
    total_quantity: int


class FulfillmentRequest(BaseModel):
    """응답 이후 백그라운드로 시도할 Haravan 주문 정보"""

    draw_id: str
    user_id: str
    item_id: int
    item_name: str
    gacha_pool_id: str
    haravan_product_id: str
    spin_history_id: int


class DrawResult(BaseModel):
    response: SpinResponse
    fulfillment: Optional[FulfillmentRequest] = None
