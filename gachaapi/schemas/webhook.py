"""Haravan order-paid 웹훅 페이로드 스키마"""

import enum
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gachaapi.schemas.gacha import coerce_external_id


class HaravanCustomer(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, max_length=64)

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value):
        return coerce_external_id(value)


class HaravanLineItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    product_id: Optional[str] = Field(None, max_length=64)
    price: Decimal = Field(Decimal(0), ge=0)
    quantity: int = Field(0, ge=0)

    @field_validator("product_id", mode="before")
    @classmethod
    def normalize_product_id(cls, value):
        if value is None:
            return value
        return coerce_external_id(value)


class HaravanOrderEvent(BaseModel):
    """필수 필드만 검증하고 나머지는 무시"""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, max_length=64)
    financial_status: Optional[str] = None
    customer: HaravanCustomer
    line_items: List[HaravanLineItem]

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value):
        return coerce_external_id(value)


class PaymentOutcome(str, enum.Enum):
    CREDITED = "CREDITED"
    DUPLICATE = "DUPLICATE"
    NOT_PAID = "NOT_PAID"
    NOT_CURRENCY_ORDER = "NOT_CURRENCY_ORDER"


class PaymentApplyResult(BaseModel):
    order_id: str
    customer_id: str
    outcome: PaymentOutcome
    credited_xu: int = 0
    current_xu: Optional[int] = None


class WebhookAckResponse(BaseModel):
    received: bool = True
    outcome: PaymentOutcome
    credited_xu: int = 0
    current_xu: Optional[int] = None
