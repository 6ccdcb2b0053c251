import enum
from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gachaapi.models.base import BaseModel, BigIntPK


class FulfillmentStatusEnum(enum.Enum):
    PENDING = "pending"
    PLACED = "placed"
    FAILED = "failed"


class GachaFulfillmentOrder(BaseModel):
    """당첨 아이템의 Haravan 주문 생성 시도 결과"""

    __tablename__ = "gacha_fulfillment_orders"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    item_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("gacha_items.id"), nullable=False
    )
    spin_history_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("gacha_spin_history.id"), nullable=False
    )
    haravan_product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=FulfillmentStatusEnum.PENDING.value
    )
    external_order_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
