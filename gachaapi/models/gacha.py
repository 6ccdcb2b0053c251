"""
가챠 데이터 모델

- GachaItem: 풀(pool)에 속한 상품과 추첨 가중치
- UserXuBalance: 사용자별 xu 잔액 (음수 불가)
- UserGachaInventory: 사용자 x 아이템 별 보유 수량
- GachaSpinHistory: 추첨 시도 감사 기록 (불변)
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.schema import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from gachaapi.models.base import BaseModel, BigIntPK


class GachaRank(enum.Enum):
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"

    @property
    def sort_order(self) -> int:
        return _RANK_ORDER[self]


_RANK_ORDER = {
    GachaRank.S: 1,
    GachaRank.A: 2,
    GachaRank.B: 3,
    GachaRank.C: 4,
    GachaRank.D: 5,
    GachaRank.F: 6,
}


class InventoryStatusEnum(enum.Enum):
    OWNED = "owned"
    PENDING_DELIVERY = "pending_delivery"
    DELIVERED = "delivered"


class SpinStatusEnum(enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"
    REFUNDED = "refunded"


class DrawFailureKind(str, enum.Enum):
    """환불된 추첨 기록의 error_kind"""

    NO_ELIGIBLE_ITEMS = "NO_ELIGIBLE_ITEMS"
    MISCONFIGURED_POOL = "MISCONFIGURED_POOL"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class GachaItem(BaseModel):
    __tablename__ = "gacha_items"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    # Haravan 상품과 연결되지 않은 아이템도 있음
    haravan_product_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    rank: Mapped[str] = mapped_column(String(1), nullable=False)
    base_price: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    gacha_pool_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)


class UserXuBalance(BaseModel):
    __tablename__ = "user_xu_balances"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_user_xu_balances_amount_non_negative"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class UserGachaInventory(BaseModel):
    __tablename__ = "user_gacha_inventory"
    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="uq_user_gacha_inventory_user_item"),
        CheckConstraint("quantity >= 0", name="ck_user_gacha_inventory_quantity"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    item_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("gacha_items.id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=InventoryStatusEnum.OWNED.value
    )


class GachaSpinHistory(BaseModel):
    """
    추첨 시도 기록 - 생성 후 수정하지 않음

    item_id 가 NULL 이면 실패(환불)된 시도이며 error_kind 에 안정적인 실패 유형이 남는다.
    아이템 이름/이미지는 저장하지 않고 조회 시점에 조인으로 채운다.
    """

    __tablename__ = "gacha_spin_history"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    item_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("gacha_items.id"), nullable=True
    )
    amount_debited: Mapped[int] = mapped_column(BigInteger, nullable=False)
    gacha_pool_id: Mapped[str] = mapped_column(String(128), nullable=False)
    draw_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    spin_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=SpinStatusEnum.SUCCESS.value
    )
    error_kind: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
