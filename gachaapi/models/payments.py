"""
외부 결제 이벤트 중복 처리 방지 테이블

Haravan 웹훅은 같은 주문에 대해 여러 번 도착할 수 있으므로
xu 적립 시 external_order_id 를 같은 트랜잭션 안에서 기록한다.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, String, func
from sqlalchemy.schema import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from gachaapi.models.base import BaseModel, BigIntPK


class ProcessedPaymentEvent(BaseModel):
    __tablename__ = "processed_payment_events"
    __table_args__ = (UniqueConstraint("external_order_id"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    external_order_id: Mapped[str] = mapped_column(String(64), nullable=False)
    customer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    credited_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
