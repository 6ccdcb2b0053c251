from sqlalchemy.orm import Session
from pydantic import BaseModel

from gachaapi.models.payments import ProcessedPaymentEvent
from gachaapi.repositories.base import BaseRepository


class ProcessedPaymentEventSchema(BaseModel):
    external_order_id: str
    customer_id: str
    credited_amount: int

    class Config:
        from_attributes = True


class PaymentEventRepository(
    BaseRepository[ProcessedPaymentEvent, ProcessedPaymentEventSchema]
):
    """웹훅 주문 ID 처리 이력 (멱등성 키)"""

    def __init__(self, db: Session):
        super().__init__(ProcessedPaymentEvent, ProcessedPaymentEventSchema, db)

    def mark_processed(self, order_id: str, customer_id: str, credited_amount: int) -> bool:
        """처리 이력 기록 - 이미 처리된 주문이면 False (커밋하지 않음)"""
        inserted = self.insert_ignore(
            ["external_order_id"],
            external_order_id=order_id,
            customer_id=customer_id,
            credited_amount=credited_amount,
        )
        return inserted > 0
