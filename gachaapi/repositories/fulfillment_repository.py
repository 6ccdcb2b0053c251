from typing import Optional
from sqlalchemy.orm import Session
from pydantic import BaseModel

from gachaapi.models.fulfillment import FulfillmentStatusEnum, GachaFulfillmentOrder
from gachaapi.repositories.base import BaseRepository


class FulfillmentOrderSchema(BaseModel):
    id: int
    user_id: str
    item_id: int
    spin_history_id: int
    haravan_product_id: str
    status: str
    external_order_id: Optional[str] = None
    error_message: Optional[str] = None
    attempts: int

    class Config:
        from_attributes = True


class FulfillmentRepository(BaseRepository[GachaFulfillmentOrder, FulfillmentOrderSchema]):
    """Haravan 주문 생성 시도 기록"""

    def __init__(self, db: Session):
        super().__init__(GachaFulfillmentOrder, FulfillmentOrderSchema, db)

    def create_pending(
        self, user_id: str, item_id: int, spin_history_id: int, haravan_product_id: str
    ) -> FulfillmentOrderSchema:
        return self.create(
            user_id=user_id,
            item_id=item_id,
            spin_history_id=spin_history_id,
            haravan_product_id=haravan_product_id,
            status=FulfillmentStatusEnum.PENDING.value,
            attempts=0,
        )

    def _finish(self, order_id: int, commit: bool = True, **values) -> bool:
        updated = (
            self.db.query(GachaFulfillmentOrder)
            .filter(GachaFulfillmentOrder.id == order_id)
            .update(
                {**values, "attempts": GachaFulfillmentOrder.attempts + 1},
                synchronize_session=False,
            )
        )
        if commit:
            self.db.commit()
        return updated > 0

    def mark_placed(self, order_id: int, external_order_id: str, commit: bool = True) -> bool:
        return self._finish(
            order_id,
            commit=commit,
            status=FulfillmentStatusEnum.PLACED.value,
            external_order_id=external_order_id,
            error_message=None,
        )

    def mark_failed(self, order_id: int, error_message: str, commit: bool = True) -> bool:
        return self._finish(
            order_id,
            commit=commit,
            status=FulfillmentStatusEnum.FAILED.value,
            error_message=error_message,
        )
