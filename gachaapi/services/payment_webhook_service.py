"""
Haravan order-paid 웹훅 -> xu 적립

웹훅은 최소 1회 전달(중복 가능)이므로 주문 ID 를 processed_payment_events 에
적립과 같은 트랜잭션으로 기록해 주문당 정확히 한 번만 적립한다.
조건에 맞지 않는 이벤트(미결제, xu 상품 아님)는 기록하지 않는다.
"""

import logging
from decimal import ROUND_FLOOR, Decimal
from typing import Optional

from sqlalchemy.orm import Session

from gachaapi.config import Settings, get_settings
from gachaapi.repositories.balance_repository import BalanceRepository
from gachaapi.repositories.payment_event_repository import PaymentEventRepository
from gachaapi.schemas.webhook import (
    HaravanOrderEvent,
    PaymentApplyResult,
    PaymentOutcome,
)

logger = logging.getLogger(__name__)

PAID_STATUS = "paid"


class PaymentWebhookService:
    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.balance_repo = BalanceRepository(db)
        self.event_repo = PaymentEventRepository(db)

    def calculate_credit(self, event: HaravanOrderEvent) -> int:
        """xu 상품 라인의 price x quantity 합 / 환율 (내림)"""
        product_id = self.settings.XU_PRODUCT_ID
        if not product_id:
            return 0

        total = sum(
            (
                line.price * line.quantity
                for line in event.line_items
                if line.product_id == product_id
            ),
            Decimal(0),
        )
        rate = Decimal(self.settings.XU_EXCHANGE_RATE)
        return int((total / rate).to_integral_value(rounding=ROUND_FLOOR))

    def apply_external_payment(self, event: HaravanOrderEvent) -> PaymentApplyResult:
        order_id = event.id
        customer_id = event.customer.id

        if event.financial_status != PAID_STATUS:
            logger.info(
                f"Order {order_id} not paid (financial_status={event.financial_status}), skipping"
            )
            return PaymentApplyResult(
                order_id=order_id,
                customer_id=customer_id,
                outcome=PaymentOutcome.NOT_PAID,
            )

        credit_amount = self.calculate_credit(event)
        if credit_amount <= 0:
            logger.info(f"Order {order_id} contains no xu product, skipping")
            return PaymentApplyResult(
                order_id=order_id,
                customer_id=customer_id,
                outcome=PaymentOutcome.NOT_CURRENCY_ORDER,
            )

        try:
            if not self.event_repo.mark_processed(order_id, customer_id, credit_amount):
                self.db.rollback()
                logger.info(f"Order {order_id} already credited, ignoring duplicate")
                return PaymentApplyResult(
                    order_id=order_id,
                    customer_id=customer_id,
                    outcome=PaymentOutcome.DUPLICATE,
                )

            new_balance = self.balance_repo.credit(customer_id, credit_amount, commit=False)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to credit xu for order {order_id}: {str(e)}")
            raise

        logger.info(
            f"Credited {credit_amount} xu to customer {customer_id} for order {order_id}, "
            f"balance {new_balance}"
        )
        return PaymentApplyResult(
            order_id=order_id,
            customer_id=customer_id,
            outcome=PaymentOutcome.CREDITED,
            credited_xu=credit_amount,
            current_xu=new_balance,
        )
