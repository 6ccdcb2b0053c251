from typing import Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from gachaapi.config import Settings
from gachaapi.containers import Container
from gachaapi.database.session import session_scope

# Services
from gachaapi.services.balance_service import BalanceService
from gachaapi.services.fulfillment_service import FulfillmentService
from gachaapi.services.gacha_service import GachaService
from gachaapi.services.payment_webhook_service import PaymentWebhookService


def get_container(request: Request) -> Container:
    return request.app.container


def get_app_settings(container: Container = Depends(get_container)) -> Settings:
    return container.config.config()


def get_db(container: Container = Depends(get_container)) -> Iterator[Session]:
    yield from session_scope(container.database.session_factory())


def get_balance_service(db: Session = Depends(get_db)) -> BalanceService:
    return BalanceService(db=db)


def get_gacha_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    container: Container = Depends(get_container),
) -> GachaService:
    return GachaService(
        db=db,
        selector=container.clients.draw_selector(),
        settings=settings,
    )


def get_payment_webhook_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PaymentWebhookService:
    return PaymentWebhookService(db=db, settings=settings)


def get_fulfillment_service(
    container: Container = Depends(get_container),
) -> FulfillmentService:
    return container.clients.fulfillment_service()
