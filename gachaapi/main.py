import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from gachaapi.containers import Container
from gachaapi.core.exception_handlers import (
    handle_base_api_exception,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from gachaapi.core.exceptions import BaseAPIException
from gachaapi.core.logging_middleware import LoggingMiddleware
from gachaapi.logging_config import setup_logging
from gachaapi.routers import gacha_router, health_router, user_router, webhook_router

load_dotenv("gachaapi/.env")

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> FastAPI:
    container = container or Container()
    settings = container.config.config()

    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{settings.APP_NAME} starting ({settings.ENVIRONMENT})")
        yield
        container.database.engine().dispose()
        logger.info(f"{settings.APP_NAME} stopped")

    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)
    app.container = container  # type: ignore

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseAPIException, handle_base_api_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    @app.get("/")
    def hello() -> dict:
        return {"message": f"{settings.APP_NAME} is running"}

    app.include_router(health_router.router)
    app.include_router(gacha_router.router)
    app.include_router(user_router.router)
    app.include_router(webhook_router.router)

    return app


app = create_app()

handler = Mangum(app)
