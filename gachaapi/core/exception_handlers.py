import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .exceptions import (
    BaseAPIException,
    DrawCompensationError,
    DrawRefundedError,
    InternalServerError,
)

logger = logging.getLogger("gachaapi")


def _origin(request: Request) -> str:
    client = request.client.host if request.client else "-"
    return f"{request.method} {request.url.path} from {client}"


def _error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "success": False,
        "error": {"code": code, "message": message, "details": details or {}},
    }


def _draw_context(exc: BaseAPIException) -> str:
    """추첨 실패 응답이면 draw_id / 환불 정보를 로그에 붙인다"""
    if isinstance(exc, DrawRefundedError):
        return (
            f" draw={exc.draw_id} kind={exc.kind.value}"
            f" pool={exc.details.get('gacha_pool_id')} refunded_xu={exc.details.get('refunded_xu')}"
        )
    if isinstance(exc, DrawCompensationError):
        return f" draw={exc.details.get('draw_id')} refund=FAILED"
    return ""


async def handle_base_api_exception(request, exc: BaseAPIException):
    marker = exc.detail.get("status") if isinstance(exc.detail, dict) else None
    message = (
        f"[{exc.error_code}] {_origin(request)} -> {exc.status_code}"
        f"{f' status={marker}' if marker else ''}{_draw_context(exc)}: {exc.message}"
    )

    if isinstance(exc, DrawCompensationError):
        # 잔액이 차감된 채로 남아 있음 - 수동 정산 대상
        logger.critical(message)
    elif exc.status_code >= 500:
        logger.error(message)
    else:
        logger.warning(message)
    return JSONResponse(status_code=exc.status_code, content=exc.detail)  # type: ignore[arg-type]


async def handle_http_exception(request, exc):
    message = f"[HTTPException] {_origin(request)} -> {exc.status_code}: {exc.detail}"
    if exc.status_code >= 500:
        logger.error(message, exc_info=exc)
    else:
        logger.warning(message)

    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        content = _error_body("HTTP_ERROR", str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content)


async def handle_validation_error(request, exc):
    errors = jsonable_encoder(exc.errors())
    fields = ", ".join(".".join(str(part) for part in e.get("loc", ())) for e in errors)
    logger.warning(f"[VALIDATION_001] {_origin(request)} -> 422: invalid {fields}")

    content = _error_body("VALIDATION_001", "Validation failed", {"errors": errors})
    return JSONResponse(status_code=422, content=content)


async def handle_unexpected_error(request, exc):
    logger.error(
        f"[Unhandled {type(exc).__name__}] {_origin(request)}: {exc}",
        exc_info=exc,
    )

    internal = InternalServerError()
    return JSONResponse(status_code=internal.status_code, content=internal.detail)  # type: ignore[arg-type]
