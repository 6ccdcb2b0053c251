from fastapi import HTTPException, status
from typing import Optional, Dict, Any

from gachaapi.models.gacha import DrawFailureKind


class BaseAPIException(HTTPException):
    """Base exception for API errors"""
    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}

        detail: Dict[str, Any] = {
            "success": False,
            "error": {
                "code": error_code,
                "message": message,
                "details": self.details,
            },
        }
        if extra:
            detail.update(extra)

        super().__init__(status_code=status_code, detail=detail)

    def __str__(self) -> str:  # Ensure str(e) returns the human message
        return self.message


class ValidationError(BaseAPIException):
    """Validation errors"""
    def __init__(self, message: str = "Validation failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="VALIDATION_001",
            message=message,
            details=details
        )


class BadRequestError(BaseAPIException):
    """Missing/invalid request parameters"""
    def __init__(self, message: str = "Bad request", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="BAD_REQUEST_001",
            message=message,
            details=details
        )


class InternalServerError(BaseAPIException):
    """Internal server errors"""
    def __init__(self, message: str = "Internal server error", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_001",
            message=message,
            details=details
        )


# ============================================================================
# 가챠 추첨 실패 유형
# ============================================================================


class InsufficientFundsError(BaseAPIException):
    """잔액 부족 - 아무 상태도 변경되지 않은 거절"""
    def __init__(self, required: int, available: int):
        super().__init__(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            error_code="INSUFFICIENT_XU",
            message="Not enough xu to spin",
            details={"required": required, "available": available},
            extra={"status": "insufficient_xu"},
        )


class DrawRefundedError(BaseAPIException):
    """차감 이후 실패 - 환불(보상 적립) 완료 후에만 발생"""

    kind: DrawFailureKind = DrawFailureKind.INTERNAL_ERROR

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        draw_id: str,
        pool_id: str,
        refunded_amount: int,
    ):
        self.draw_id = draw_id
        super().__init__(
            status_code=status_code,
            error_code=error_code,
            message=message,
            details={
                "draw_id": draw_id,
                "gacha_pool_id": pool_id,
                "refunded_xu": refunded_amount,
            },
            extra={"status": "refunded_xu"},
        )


class NoEligibleItemsError(DrawRefundedError):
    kind = DrawFailureKind.NO_ELIGIBLE_ITEMS

    def __init__(self, draw_id: str, pool_id: str, refunded_amount: int):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NO_ELIGIBLE_ITEMS",
            message="No active gacha items found for this pool.",
            draw_id=draw_id,
            pool_id=pool_id,
            refunded_amount=refunded_amount,
        )


class MisconfiguredPoolError(DrawRefundedError):
    kind = DrawFailureKind.MISCONFIGURED_POOL

    def __init__(self, draw_id: str, pool_id: str, refunded_amount: int):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="MISCONFIGURED_POOL",
            message="Gacha pool configured incorrectly.",
            draw_id=draw_id,
            pool_id=pool_id,
            refunded_amount=refunded_amount,
        )


class DrawInternalError(DrawRefundedError):
    kind = DrawFailureKind.INTERNAL_ERROR

    def __init__(self, draw_id: str, pool_id: str, refunded_amount: int):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="DRAW_INTERNAL_ERROR",
            message="Failed to determine gacha prize.",
            draw_id=draw_id,
            pool_id=pool_id,
            refunded_amount=refunded_amount,
        )


class DrawCompensationError(BaseAPIException):
    """환불 자체가 실패한 경우 - 운영 개입 필요"""
    def __init__(self, draw_id: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="DRAW_COMPENSATION_FAILED",
            message="Internal server error",
            details={"draw_id": draw_id},
            extra={"status": "critical_error"},
        )


class InvalidWebhookPayloadError(BaseAPIException):
    """형식이 잘못된 웹훅 페이로드"""
    def __init__(self, message: str = "Invalid webhook data", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="INVALID_WEBHOOK_PAYLOAD",
            message=message,
            details=details
        )
