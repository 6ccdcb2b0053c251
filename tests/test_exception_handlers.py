import asyncio
import json
from unittest.mock import Mock

import pytest
from starlette.requests import Request

from gachaapi.core import exception_handlers
from gachaapi.core.exceptions import (
    DrawCompensationError,
    InsufficientFundsError,
    NoEligibleItemsError,
)


@pytest.fixture
def logger(monkeypatch):
    mock_logger = Mock()
    monkeypatch.setattr(exception_handlers, "logger", mock_logger)
    return mock_logger


@pytest.fixture
def request_():
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/api/gacha/spin",
            "query_string": b"",
            "headers": [],
            "client": ("203.0.113.7", 50000),
            "server": ("testserver", 80),
            "scheme": "http",
        }
    )


def handle(request, exc):
    return asyncio.run(exception_handlers.handle_base_api_exception(request, exc))


class TestDrawFailureLogging:
    def test_refund_logs_draw_and_refund(self, logger, request_):
        # Given
        exc = NoEligibleItemsError(draw_id="draw-1", pool_id="pool-9", refunded_amount=50)

        # When
        response = handle(request_, exc)

        # Then
        assert response.status_code == 404
        assert json.loads(response.body)["status"] == "refunded_xu"
        message = logger.warning.call_args.args[0]
        assert "[NO_ELIGIBLE_ITEMS]" in message
        assert "POST /api/gacha/spin from 203.0.113.7" in message
        assert "status=refunded_xu" in message
        assert "draw=draw-1" in message
        assert "kind=NO_ELIGIBLE_ITEMS" in message
        assert "refunded_xu=50" in message
        logger.error.assert_not_called()

    def test_compensation_failure_is_critical(self, logger, request_):
        response = handle(request_, DrawCompensationError(draw_id="draw-2"))

        assert response.status_code == 500
        message = logger.critical.call_args.args[0]
        assert "status=critical_error" in message
        assert "draw=draw-2 refund=FAILED" in message

    def test_rejection_has_no_draw_context(self, logger, request_):
        handle(request_, InsufficientFundsError(required=150, available=100))

        message = logger.warning.call_args.args[0]
        assert "status=insufficient_xu" in message
        assert "draw=" not in message


class TestUnexpectedError:
    def test_internal_error_body(self, logger, request_):
        response = asyncio.run(
            exception_handlers.handle_unexpected_error(request_, RuntimeError("boom"))
        )

        assert response.status_code == 500
        assert json.loads(response.body)["error"]["code"] == "INTERNAL_001"
        assert "[Unhandled RuntimeError]" in logger.error.call_args.args[0]
