"""
가챠 추첨 트랜잭션 엔진

흐름: 잔액 차감(즉시 커밋) -> 풀 조회 -> 가중치 추첨 -> 인벤토리 증가 + 성공 기록(한 트랜잭션)

차감이 커밋된 뒤의 모든 실패는 "같은 금액 재적립 + refunded 기록" 을 한 트랜잭션으로
커밋한 다음에만 호출자에게 전달된다. 보상 자체가 실패하면 CRITICAL 로그를 남기고
DrawCompensationError 로 올린다.
"""

import logging
import uuid
from typing import List, NoReturn, Optional, Type

from sqlalchemy.orm import Session

from gachaapi.config import Settings, get_settings
from gachaapi.core.exceptions import (
    DrawCompensationError,
    DrawInternalError,
    DrawRefundedError,
    MisconfiguredPoolError,
    NoEligibleItemsError,
    ValidationError,
)
from gachaapi.core.weighted_draw import (
    EmptyPoolError,
    WeightedDrawSelector,
    ZeroTotalWeightError,
)
from gachaapi.models.gacha import SpinStatusEnum
from gachaapi.repositories.gacha_item_repository import GachaItemRepository
from gachaapi.repositories.inventory_repository import InventoryRepository
from gachaapi.repositories.spin_history_repository import SpinHistoryRepository
from gachaapi.schemas.gacha import (
    DrawResult,
    FulfillmentRequest,
    GachaItemPublic,
    InventoryResponse,
    SpinHistoryResponse,
    SpinResponse,
    WonItemDetails,
)
from gachaapi.services.balance_service import BalanceService

logger = logging.getLogger(__name__)


class GachaService:
    """가챠 추첨 및 조회 비즈니스 로직"""

    def __init__(
        self,
        db: Session,
        selector: Optional[WeightedDrawSelector] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.selector = selector or WeightedDrawSelector()
        self.balance_service = BalanceService(db)
        self.item_repo = GachaItemRepository(db)
        self.inventory_repo = InventoryRepository(db)
        self.history_repo = SpinHistoryRepository(db)

    def execute_draw(
        self,
        user_id: str,
        pool_id: str,
        cost: int,
        ip_address: Optional[str] = None,
    ) -> DrawResult:
        """추첨 1회 실행

        Args:
            user_id: Haravan 고객 ID
            pool_id: 추첨 대상 풀
            cost: 차감할 xu
            ip_address: 요청 IP (감사 기록용)

        Returns:
            DrawResult: 응답 본문과 (있다면) 주문 생성 요청

        Raises:
            InsufficientFundsError: 잔액 부족 (상태 변경 없음)
            DrawRefundedError: 차감 후 실패, 환불 완료
            DrawCompensationError: 환불 실패
        """
        if not user_id:
            raise ValidationError("customer_id is required")
        if not pool_id:
            raise ValidationError("gacha_pool_id is required")
        if cost is None or cost <= 0:
            raise ValidationError(
                "gacha_cost must be a positive integer", details={"gacha_cost": cost}
            )

        draw_id = str(uuid.uuid4())

        # 1. 차감 - 여기서 실패하면 아무 상태도 바뀌지 않는다
        try:
            balance_after = self.balance_service.debit(user_id, cost)
        except Exception:
            self.db.rollback()
            raise

        # 2. 이 시점부터는 반드시 성공 또는 환불로 끝난다
        try:
            items = self.item_repo.get_pool_items(pool_id)
            winner = self.selector.select_by(items, lambda item: item.weight)
        except EmptyPoolError as e:
            self._compensate(
                NoEligibleItemsError, draw_id, user_id, pool_id, cost, ip_address, str(e)
            )
        except ZeroTotalWeightError as e:
            self._compensate(
                MisconfiguredPoolError, draw_id, user_id, pool_id, cost, ip_address, str(e)
            )
        except Exception as e:
            self._compensate(
                DrawInternalError, draw_id, user_id, pool_id, cost, ip_address, str(e)
            )

        # 3. 당첨 기록
        try:
            self.inventory_repo.increment(user_id, winner.id, commit=False)
            history_id = self.history_repo.append(
                user_id=user_id,
                pool_id=pool_id,
                amount_debited=cost,
                draw_id=draw_id,
                status=SpinStatusEnum.SUCCESS,
                item_id=winner.id,
                ip_address=ip_address,
                commit=False,
            )
            self.db.commit()
        except Exception as e:
            self._compensate(
                DrawInternalError, draw_id, user_id, pool_id, cost, ip_address, str(e)
            )

        logger.info(
            f"Draw {draw_id} succeeded: user {user_id} won item {winner.id} "
            f"({winner.rank}) from pool {pool_id}, balance {balance_after}"
        )

        response = SpinResponse(
            draw_id=draw_id,
            won_item_id=winner.id,
            won_item_details=WonItemDetails(
                name=winner.name,
                image_url=winner.image_url,
                rank=winner.rank,
                price=winner.base_price,
            ),
            current_xu=balance_after,
        )

        # 4. 주문 생성은 응답 이후 백그라운드에서
        fulfillment = None
        if winner.haravan_product_id:
            fulfillment = FulfillmentRequest(
                draw_id=draw_id,
                user_id=user_id,
                item_id=winner.id,
                item_name=winner.name,
                gacha_pool_id=pool_id,
                haravan_product_id=winner.haravan_product_id,
                spin_history_id=history_id,
            )

        return DrawResult(response=response, fulfillment=fulfillment)

    def _compensate(
        self,
        error_cls: Type[DrawRefundedError],
        draw_id: str,
        user_id: str,
        pool_id: str,
        cost: int,
        ip_address: Optional[str],
        reason: str,
    ) -> NoReturn:
        """환불 적립 + refunded 기록을 한 트랜잭션으로 커밋한 뒤 error_cls 를 발생"""
        kind = error_cls.kind
        logger.warning(
            f"[{kind.value}] draw {draw_id} failed for user {user_id} "
            f"in pool {pool_id}: {reason}; refunding {cost} xu"
        )

        try:
            self.db.rollback()
            self.balance_service.credit(user_id, cost, commit=False)
            self.history_repo.append(
                user_id=user_id,
                pool_id=pool_id,
                amount_debited=cost,
                draw_id=draw_id,
                status=SpinStatusEnum.REFUNDED,
                ip_address=ip_address,
                error_kind=kind.value,
                error_message=reason or kind.value,
                commit=False,
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.critical(
                f"[{kind.value}] compensation failed for draw {draw_id}: "
                f"user {user_id} was debited {cost} xu without refund: {str(e)}"
            )
            raise DrawCompensationError(draw_id) from e

        raise error_cls(draw_id=draw_id, pool_id=pool_id, refunded_amount=cost)

    def list_items(self, pool_id: Optional[str] = None) -> List[GachaItemPublic]:
        """활성 아이템 목록 (등급 순, 이름 순)"""
        items = self.item_repo.list_active(pool_id)
        logger.info(f"Retrieved {len(items)} gacha items (pool={pool_id})")
        return items

    def get_history(
        self,
        user_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> SpinHistoryResponse:
        """추첨 기록 조회 - limit 는 HISTORY_MAX_LIMIT 로 제한"""
        if limit is None or limit <= 0:
            limit = self.settings.HISTORY_DEFAULT_LIMIT
        limit = min(limit, self.settings.HISTORY_MAX_LIMIT)
        offset = max(offset, 0)

        return self.history_repo.get_history(user_id=user_id, limit=limit, offset=offset)

    def get_inventory(self, user_id: str) -> InventoryResponse:
        if not user_id:
            raise ValidationError("customer_id is required")

        items = self.inventory_repo.list_for_user(user_id)
        return InventoryResponse(
            customer_id=user_id,
            items=items,
            total_quantity=sum(entry.quantity for entry in items),
        )
