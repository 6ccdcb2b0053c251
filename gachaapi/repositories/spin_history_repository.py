from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from gachaapi.models.gacha import GachaItem, GachaSpinHistory, SpinStatusEnum
from gachaapi.schemas.gacha import SpinHistoryEntry, SpinHistoryResponse
from gachaapi.repositories.base import BaseRepository
from gachaapi.repositories.inventory_repository import (
    DEFAULT_ITEM_IMAGE,
    UNKNOWN_ITEM_NAME,
)


class SpinHistoryRepository(BaseRepository[GachaSpinHistory, SpinHistoryEntry]):
    """추첨 기록 - append only"""

    def __init__(self, db: Session):
        super().__init__(GachaSpinHistory, SpinHistoryEntry, db)

    def append(
        self,
        user_id: str,
        pool_id: str,
        amount_debited: int,
        draw_id: str,
        status: SpinStatusEnum,
        item_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        error_kind: Optional[str] = None,
        error_message: Optional[str] = None,
        commit: bool = True,
    ) -> int:
        """기록 추가 - 생성된 기록 ID 반환"""
        record = GachaSpinHistory(
            user_id=user_id,
            item_id=item_id,
            amount_debited=amount_debited,
            gacha_pool_id=pool_id,
            draw_id=draw_id,
            ip_address=ip_address,
            status=status.value,
            error_kind=error_kind,
            error_message=error_message,
        )
        self.db.add(record)
        self.db.flush()
        record_id = record.id
        if commit:
            self.db.commit()
        return record_id

    def get_history(
        self, user_id: Optional[str] = None, limit: int = 10, offset: int = 0
    ) -> SpinHistoryResponse:
        """최신순 기록 조회 - 아이템 이름/이미지는 조회 시점에 조인"""
        filters = {"user_id": user_id} if user_id else None
        total_count = self.count(filters)

        query = self.db.query(
            GachaSpinHistory, GachaItem.name, GachaItem.image_url
        ).outerjoin(GachaItem, GachaItem.id == GachaSpinHistory.item_id)
        if user_id:
            query = query.filter(GachaSpinHistory.user_id == user_id)

        rows = (
            query.order_by(desc(GachaSpinHistory.spin_time), desc(GachaSpinHistory.id))
            .limit(limit)
            .offset(offset)
            .all()
        )

        history = [
            SpinHistoryEntry(
                id=record.id,
                user_id=record.user_id,
                item_id=record.item_id,
                item_name=name or UNKNOWN_ITEM_NAME,
                item_image=image_url or DEFAULT_ITEM_IMAGE,
                gacha_pool_id=record.gacha_pool_id,
                xu_deducted=record.amount_debited,
                status=record.status,
                error_kind=record.error_kind,
                spin_time=record.spin_time,
            )
            for record, name, image_url in rows
        ]

        return SpinHistoryResponse(
            history=history,
            total_count=total_count,
            has_next=offset + limit < total_count,
        )
