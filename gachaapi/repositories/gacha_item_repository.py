from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import asc

from gachaapi.models.gacha import GachaItem, GachaRank
from gachaapi.schemas.gacha import GachaItemPublic
from gachaapi.repositories.base import BaseRepository


def _rank_sort_key(item: GachaItemPublic):
    try:
        order = GachaRank(item.rank).sort_order
    except ValueError:
        order = len(GachaRank) + 1
    return (order, item.name)


class GachaItemRepository(BaseRepository[GachaItem, GachaItemPublic]):
    """가챠 아이템 조회 (엔진 입장에서는 읽기 전용)"""

    def __init__(self, db: Session):
        super().__init__(GachaItem, GachaItemPublic, db)

    def get_pool_items(self, pool_id: str) -> List[GachaItemPublic]:
        """추첨 대상 - 활성 아이템을 id 순으로 반환 (동일 가중치 tie-break 기준)"""
        items = (
            self.db.query(GachaItem)
            .filter(GachaItem.gacha_pool_id == pool_id, GachaItem.is_active.is_(True))
            .order_by(asc(GachaItem.id))
            .all()
        )
        return [self._to_schema(item) for item in items]

    def list_active(self, pool_id: Optional[str] = None) -> List[GachaItemPublic]:
        """카탈로그 노출용 - 등급 순, 이름 순"""
        query = self.db.query(GachaItem).filter(GachaItem.is_active.is_(True))
        if pool_id:
            query = query.filter(GachaItem.gacha_pool_id == pool_id)

        items = [self._to_schema(item) for item in query.all()]
        return sorted(items, key=_rank_sort_key)
