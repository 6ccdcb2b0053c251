from typing import List
from sqlalchemy.orm import Session
from sqlalchemy import asc

from gachaapi.models.gacha import GachaItem, InventoryStatusEnum, UserGachaInventory
from gachaapi.schemas.gacha import InventoryEntry
from gachaapi.repositories.base import BaseRepository

UNKNOWN_ITEM_NAME = "Unknown Item"
DEFAULT_ITEM_IMAGE = "default_image.png"


class InventoryRepository(BaseRepository[UserGachaInventory, InventoryEntry]):
    """사용자 x 아이템 보유 수량"""

    def __init__(self, db: Session):
        super().__init__(UserGachaInventory, InventoryEntry, db)

    def increment(self, user_id: str, item_id: int, commit: bool = True) -> int:
        """보유 수량 +1 (없으면 생성) - 증가 후 수량 반환"""
        self.insert_ignore(
            ["user_id", "item_id"],
            user_id=user_id,
            item_id=item_id,
            quantity=0,
            status=InventoryStatusEnum.OWNED.value,
        )
        (
            self.db.query(UserGachaInventory)
            .filter(
                UserGachaInventory.user_id == user_id,
                UserGachaInventory.item_id == item_id,
            )
            .update(
                {
                    UserGachaInventory.quantity: UserGachaInventory.quantity + 1,
                    UserGachaInventory.status: InventoryStatusEnum.OWNED.value,
                },
                synchronize_session=False,
            )
        )

        quantity = self.get_quantity(user_id, item_id)
        if commit:
            self.db.commit()
        return quantity

    def get_quantity(self, user_id: str, item_id: int) -> int:
        quantity = (
            self.db.query(UserGachaInventory.quantity)
            .filter(
                UserGachaInventory.user_id == user_id,
                UserGachaInventory.item_id == item_id,
            )
            .scalar()
        )
        return quantity or 0

    def set_status(
        self,
        user_id: str,
        item_id: int,
        status: InventoryStatusEnum,
        commit: bool = True,
    ) -> bool:
        updated = (
            self.db.query(UserGachaInventory)
            .filter(
                UserGachaInventory.user_id == user_id,
                UserGachaInventory.item_id == item_id,
            )
            .update({UserGachaInventory.status: status.value}, synchronize_session=False)
        )
        if commit:
            self.db.commit()
        return updated > 0

    def list_for_user(self, user_id: str) -> List[InventoryEntry]:
        rows = (
            self.db.query(
                UserGachaInventory,
                GachaItem.name,
                GachaItem.image_url,
                GachaItem.rank,
            )
            .outerjoin(GachaItem, GachaItem.id == UserGachaInventory.item_id)
            .filter(UserGachaInventory.user_id == user_id)
            .order_by(asc(UserGachaInventory.id))
            .populate_existing()
            .all()
        )

        return [
            InventoryEntry(
                item_id=entry.item_id,
                item_name=name or UNKNOWN_ITEM_NAME,
                item_image=image_url or DEFAULT_ITEM_IMAGE,
                rank=rank,
                quantity=entry.quantity,
                status=entry.status,
            )
            for entry, name, image_url, rank in rows
        ]
