# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .balance_repository import BalanceRepository
from .gacha_item_repository import GachaItemRepository
from .inventory_repository import InventoryRepository
from .spin_history_repository import SpinHistoryRepository
from .payment_event_repository import PaymentEventRepository
from .fulfillment_repository import FulfillmentRepository

__all__ = [
    "BaseRepository",
    "BalanceRepository",
    "GachaItemRepository",
    "InventoryRepository",
    "SpinHistoryRepository",
    "PaymentEventRepository",
    "FulfillmentRepository",
]
