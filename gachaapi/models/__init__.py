from .base import Base
from .gacha import (
    DrawFailureKind,
    GachaItem,
    GachaRank,
    GachaSpinHistory,
    InventoryStatusEnum,
    SpinStatusEnum,
    UserGachaInventory,
    UserXuBalance,
)
from .payments import ProcessedPaymentEvent
from .fulfillment import FulfillmentStatusEnum, GachaFulfillmentOrder

__all__ = [
    "Base",
    "DrawFailureKind",
    "GachaItem",
    "GachaRank",
    "GachaSpinHistory",
    "InventoryStatusEnum",
    "SpinStatusEnum",
    "UserGachaInventory",
    "UserXuBalance",
    "ProcessedPaymentEvent",
    "FulfillmentStatusEnum",
    "GachaFulfillmentOrder",
]
