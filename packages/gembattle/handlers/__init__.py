"""
Handlers for what happens outside a battle.

- ShopHandler: gem offers, purchases, upgrades, healing and meta unlocks
- RunProgression: stage transitions after each battle, camp rest
"""

from .progression import RunProgression
from .shop_handler import (
    ShopAction,
    ShopActionType,
    ShopHandler,
    ShopOffer,
    ShopResult,
    ShopState,
)

__all__ = [
    "RunProgression",
    "ShopAction",
    "ShopActionType",
    "ShopHandler",
    "ShopOffer",
    "ShopResult",
    "ShopState",
]
