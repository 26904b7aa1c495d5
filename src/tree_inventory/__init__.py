from __future__ import annotations

from .inventory import Inventory
from .inventory import InventoryError
from .inventoryconfig import InventoryConfig

__all__ = [
    "Inventory",
    "InventoryError",
    "InventoryConfig",
]
