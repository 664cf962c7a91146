from __future__ import annotations
from typing import Dict, Optional

from monsterquest.core.constants import INVENTORY_CAPACITY
from monsterquest.core.logging import logger

class Inventory:
    """Item bag: quantity per item id, at most ``capacity`` distinct entries."""

    def __init__(self, capacity: int = INVENTORY_CAPACITY, items: Optional[Dict[str, int]] = None):
        self.capacity = capacity
        self._items: Dict[str, int] = {}
        for item_id, qty in (items or {}).items():
            self.add(item_id, qty)

    def add(self, item_id: str, qty: int = 1) -> bool:
        if qty <= 0:
            return False
        if item_id not in self._items and len(self._items) >= self.capacity:
            logger.debug("InventoryFull", item=item_id)
            return False
        self._items[item_id] = self._items.get(item_id, 0) + qty
        return True

    def remove(self, item_id: str, qty: int = 1):
        if self._items.get(item_id, 0) < qty:
            raise ValueError("Not enough items")
        self._items[item_id] -= qty
        if self._items[item_id] <= 0:
            del self._items[item_id]

    def has(self, item_id: str, qty: int = 1) -> bool:
        return self._items.get(item_id, 0) >= qty

    def quantity(self, item_id: str) -> int:
        return self._items.get(item_id, 0)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._items)

    def __len__(self) -> int:
        return len(self._items)

__all__ = ["Inventory"]
