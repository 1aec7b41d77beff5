"""Player inventory and the office vending machine.

The vending machine is where review payouts get spent: `vend_cost` bucks
buys one random item from the item catalog, provided the inventory has a
free slot. Funds are checked before the slot, so a broke player with a full
pocket hears about the bucks first.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass

from jacobs_office.config import GameConfig
from jacobs_office.interactions import Item
from jacobs_office.jobs import CatalogObject
from jacobs_office.state import Observable, Wallet

logger = logging.getLogger(__name__)

INVENTORY_FULL = "Inventory full. Drop something first."
MACHINE_EMPTY = "The machine whirs... but nothing comes out."


class Inventory(Observable):
    def __init__(self, capacity: int = 5) -> None:
        super().__init__()
        self.capacity = capacity
        self.items: list[Item] = []

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_full(self) -> bool:
        return len(self.items) >= self.capacity

    def add(self, item: Item) -> bool:
        """Store an item. False when every slot is taken."""
        if self.is_full:
            return False
        self.items.append(item)
        self._notify()
        return True

    def remove(self, uid: str) -> Item | None:
        for i, item in enumerate(self.items):
            if item.uid == uid:
                del self.items[i]
                self._notify()
                return item
        return None


@dataclass
class VendResult:
    success: bool
    description: str
    item: Item | None = None


class VendingMachine:
    def __init__(
        self,
        *,
        items: Sequence[CatalogObject],
        wallet: Wallet,
        inventory: Inventory,
        config: GameConfig = GameConfig(),
        rng: random.Random | None = None,
    ) -> None:
        self._items = list(items)
        self._wallet = wallet
        self._inventory = inventory
        self._cost = config.vend_cost
        self._rng = rng or random.Random()

    @property
    def cost(self) -> int:
        return self._cost

    def vend(self) -> VendResult:
        if self._wallet.bucks < self._cost:
            return VendResult(
                False,
                f"Not enough BUCKS. Need {self._cost}, you have {self._wallet.bucks}.",
            )
        if self._inventory.is_full:
            return VendResult(False, INVENTORY_FULL)
        if not self._items:
            logger.warning("vending machine has an empty item catalog")
            return VendResult(False, MACHINE_EMPTY)

        entry = self._rng.choice(self._items)
        self._wallet.spend(self._cost)
        item = Item(item_id=entry.id, name=entry.name, tags=list(entry.tags))
        self._inventory.add(item)
        logger.info("vended %s for %d bucks", entry.id, self._cost)
        return VendResult(True, f"Ka-chunk! You got: {entry.name}. (-{self._cost} BUCKS)", item)
