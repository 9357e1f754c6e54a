"""Bounded item collection with a gold balance.

Provides adding/removing items, filtering and sorting, selling, salvaging
into crafting materials and slot expansion.
"""
from __future__ import annotations
from dataclasses import dataclass
import logging
import math
from typing import Dict, List, Optional, Any, Iterable

import config
from .items import Item, Rarity, EquipSlot
from .results import Ok, Err, Result

log = logging.getLogger(__name__)

# Display order used as the third sort key
SLOT_SORT_ORDER: List[EquipSlot] = [
    EquipSlot.WEAPON, EquipSlot.HELMET, EquipSlot.CHEST, EquipSlot.GLOVES,
    EquipSlot.LEGS, EquipSlot.BOOTS, EquipSlot.ACCESSORY,
]

SALVAGE_DUST: Dict[Rarity, int] = {
    Rarity.COMMON: 1, Rarity.UNCOMMON: 2, Rarity.RARE: 5,
    Rarity.EPIC: 10, Rarity.LEGENDARY: 25, Rarity.MYTHIC: 100,
}


@dataclass
class Materials:
    """Crafting materials produced by salvaging."""
    dust: int = 0
    crystals: int = 0
    gems: int = 0

    def __add__(self, other: 'Materials') -> 'Materials':
        return Materials(self.dust + other.dust, self.crystals + other.crystals, self.gems + other.gems)


@dataclass
class ItemFilter:
    """Criteria for filtered_items(); None means 'any'."""
    slot: Optional[EquipSlot] = None
    rarity: Optional[Rarity] = None
    min_level: Optional[int] = None
    max_level: Optional[int] = None

    def matches(self, item: Item) -> bool:
        if self.slot is not None and item.slot != EquipSlot(self.slot):
            return False
        if self.rarity is not None and item.rarity != Rarity(self.rarity):
            return False
        if self.min_level is not None and item.level < self.min_level:
            return False
        if self.max_level is not None and item.level > self.max_level:
            return False
        return True


def salvage_materials(item: Item) -> Materials:
    value = SALVAGE_DUST[item.rarity]
    materials = Materials(dust=value)
    if item.rarity in (Rarity.RARE, Rarity.EPIC):
        materials.crystals = value // 3
    if item.rarity in (Rarity.LEGENDARY, Rarity.MYTHIC):
        materials.gems = value // 10
    return materials


def _sort_key(item: Item):
    return (-item.level, -item.rarity.rank, SLOT_SORT_ORDER.index(item.slot), item.name)


class Inventory:
    """Items plus gold. ``len(items) <= max_slots`` always holds."""

    def __init__(self, max_slots: Optional[int] = None, gold: int = 0):
        self.max_slots = max_slots if max_slots is not None else config.INVENTORY_DEFAULT_SLOTS
        self.items: List[Item] = []
        self.gold = gold
        self.expansions = 0

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, item_id: str) -> bool:
        return self.get_item(item_id) is not None

    # ---------------- Capacity ----------------

    def is_full(self) -> bool:
        return len(self.items) >= self.max_slots

    def available_space(self) -> int:
        return self.max_slots - len(self.items)

    def expansion_cost(self) -> int:
        return math.floor(config.EXPANSION_BASE_COST * config.EXPANSION_COST_MULTIPLIER ** self.expansions)

    def expand(self, additional_slots: int, cost: Optional[int] = None) -> Result:
        """Buy extra slots. Ok.value is the new max_slots."""
        if additional_slots <= 0:
            return Err("Expansion must add at least one slot")
        if self.max_slots + additional_slots > config.INVENTORY_MAX_SLOTS:
            return Err(f"Inventory cannot exceed {config.INVENTORY_MAX_SLOTS} slots")
        price = self.expansion_cost() if cost is None else cost
        paid = self.remove_gold(price)
        if not paid.success:
            return paid
        self.max_slots += additional_slots
        self.expansions += 1
        return Ok(f"Inventory expanded by {additional_slots} slots!", value=self.max_slots)

    # ---------------- Items ----------------

    def add_item(self, item: Item) -> Result:
        if self.is_full():
            return Err("Inventory is full!")
        if item.id in self:
            return Err(f"{item.display_name} is already in the inventory")
        self.items.append(item)
        return Ok(f"Added {item.display_name} to inventory", value=item)

    def add_items(self, items: Iterable[Item]) -> Dict[str, List[Item]]:
        """Add many items. Returns {'added': [...], 'failed': [...]}."""
        added, failed = [], []
        for item in items:
            (added if self.add_item(item).success else failed).append(item)
        return {'added': added, 'failed': failed}

    def remove_item(self, item_id: str) -> Result:
        """Remove an item. Ok.value is the removed item."""
        for index, item in enumerate(self.items):
            if item.id == item_id:
                del self.items[index]
                return Ok(f"Removed {item.display_name} from inventory", value=item)
        return Err("Item not found in inventory")

    def get_item(self, item_id: str) -> Optional[Item]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def items_by_slot(self, slot: EquipSlot | str) -> List[Item]:
        slot = EquipSlot(slot)
        return [item for item in self.items if item.slot == slot]

    def items_by_rarity(self, rarity: Rarity | str) -> List[Item]:
        rarity = Rarity(rarity)
        return [item for item in self.items if item.rarity == rarity]

    def filtered_items(self, item_filter: Optional[ItemFilter] = None) -> List[Item]:
        """Filtered copy sorted by level desc, rarity desc, slot order, name."""
        item_filter = item_filter or ItemFilter()
        return sorted((i for i in self.items if item_filter.matches(i)), key=_sort_key)

    # ---------------- Gold ----------------

    def add_gold(self, amount: int):
        self.gold += max(0, int(amount))

    def remove_gold(self, amount: int) -> Result:
        if amount < 0:
            return Err("Amount must not be negative")
        if self.gold < amount:
            return Err("Not enough gold!")
        self.gold -= amount
        return Ok(f"Spent {amount} gold", value=amount)

    # ---------------- Selling / salvaging ----------------

    def sell_item(self, item_id: str) -> Result:
        """Sell for the item's gold value. Ok.value is the gold gained."""
        removed = self.remove_item(item_id)
        if not removed.success:
            return removed
        item = removed.value
        self.gold += item.gold_value
        return Ok(f"Sold {item.display_name} for {item.gold_value} gold", value=item.gold_value)

    def sell_items(self, item_ids: Iterable[str]) -> Result:
        total = 0
        sold = 0
        for item_id in list(item_ids):
            result = self.sell_item(item_id)
            if result.success:
                total += result.value
                sold += 1
        if sold == 0:
            return Err("No items sold")
        return Ok(f"Sold {sold} items for {total} gold", value=total)

    def salvage_item(self, item_id: str) -> Result:
        """Destroy an item for materials. Ok.value is a Materials instance."""
        removed = self.remove_item(item_id)
        if not removed.success:
            return removed
        item = removed.value
        return Ok(f"Salvaged {item.display_name}", value=salvage_materials(item))

    # ---------------- Misc ----------------

    def statistics(self) -> Dict[str, Any]:
        by_rarity = {r.value: 0 for r in Rarity}
        by_slot = {s.value: 0 for s in EquipSlot}
        for item in self.items:
            by_rarity[item.rarity.value] += 1
            by_slot[item.slot.value] += 1
        return {
            'total_items': len(self.items),
            'max_slots': self.max_slots,
            'free_slots': self.available_space(),
            'gold': self.gold,
            'by_rarity': by_rarity,
            'by_slot': by_slot,
            'total_value': sum(item.gold_value for item in self.items),
        }

    def clear(self):
        self.items = []

    def to_dict(self) -> Dict[str, Any]:
        return {
            'maxSlots': self.max_slots,
            'gold': self.gold,
            'expansions': self.expansions,
            'items': [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Inventory':
        inventory = cls(max_slots=int(data.get('maxSlots', config.INVENTORY_DEFAULT_SLOTS)),
                        gold=int(data.get('gold', 0)))
        inventory.expansions = int(data.get('expansions', 0))
        records = data.get('items', [])
        if len(records) > inventory.max_slots:
            log.warning("Saved inventory holds %d items but only %d slots; keeping the first %d",
                        len(records), inventory.max_slots, inventory.max_slots)
            records = records[:inventory.max_slots]
        inventory.items = [Item.from_dict(record) for record in records]
        return inventory
