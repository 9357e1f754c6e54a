"""Equipment advisor: best-gear selection and bulk inventory clean-up."""
from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional

from .equipment import Equipment, EQUIPMENT_SLOTS, SLOT_TO_ITEM_SLOT
from .inventory import Inventory, Materials
from .items import Item, Rarity, EquipSlot
from .results import Ok, Err, Result
from .stats import weights_for_role

log = logging.getLogger(__name__)


@dataclass
class SkippedItem:
    item: Item
    slot: str
    reason: str


@dataclass
class AutoEquipResult:
    equipped: List[Item] = field(default_factory=list)
    skipped: List[SkippedItem] = field(default_factory=list)

    @property
    def swaps(self) -> int:
        return len(self.equipped)

    @property
    def success(self) -> bool:
        return bool(self.equipped)

    @property
    def message(self) -> str:
        if self.equipped:
            return f"Auto-equipped {len(self.equipped)} items"
        return "Already using best items"


def rank_key(item: Item, weights: Dict[str, float]):
    """Sort key: power score, then rarity, then level (all descending)."""
    return (-item.power_score(weights), -item.rarity.rank, -item.level)


class InventoryAdvisor:
    """Stateless helpers operating on an Inventory/Equipment pair."""

    def __init__(self, inventory: Inventory, equipment: Equipment):
        self.inventory = inventory
        self.equipment = equipment

    def _hero_level(self, hero_level: Optional[int]) -> int:
        if hero_level is not None:
            return hero_level
        return getattr(self.equipment.owner, 'level', 1)

    def _role(self, role: Optional[str]) -> Optional[str]:
        if role is not None:
            return role
        return getattr(self.equipment.owner, 'role', None)

    def find_best_for_slot(self, slot: EquipSlot | str, hero_level: Optional[int] = None,
                           equip_slot: Optional[str] = None, role: Optional[str] = None) -> Optional[Item]:
        """Best usable item for a general slot.

        When ``equip_slot`` is given the item currently worn there competes
        with the inventory candidates and wins full ties.
        """
        slot = EquipSlot(slot)
        level = self._hero_level(hero_level)
        weights = weights_for_role(self._role(role))

        candidates: List[Item] = []
        if equip_slot is not None:
            worn = self.equipment.get(equip_slot)
            if worn is not None and worn.slot == slot:
                candidates.append(worn)
        candidates.extend(self.inventory.items_by_slot(slot))

        usable = [item for item in candidates if item.level <= level]
        if not usable:
            return None
        # sorted() is stable, so the worn item stays first among exact ties
        return sorted(usable, key=lambda item: rank_key(item, weights))[0]

    def auto_equip_best(self, hero_level: Optional[int] = None, role: Optional[str] = None) -> AutoEquipResult:
        """Put the best available item in every equipment slot."""
        level = self._hero_level(hero_level)
        result = AutoEquipResult()
        seen_skipped = set()

        for equip_slot in EQUIPMENT_SLOTS:
            item_slot = SLOT_TO_ITEM_SLOT[equip_slot]
            for item in self.inventory.items_by_slot(item_slot):
                if item.level > level and item.id not in seen_skipped:
                    seen_skipped.add(item.id)
                    result.skipped.append(SkippedItem(item, equip_slot, "skipped: level too low"))

            best = self.find_best_for_slot(item_slot, level, equip_slot, role)
            if best is None:
                continue
            current = self.equipment.get(equip_slot)
            if current is not None and current.id == best.id:
                continue
            if best.id not in self.inventory:
                continue

            if self._swap_in(best, equip_slot):
                result.equipped.append(best)

        log.debug("Auto-equip: %d swaps, %d skipped", result.swaps, len(result.skipped))
        return result

    def _swap_in(self, item: Item, equip_slot: str) -> bool:
        """Move item from inventory into equip_slot, returning the old item to the inventory."""
        ok, reason = self.equipment.can_equip(item, equip_slot)
        if not ok:
            log.debug("Cannot equip %s in %s: %s", item.id, equip_slot, reason)
            return False
        self.inventory.remove_item(item.id)
        equipped = self.equipment.equip(item, equip_slot)
        _, previous = equipped.value
        if previous is not None:
            # a slot was just freed by remove_item(), so this cannot fail
            self.inventory.add_item(previous)
        return True

    def auto_sell_by_rarity(self, max_rarity: Rarity | str = Rarity.COMMON) -> Result:
        """Sell every non-set item at or below max_rarity."""
        cap = Rarity(max_rarity).rank
        ids = [item.id for item in self.inventory.items
               if item.rarity.rank <= cap and not item.is_set_item()]
        return self.inventory.sell_items(ids)

    def auto_salvage_by_rarity(self, max_rarity: Rarity | str = Rarity.UNCOMMON) -> Result:
        """Salvage every non-set item at or below max_rarity. Ok.value is the total Materials."""
        cap = Rarity(max_rarity).rank
        targets = [item.id for item in self.inventory.items
                   if item.rarity.rank <= cap and not item.is_set_item()]
        materials = Materials()
        count = 0
        for item_id in targets:
            salvaged = self.inventory.salvage_item(item_id)
            if salvaged.success:
                materials = materials + salvaged.value
                count += 1
        if count == 0:
            return Err("Nothing to salvage")
        return Ok(f"Salvaged {count} items", value=materials)
