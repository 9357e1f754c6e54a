"""Equipped gear and set-bonus resolution.

Eight named slots, each holding at most one item. Aggregate stats are the
sum of every item's effective stats plus all active set tiers.
"""
from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional, Any, Tuple

from .items import Item, EquipSlot
from .results import Ok, Err, Result
from .stats import Stats, DEFAULT_WEIGHTS

log = logging.getLogger(__name__)

EQUIPMENT_SLOTS: Tuple[str, ...] = (
    'helmet', 'weapon', 'chest', 'gloves', 'legs', 'boots', 'accessory1', 'accessory2',
)

# Named slot -> general item slot it accepts
SLOT_TO_ITEM_SLOT: Dict[str, EquipSlot] = {
    'helmet': EquipSlot.HELMET,
    'weapon': EquipSlot.WEAPON,
    'chest': EquipSlot.CHEST,
    'gloves': EquipSlot.GLOVES,
    'legs': EquipSlot.LEGS,
    'boots': EquipSlot.BOOTS,
    'accessory1': EquipSlot.ACCESSORY,
    'accessory2': EquipSlot.ACCESSORY,
}


@dataclass(frozen=True)
class SetTier:
    """Bonus granted once `pieces` items of a set are worn."""
    pieces: int
    bonus: Stats
    special: Optional[str] = None


@dataclass(frozen=True)
class SetDefinition:
    id: str
    name: str
    tiers: Tuple[SetTier, ...]


def _set(set_id: str, name: str, tiers: Dict[int, Dict[str, Any]]) -> SetDefinition:
    built = []
    for pieces, spec in sorted(tiers.items()):
        spec = dict(spec)
        special = spec.pop('special', None)
        built.append(SetTier(pieces, Stats.from_dict(spec), special))
    return SetDefinition(set_id, name, tuple(built))


SET_DEFINITIONS: Dict[str, SetDefinition] = {s.id: s for s in (
    _set('warrior_set', "Warrior's Valor", {
        2: {'HP': 50, 'DEF': 10},
        3: {'HP': 100, 'DEF': 20, 'ATK': 10},
        4: {'HP': 200, 'DEF': 40, 'ATK': 20},
        5: {'HP': 350, 'DEF': 70, 'ATK': 35, 'special': 'Battle Rage'},
    }),
    _set('archer_set', "Hunter's Focus", {
        2: {'SPD': 5, 'CRIT': 2},
        3: {'SPD': 10, 'CRIT': 5, 'ATK': 10},
        4: {'SPD': 20, 'CRIT': 10, 'ATK': 20},
        5: {'SPD': 35, 'CRIT': 18, 'ATK': 35, 'special': 'Perfect Shot'},
    }),
    _set('mage_set', "Arcane Wisdom", {
        2: {'ATK': 15, 'HP': 20},
        3: {'ATK': 30, 'HP': 50, 'SPD': 5},
        4: {'ATK': 50, 'HP': 100, 'SPD': 10},
        5: {'ATK': 80, 'HP': 200, 'SPD': 20, 'special': 'Mana Surge'},
    }),
    _set('cleric_set', "Divine Grace", {
        2: {'HP': 80, 'DEF': 15},
        3: {'HP': 150, 'DEF': 30},
        4: {'HP': 250, 'DEF': 50, 'SPD': 10},
        5: {'HP': 400, 'DEF': 80, 'SPD': 20, 'special': 'Holy Aura'},
    }),
    _set('paladin_set', "Righteous Protector", {
        2: {'HP': 60, 'ATK': 10, 'DEF': 10},
        3: {'HP': 120, 'ATK': 20, 'DEF': 20},
        4: {'HP': 200, 'ATK': 35, 'DEF': 35, 'SPD': 10},
        5: {'HP': 350, 'ATK': 60, 'DEF': 60, 'SPD': 20, 'special': 'Divine Shield'},
    }),
)}


def get_set_info(set_id: str) -> Optional[SetDefinition]:
    return SET_DEFINITIONS.get(set_id)


def all_sets() -> List[SetDefinition]:
    return list(SET_DEFINITIONS.values())


def active_tiers(set_id: str, piece_count: int) -> List[SetTier]:
    """Every tier whose piece requirement is met (tiers stack)."""
    definition = SET_DEFINITIONS.get(set_id)
    if definition is None:
        return []
    return [tier for tier in definition.tiers if tier.pieces <= piece_count]


def set_bonus(set_id: str, piece_count: int) -> Stats:
    """Cumulative bonus of all active tiers for one set."""
    total = Stats()
    for tier in active_tiers(set_id, piece_count):
        total = total + tier.bonus
    return total


@dataclass
class ActiveSet:
    set_id: str
    name: str
    pieces: int
    tiers: List[SetTier] = field(default_factory=list)


class Equipment:
    """Per-hero equipped items.

    ``owner`` is anything exposing ``level``; when it also exposes
    ``apply_equipment(stats)`` it is refreshed after every change.
    """

    def __init__(self, owner: Any = None):
        self.owner = owner
        self.slots: Dict[str, Optional[Item]] = {name: None for name in EQUIPMENT_SLOTS}

    # ---------------- Queries ----------------

    def get(self, slot_name: str) -> Optional[Item]:
        return self.slots.get(slot_name)

    def is_slot_empty(self, slot_name: str) -> bool:
        return self.slots.get(slot_name) is None

    def equipped_items(self) -> List[Tuple[str, Item]]:
        return [(name, item) for name, item in self.slots.items() if item is not None]

    def contains(self, item_id: str) -> bool:
        return any(item.id == item_id for _, item in self.equipped_items())

    def get_set_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for _, item in self.equipped_items():
            if item.set_id:
                counts[item.set_id] = counts.get(item.set_id, 0) + 1
        return counts

    def get_set_bonuses(self) -> Stats:
        total = Stats()
        for set_id, count in self.get_set_counts().items():
            total = total + set_bonus(set_id, count)
        return total

    def get_active_set_bonuses(self) -> List[ActiveSet]:
        active = []
        for set_id, count in self.get_set_counts().items():
            definition = SET_DEFINITIONS.get(set_id)
            if definition is None:
                continue
            active.append(ActiveSet(set_id, definition.name, count, active_tiers(set_id, count)))
        return active

    def get_total_stats(self) -> Stats:
        """Effective item stats plus cumulative set bonuses."""
        total = Stats()
        for _, item in self.equipped_items():
            total = total + item.get_effective_stats()
        return total + self.get_set_bonuses()

    def power_score(self, weights: Optional[Dict[str, float]] = None) -> float:
        return self.get_total_stats().power_score(weights or DEFAULT_WEIGHTS)

    # ---------------- Mutation ----------------

    def can_equip(self, item: Item, slot_name: Optional[str] = None) -> Tuple[bool, str]:
        """Check if item can be equipped. Returns (can_equip, reason)."""
        if item is None or not item.is_equipment():
            return False, "Invalid item or not equipment type"
        owner_level = getattr(self.owner, 'level', None)
        if owner_level is not None and item.level > owner_level:
            return False, (f"{item.display_name} requires level {item.level} "
                           f"(current level {owner_level})")
        if slot_name is not None:
            if slot_name not in self.slots:
                return False, f"Unknown equipment slot: {slot_name}"
            if SLOT_TO_ITEM_SLOT[slot_name] != item.slot:
                return False, f"{item.display_name} does not fit the {slot_name} slot"
        return True, ""

    def _target_slot(self, item: Item) -> str:
        if item.slot != EquipSlot.ACCESSORY:
            return item.slot.value
        if self.slots['accessory1'] is None:
            return 'accessory1'
        if self.slots['accessory2'] is None:
            return 'accessory2'
        return 'accessory1'

    def equip(self, item: Item, slot_name: Optional[str] = None) -> Result:
        """Equip an item. Ok.value is (slot_name, previously_equipped_item_or_None)."""
        ok, reason = self.can_equip(item, slot_name)
        if not ok:
            return Err(reason)

        target = slot_name or self._target_slot(item)
        previous = self.slots[target]
        self.slots[target] = item
        self.recalculate()
        log.debug("Equipped %s in %s", item.id, target)
        return Ok(f"Equipped {item.display_name}", value=(target, previous))

    def unequip(self, slot_name: str) -> Result:
        """Empty a slot. Ok.value is the removed item."""
        item = self.slots.get(slot_name)
        if item is None:
            return Err("No item equipped in that slot")
        self.slots[slot_name] = None
        self.recalculate()
        return Ok(f"Unequipped {item.display_name}", value=item)

    def recalculate(self):
        """Push the current totals to the owner, if it accepts them."""
        apply = getattr(self.owner, 'apply_equipment', None)
        if apply is not None:
            apply(self.get_total_stats())

    # ---------------- Serialization ----------------

    def to_dict(self) -> Dict[str, Any]:
        return {'slots': {name: (item.to_dict() if item else None) for name, item in self.slots.items()}}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], owner: Any = None) -> 'Equipment':
        equipment = cls(owner)
        for name, record in data.get('slots', {}).items():
            if name not in equipment.slots:
                log.warning("Ignoring unknown equipment slot %r in saved data", name)
                continue
            equipment.slots[name] = Item.from_dict(record) if record else None
        equipment.recalculate()
        return equipment
