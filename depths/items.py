"""Equippable item model.

An item carries a base stat block, a rarity, a level, an equip slot and an
enchant level. Value, score and effective stats are all derived from those.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import math
import random
from typing import Dict, Optional, Any

import config
from .stats import Stats, STAT_KEYS
from .results import Ok, Err, Result

log = logging.getLogger(__name__)


class Rarity(Enum):
    """Item rarity, ordered from worst to best."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"
    MYTHIC = "mythic"

    @property
    def rank(self) -> int:
        return _RARITY_ORDER.index(self)


_RARITY_ORDER = list(Rarity)


class EquipSlot(Enum):
    """General equip slot of an item (both accessory slots accept ACCESSORY)."""
    HELMET = "helmet"
    WEAPON = "weapon"
    CHEST = "chest"
    GLOVES = "gloves"
    LEGS = "legs"
    BOOTS = "boots"
    ACCESSORY = "accessory"


class ItemType(Enum):
    EQUIPMENT = "equipment"
    CONSUMABLE = "consumable"
    MATERIAL = "material"


MAX_ENCHANT_LEVEL = 10

ENCHANT_SUCCESS_RATES: Dict[int, float] = {
    0: 0.90, 1: 0.85, 2: 0.80, 3: 0.70, 4: 0.60,
    5: 0.50, 6: 0.40, 7: 0.35, 8: 0.32, 9: 0.30,
}
MIN_ENCHANT_RATE = 0.30

RARITY_BASE_VALUE: Dict[Rarity, int] = {
    Rarity.COMMON: 10, Rarity.UNCOMMON: 50, Rarity.RARE: 200,
    Rarity.EPIC: 1000, Rarity.LEGENDARY: 10000, Rarity.MYTHIC: 100000,
}

RARITY_BASE_SCORE: Dict[Rarity, int] = {
    Rarity.COMMON: 10, Rarity.UNCOMMON: 25, Rarity.RARE: 50,
    Rarity.EPIC: 100, Rarity.LEGENDARY: 250, Rarity.MYTHIC: 500,
}

# Stat multiplier applied by the item generator
RARITY_STAT_MULTIPLIER: Dict[Rarity, float] = {
    Rarity.COMMON: 1.0, Rarity.UNCOMMON: 1.2, Rarity.RARE: 1.5,
    Rarity.EPIC: 2.0, Rarity.LEGENDARY: 3.0, Rarity.MYTHIC: 5.0,
}

SLOT_SCORE_MULTIPLIER: Dict[EquipSlot, float] = {
    EquipSlot.WEAPON: 1.5,
    EquipSlot.CHEST: 1.2,
    EquipSlot.ACCESSORY: 1.3,
}

SLOT_ICONS: Dict[EquipSlot, str] = {
    EquipSlot.HELMET: "🪖",
    EquipSlot.WEAPON: "⚔️",
    EquipSlot.CHEST: "🛡️",
    EquipSlot.GLOVES: "🧤",
    EquipSlot.LEGS: "👖",
    EquipSlot.BOOTS: "👢",
    EquipSlot.ACCESSORY: "💍",
}


def rarity_rank(rarity: Rarity | str) -> int:
    """Ordinal of a rarity (common=0 ... mythic=5)."""
    return Rarity(rarity).rank


@dataclass
class Item:
    """One item instance. Mutated only through enchant()."""
    id: str
    name: str
    rarity: Rarity
    level: int
    slot: EquipSlot
    stats: Stats = field(default_factory=Stats)
    type: ItemType = ItemType.EQUIPMENT
    enchant_level: int = 0
    set_id: Optional[str] = None
    set_name: Optional[str] = None
    icon: Optional[str] = None
    description: str = ""
    gold_value: Optional[int] = None  # cached, recomputed on enchant

    def __post_init__(self):
        self.rarity = Rarity(self.rarity)
        self.slot = EquipSlot(self.slot)
        self.type = ItemType(self.type)
        self.enchant_level = max(0, min(MAX_ENCHANT_LEVEL, int(self.enchant_level)))
        if self.icon is None:
            self.icon = SLOT_ICONS[self.slot]
        if self.gold_value is None:
            self.gold_value = self.calculate_gold_value()

    # ---------------- Derived values ----------------

    def calculate_gold_value(self) -> int:
        """Rarity base x level/5 x enchant multiplier, floored."""
        base = RARITY_BASE_VALUE[self.rarity]
        value = base * (self.level / 5) * (1 + self.enchant_level * 0.2)
        return max(0, math.floor(value))

    def get_effective_stats(self) -> Stats:
        """Base stats scaled by the enchant level (+10% per level)."""
        return self.stats.scaled(1 + 0.1 * self.enchant_level)

    def get_score(self) -> int:
        """Item score from rarity, level, enchant and slot."""
        base = RARITY_BASE_SCORE[self.rarity]
        slot_mult = SLOT_SCORE_MULTIPLIER.get(self.slot, 1.0)
        score = base * (1 + self.level / 50) * (1 + self.enchant_level * 0.15) * slot_mult
        return math.floor(score)

    def power_score(self, weights: Optional[Dict[str, float]] = None) -> float:
        """Weighted power score of the effective stats."""
        return self.get_effective_stats().power_score(weights)

    @property
    def display_name(self) -> str:
        if self.enchant_level > 0:
            return f"{self.name} +{self.enchant_level}"
        return self.name

    def is_equipment(self) -> bool:
        return self.type == ItemType.EQUIPMENT

    def is_set_item(self) -> bool:
        return self.set_id is not None

    # ---------------- Enchanting ----------------

    def can_enchant(self) -> bool:
        return self.enchant_level < MAX_ENCHANT_LEVEL

    def enchant_success_rate(self) -> float:
        """Chance of the next enchant attempt succeeding."""
        return ENCHANT_SUCCESS_RATES.get(self.enchant_level, MIN_ENCHANT_RATE)

    def enchant_cost(self) -> int:
        """Gold cost of the next enchant attempt."""
        return math.floor(config.ENCHANT_BASE_COST * config.ENCHANT_COST_MULTIPLIER ** self.enchant_level)

    def enchant(self, rng: Optional[random.Random] = None, guaranteed_success: bool = False) -> Result:
        """Attempt one enchant. Never lowers the level and never passes the max."""
        if not self.can_enchant():
            return Err("Maximum enchant level reached")

        rng = rng or random
        chance = self.enchant_success_rate()
        if not guaranteed_success and rng.random() >= chance:
            log.debug("Enchant failed on %s at +%d (chance %.2f)", self.id, self.enchant_level, chance)
            return Err(f"Enchantment failed! {self.display_name} remains unchanged.")

        self.enchant_level += 1
        self.gold_value = self.calculate_gold_value()
        return Ok(f"Enchantment succeeded! {self.display_name}", value=self.enchant_level)

    # ---------------- Comparison / copying ----------------

    def compare_with(self, other: 'Item') -> Dict[str, float]:
        """Effective stat deltas (self - other) plus score delta."""
        mine = self.get_effective_stats()
        theirs = other.get_effective_stats()
        diff = {k: round(mine.get(k) - theirs.get(k), 2) for k in STAT_KEYS}
        diff['score'] = self.get_score() - other.get_score()
        return diff

    def clone(self, new_id: Optional[str] = None) -> 'Item':
        data = self.to_dict()
        if new_id is not None:
            data['id'] = new_id
        return Item.from_dict(data)

    # ---------------- Serialization ----------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type.value,
            'rarity': self.rarity.value,
            'level': self.level,
            'slot': self.slot.value,
            'stats': self.stats.to_dict(),
            'enchantLevel': self.enchant_level,
            'setId': self.set_id,
            'setName': self.set_name,
            'goldValue': self.gold_value,
            'icon': self.icon,
            'description': self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Item':
        """Rebuild an item from a persisted record. Raises ValueError on bad rarity/slot."""
        return cls(
            id=data['id'],
            name=data['name'],
            rarity=Rarity(data['rarity']),
            level=int(data.get('level', 1)),
            slot=EquipSlot(data['slot']),
            stats=Stats.from_dict(data.get('stats')),
            type=ItemType(data.get('type', ItemType.EQUIPMENT.value)),
            enchant_level=int(data.get('enchantLevel', 0)),
            set_id=data.get('setId'),
            set_name=data.get('setName'),
            icon=data.get('icon'),
            description=data.get('description', ""),
            gold_value=data.get('goldValue'),
        )
