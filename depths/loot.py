"""Item generation and weighted loot tables.

Provides weighted rarity rolls, level-scaled item generation and the
combat drop generator used after battles.
"""
from __future__ import annotations
from dataclasses import dataclass, field
import logging
import math
import random
from typing import Dict, List, Optional, Any

from .core.ids import default_ids
from .items import Item, Rarity, EquipSlot, ItemType, RARITY_STAT_MULTIPLIER
from .stats import Stats

log = logging.getLogger(__name__)

# Per-slot stat distribution (multiplied by the base stat)
SLOT_STAT_TEMPLATES: Dict[EquipSlot, Dict[str, float]] = {
    EquipSlot.HELMET: {'HP': 3, 'DEF': 2},
    EquipSlot.WEAPON: {'ATK': 3, 'CRIT': 0.5, 'SPD': 0.5},
    EquipSlot.CHEST: {'HP': 4, 'DEF': 3},
    EquipSlot.GLOVES: {'ATK': 1, 'DEF': 1, 'SPD': 1, 'HP': 1, 'CRIT': 0.3},
    EquipSlot.LEGS: {'HP': 2, 'DEF': 2, 'SPD': 0.5},
    EquipSlot.BOOTS: {'SPD': 2, 'DEF': 1, 'HP': 1},
    EquipSlot.ACCESSORY: {'CRIT': 1, 'ATK': 1, 'HP': 1, 'DEF': 0.5, 'SPD': 0.5},
}

NAME_PREFIXES: Dict[Rarity, List[str]] = {
    Rarity.MYTHIC: ['Divine', 'Eternal', 'Celestial', 'Primordial'],
    Rarity.LEGENDARY: ['Ancient', 'Mystic', 'Cursed', 'Holy'],
    Rarity.EPIC: ['Superior', 'Enhanced', 'Reinforced', 'Blessed'],
    Rarity.RARE: ['Fine', 'Quality', 'Sturdy', 'Sharp'],
    Rarity.UNCOMMON: ['Decent', 'Good', 'Reliable'],
    Rarity.COMMON: [],
}

SLOT_NAMES: Dict[EquipSlot, List[str]] = {
    EquipSlot.HELMET: ['Helmet', 'Helm', 'Crown', 'Circlet'],
    EquipSlot.WEAPON: ['Sword', 'Blade', 'Axe', 'Mace'],
    EquipSlot.CHEST: ['Armor', 'Breastplate', 'Chainmail', 'Tunic'],
    EquipSlot.GLOVES: ['Gloves', 'Gauntlets', 'Handwraps'],
    EquipSlot.LEGS: ['Greaves', 'Leggings', 'Pants'],
    EquipSlot.BOOTS: ['Boots', 'Shoes', 'Treads'],
    EquipSlot.ACCESSORY: ['Ring', 'Amulet', 'Talisman', 'Charm'],
}

SLOT_DESCRIPTIONS: Dict[EquipSlot, str] = {
    EquipSlot.HELMET: 'Protects the head from enemy attacks.',
    EquipSlot.WEAPON: 'A deadly weapon for combat.',
    EquipSlot.CHEST: 'Sturdy armor for the torso.',
    EquipSlot.GLOVES: 'Protective handwear.',
    EquipSlot.LEGS: 'Armor for the lower body.',
    EquipSlot.BOOTS: 'Footwear for adventurers.',
    EquipSlot.ACCESSORY: 'A magical trinket with special properties.',
}

# Drop odds and rarity spread for combat loot
DROP_CHANCES: Dict[str, float] = {'normal': 0.30, 'elite': 0.50, 'boss': 1.00}
COMBAT_RARITY_WEIGHTS: Dict[Rarity, float] = {
    Rarity.COMMON: 0.60, Rarity.UNCOMMON: 0.25, Rarity.RARE: 0.10,
    Rarity.EPIC: 0.04, Rarity.LEGENDARY: 0.01,
}
GOLD_PER_ENEMY_LEVEL = 10
GOLD_VARIANCE = 0.2


@dataclass
class LootEntry:
    """Single weighted entry in a loot table."""
    rarity: Rarity
    weight: float  # relative weight, need not sum to 1


@dataclass
class LootTable:
    """Weighted rarity table."""
    id: str
    entries: List[LootEntry] = field(default_factory=list)

    def add_entry(self, entry: LootEntry):
        self.entries.append(entry)

    def roll(self, rng: Optional[random.Random] = None) -> Rarity:
        """Pick one rarity proportionally to its weight."""
        rng = rng or random
        total_weight = sum(entry.weight for entry in self.entries)
        if total_weight <= 0:
            return Rarity.COMMON

        roll = rng.random() * total_weight
        current_weight = 0.0
        for entry in self.entries:
            current_weight += entry.weight
            if roll < current_weight:
                return entry.rarity
        return self.entries[-1].rarity

    @classmethod
    def from_weights(cls, table_id: str, weights: Dict[Rarity, float]) -> 'LootTable':
        return cls(table_id, [LootEntry(rarity, w) for rarity, w in weights.items()])


def roll_rarity(weights: Dict[Rarity, float], rng: Optional[random.Random] = None) -> Rarity:
    """Shortcut for a one-off weighted rarity roll."""
    return LootTable.from_weights('adhoc', weights).roll(rng)


class ItemGenerator:
    """Creates level-scaled equipment with ids from an injected factory."""

    def __init__(self, ids=None, rng: Optional[random.Random] = None):
        self.ids = ids or default_ids("item")
        self._rng = rng

    def set_rng(self, rng: random.Random):
        self._rng = rng

    @property
    def rng(self):
        return self._rng or random

    def generate(self, level: int, rarity: Rarity | str, slot: Optional[EquipSlot | str] = None,
                 item_id: Optional[str] = None) -> Item:
        """Generate one equipment item of the given level and rarity."""
        rarity = Rarity(rarity)
        rng = self.rng
        slot = EquipSlot(slot) if slot is not None else rng.choice(list(EquipSlot))
        level = max(1, int(level))

        base_stat = math.floor(3 * level ** 1.2 * RARITY_STAT_MULTIPLIER[rarity])
        return Item(
            id=item_id or self.ids("item"),
            name=self._generate_name(rarity, slot),
            rarity=rarity,
            level=level,
            slot=slot,
            stats=stats_for_slot(slot, base_stat),
            type=ItemType.EQUIPMENT,
            description=SLOT_DESCRIPTIONS[slot],
        )

    def generate_set_piece(self, level: int, rarity: Rarity | str, set_id: str, set_name: str,
                           slot: EquipSlot | str) -> Item:
        """Generate an item stamped with a set affiliation."""
        item = self.generate(level, rarity, slot)
        item.set_id = set_id
        item.set_name = set_name
        item.name = f"{set_name} {SLOT_NAMES[item.slot][0]}"
        return item

    def _generate_name(self, rarity: Rarity, slot: EquipSlot) -> str:
        rng = self.rng
        prefixes = NAME_PREFIXES[rarity]
        slot_name = rng.choice(SLOT_NAMES[slot])
        if not prefixes:
            return slot_name
        return f"{rng.choice(prefixes)} {slot_name}"


def stats_for_slot(slot: EquipSlot, base_stat: int) -> Stats:
    """Apply the slot template to a base stat."""
    template = SLOT_STAT_TEMPLATES[slot]
    return Stats(
        hp=math.floor(base_stat * template.get('HP', 0)),
        atk=math.floor(base_stat * template.get('ATK', 0)),
        defense=math.floor(base_stat * template.get('DEF', 0)),
        spd=math.floor(base_stat * template.get('SPD', 0)),
        crit=round(base_stat * template.get('CRIT', 0) * 0.1, 2),
    )


class CombatLootGenerator:
    """Gold and item drops for a group of defeated enemies."""

    def __init__(self, generator: Optional[ItemGenerator] = None, rng: Optional[random.Random] = None):
        self._rng = rng
        self.generator = generator or ItemGenerator(rng=rng)
        self.rarity_table = LootTable.from_weights('combat', COMBAT_RARITY_WEIGHTS)

    def generate_loot(self, enemies: List[Any]) -> Dict[str, Any]:
        """Returns {'gold': int, 'items': [Item]} for the defeated enemies."""
        rng = self._rng or random
        gold = 0
        items: List[Item] = []
        for enemy in enemies:
            variance = 1 - GOLD_VARIANCE + rng.random() * GOLD_VARIANCE * 2
            gold += math.floor(enemy.level * GOLD_PER_ENEMY_LEVEL * variance)

            if rng.random() < DROP_CHANCES.get(enemy.enemy_type.value, 0.0):
                rarity = self.rarity_table.roll(rng)
                item_level = max(1, enemy.level + rng.randint(-1, 2))
                items.append(self.generator.generate(item_level, rarity))

        log.debug("Loot generated: %d gold, %d items", gold, len(items))
        return {'gold': gold, 'items': items}
