"""Enemy combatants and enemy-group generation."""
from __future__ import annotations
import math
import random
from typing import Any, Dict, List, Optional, Set

from ..ids import UuidIds
from .effects import StatusEffectList
from .models import (
    CombatStats, Element, EnemyType, Position, POSITION_BONUSES, PositionBonus,
    StatusEffect, MAGIC_ELEMENTS,
)
from .resolver import apply_damage, apply_heal

ENEMY_NAMES = [
    'Goblin', 'Orc', 'Skeleton', 'Spider', 'Wolf',
    'Bandit', 'Dark Knight', 'Zombie', 'Imp', 'Slime',
]

# Level-1 stats and per-level increments
BASE_STATS = {'HP': 50, 'ATK': 12, 'DEF': 8, 'SPD': 10, 'CRIT': 3}
PER_LEVEL = {'HP': 12, 'ATK': 3, 'DEF': 2, 'SPD': 1.5, 'CRIT': 0.8}

TYPE_MULTIPLIERS: Dict[EnemyType, Dict[str, float]] = {
    EnemyType.NORMAL: {'hp': 1.0, 'atk': 1.0, 'def': 1.0},
    EnemyType.ELITE: {'hp': 1.8, 'atk': 1.4, 'def': 1.3},
    EnemyType.BOSS: {'hp': 3.5, 'atk': 1.7, 'def': 1.5},
}

# (accuracy bonus, evasion bonus, flat resistance to every element)
TYPE_BONUSES: Dict[EnemyType, tuple] = {
    EnemyType.NORMAL: (0, 0, 0),
    EnemyType.ELITE: (10, 8, 10),
    EnemyType.BOSS: (20, 15, 15),
}

AFFINITY_CHANCE = 0.2
AFFINITY_BONUS = 30
WEAKNESS_CHANCE = {EnemyType.NORMAL: 0.5, EnemyType.ELITE: 0.3, EnemyType.BOSS: 0.0}
LEVEL_SCALING_PER_LEVEL = 0.15

_enemy_ids = UuidIds()


def enemy_base_stats(level: int, enemy_type: EnemyType) -> Dict[str, float]:
    """Stats for a level/type before randomness (HP, ATK, DEF, SPD, CRIT)."""
    steps = level - 1
    mult = TYPE_MULTIPLIERS[enemy_type]
    scaling = 1 + steps * LEVEL_SCALING_PER_LEVEL
    return {
        'HP': math.floor((BASE_STATS['HP'] + PER_LEVEL['HP'] * steps) * mult['hp'] * scaling),
        'ATK': math.floor((BASE_STATS['ATK'] + PER_LEVEL['ATK'] * steps) * mult['atk'] * scaling),
        'DEF': math.floor((BASE_STATS['DEF'] + PER_LEVEL['DEF'] * steps) * mult['def'] * scaling),
        'SPD': math.floor(BASE_STATS['SPD'] + PER_LEVEL['SPD'] * steps),
        'CRIT': BASE_STATS['CRIT'] + PER_LEVEL['CRIT'] * steps,
    }


class Enemy:
    """Monster combatant. Randomized traits come from the injected rng."""

    is_enemy = True

    def __init__(self, name: str, level: int = 1, enemy_type: EnemyType | str = EnemyType.NORMAL,
                 rng: Any = None, enemy_id: Optional[str] = None):
        rng = rng or random
        self.id = enemy_id or _enemy_ids("enemy")
        self.name = name
        self.level = max(1, int(level))
        self.enemy_type = EnemyType(enemy_type)

        stats = enemy_base_stats(self.level, self.enemy_type)
        self.max_hp: int = stats['HP']
        self.atk: int = stats['ATK']
        self.defense: int = stats['DEF']
        self.spd: int = stats['SPD']
        self.crit: float = stats['CRIT']

        acc_bonus, eva_bonus, flat_res = TYPE_BONUSES[self.enemy_type]
        self.acc = 90 + math.floor(self.spd * 0.4) + acc_bonus
        self.eva = math.floor(self.spd * 0.25) + eva_bonus

        self.current_hp = self.max_hp
        self.is_alive = True
        self.initiative = 0
        self.effects = StatusEffectList(self.name)

        self.resistances: Dict[Element, int] = {e: flat_res for e in Element}
        if rng.random() < AFFINITY_CHANCE:
            self.resistances[rng.choice(MAGIC_ELEMENTS)] += AFFINITY_BONUS
        self.weaknesses: Set[Element] = set()
        if rng.random() < WEAKNESS_CHANCE[self.enemy_type]:
            self.weaknesses.add(rng.choice(MAGIC_ELEMENTS))

        self.position = self._determine_position(rng)

    def __repr__(self) -> str:
        return f"Enemy({self.name!r}, lv={self.level}, {self.enemy_type.value}, hp={self.current_hp}/{self.max_hp})"

    def _determine_position(self, rng) -> Position:
        if self.enemy_type in (EnemyType.BOSS, EnemyType.ELITE):
            return Position.FRONT
        roll = rng.random()
        if roll < 0.3:
            return Position.FRONT
        if roll < 0.8:
            return Position.MIDDLE
        return Position.BACK

    def get_position_bonuses(self) -> PositionBonus:
        return POSITION_BONUSES[self.position]

    def empower(self, hp: float = 1.0, atk: float = 1.0, defense: float = 1.0):
        """Scale core stats in place (mini-boss variants). Restores HP to the new max."""
        self.max_hp = math.floor(self.max_hp * hp)
        self.atk = math.floor(self.atk * atk)
        self.defense = math.floor(self.defense * defense)
        self.current_hp = self.max_hp

    # ---------------- Combat capability ----------------

    def get_combat_stats(self) -> CombatStats:
        e = self.effects
        return CombatStats(
            atk=e.effective_stat(self.atk, 'ATK'),
            defense=e.effective_stat(self.defense, 'DEF'),
            spd=e.effective_stat(self.spd, 'SPD'),
            crit=e.effective_stat(self.crit, 'CRIT'),
            acc=e.effective_stat(self.acc, 'ACC'),
            eva=e.effective_stat(self.eva, 'EVA'),
        )

    def take_damage(self, raw_damage: int, is_crit: bool = False,
                    element: Element = Element.PHYSICAL) -> int:
        return apply_damage(self, raw_damage, is_crit, element)

    def heal(self, amount: int) -> int:
        return apply_heal(self, amount)

    def add_status_effect(self, effect: StatusEffect):
        self.effects.add(effect)

    def tick_status_effects(self):
        self.effects.tick()

    def is_stunned(self) -> bool:
        return self.effects.is_stunned()

    def tick_cooldowns(self):
        """Enemies have no skills, so nothing cools down."""
        pass

    def ready_skills(self) -> List[Any]:
        return []

    def roll_initiative(self, rng: Any = None) -> int:
        rng = rng or random
        self.initiative = self.spd + rng.randint(0, 10)
        return self.initiative

    def reset_combat_state(self):
        self.effects.clear()

    def reset(self):
        self.current_hp = self.max_hp
        self.is_alive = True
        self.reset_combat_state()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'level': self.level,
            'type': self.enemy_type.value,
            'hp': self.current_hp,
            'maxHP': self.max_hp,
            'ATK': self.atk,
            'DEF': self.defense,
            'SPD': self.spd,
            'CRIT': self.crit,
            'position': self.position.value,
        }

    # ---------------- Generation ----------------

    @classmethod
    def spawn(cls, level: int, enemy_type: EnemyType | str = EnemyType.NORMAL,
              rng: Any = None, enemy_id: Optional[str] = None) -> 'Enemy':
        rng = rng or random
        return cls(rng.choice(ENEMY_NAMES), level, enemy_type, rng, enemy_id)

    @classmethod
    def generate_group(cls, count: int, level: int, types: Optional[List[EnemyType]] = None,
                       rng: Any = None, ids=None) -> List['Enemy']:
        """``count`` random enemies; ``types`` cycles when shorter than count."""
        group = []
        for i in range(count):
            enemy_type = types[i % len(types)] if types else EnemyType.NORMAL
            group.append(cls.spawn(level, enemy_type, rng, ids("enemy") if ids else None))
        return group
