"""Player heroes: class stats, growth, XP and equipment bonuses."""
from __future__ import annotations
from dataclasses import dataclass
import logging
import math
import random
from typing import Any, Dict, List, Optional, Set, Tuple

from ...stats import Stats
from ..ids import UuidIds
from .effects import StatusEffectList
from .models import (
    CombatStats, Element, HeroClass, HeroRarity, Position, POSITION_BONUSES, PositionBonus,
    Role, StatusEffect, no_resistances,
)
from .resolver import apply_damage, apply_heal
from .skills import Skill, skills_for

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassProfile:
    """Level-1 stats and linear per-level growth of a hero class."""
    hp: int
    atk: int
    defense: int
    spd: int
    crit: float
    hp_growth: float
    atk_growth: float
    def_growth: float
    spd_growth: float
    crit_growth: float
    role: Role
    position: Position


CLASS_PROFILES: Dict[HeroClass, ClassProfile] = {
    HeroClass.WARRIOR: ClassProfile(150, 25, 30, 10, 5, 10, 2, 2.5, 0.5, 0.3, Role.TANK, Position.FRONT),
    HeroClass.ARCHER: ClassProfile(80, 35, 10, 25, 15, 5, 3, 0.8, 1.5, 0.8, Role.DPS, Position.MIDDLE),
    HeroClass.MAGE: ClassProfile(70, 40, 8, 15, 10, 4, 3.5, 0.5, 1, 0.5, Role.DPS, Position.BACK),
    HeroClass.CLERIC: ClassProfile(100, 15, 20, 12, 5, 7, 1.2, 1.5, 0.8, 0.3, Role.HEALER, Position.BACK),
    HeroClass.PALADIN: ClassProfile(120, 22, 25, 14, 8, 8, 2, 2, 1, 0.5, Role.SUPPORT, Position.FRONT),
}

CLASS_RESISTANCES: Dict[HeroClass, Dict[Element, int]] = {
    HeroClass.WARRIOR: {Element.PHYSICAL: 20},
    HeroClass.ARCHER: {},
    HeroClass.MAGE: {Element.FIRE: 15, Element.ICE: 15, Element.LIGHTNING: 15},
    HeroClass.CLERIC: {Element.HOLY: 30, Element.DARK: -20},
    HeroClass.PALADIN: {Element.PHYSICAL: 10, Element.HOLY: 20, Element.DARK: -10},
}

CLASS_WEAKNESSES: Dict[HeroClass, Set[Element]] = {
    HeroClass.WARRIOR: {Element.LIGHTNING},
    HeroClass.ARCHER: set(),
    HeroClass.MAGE: {Element.PHYSICAL},
    HeroClass.CLERIC: {Element.DARK},
    HeroClass.PALADIN: {Element.DARK},
}

HERO_RARITY_MULTIPLIER: Dict[HeroRarity, float] = {
    HeroRarity.COMMON: 1.0,
    HeroRarity.RARE: 1.2,
    HeroRarity.EPIC: 1.4,
    HeroRarity.LEGENDARY: 1.6,
}

# Multiplicative growth applied to base stats on each level-up
LEVEL_UP_GROWTH = {'HP': 0.05, 'ATK': 0.03, 'DEF': 0.03, 'SPD': 0.02}
LEVEL_UP_CRIT = 0.5

_hero_ids = UuidIds()


def required_xp(level: int) -> int:
    """XP needed to advance from ``level``."""
    return math.floor(100 * level ** 1.5)


class Hero:
    """Party member. Current stats = base stats + equipment bonus."""

    is_enemy = False

    def __init__(self, name: str, hero_class: HeroClass | str, level: int = 1,
                 rarity: HeroRarity | str = HeroRarity.COMMON, hero_id: Optional[str] = None):
        self.id = hero_id or _hero_ids("hero")
        self.name = name
        self.hero_class = HeroClass(hero_class)
        self.level = max(1, int(level))
        self.rarity = HeroRarity(rarity)
        profile = CLASS_PROFILES[self.hero_class]
        self.role = profile.role
        self.position = profile.position

        steps = self.level - 1
        self.base = Stats(
            hp=math.floor(profile.hp + profile.hp_growth * steps),
            atk=math.floor(profile.atk + profile.atk_growth * steps),
            defense=math.floor(profile.defense + profile.def_growth * steps),
            spd=math.floor(profile.spd + profile.spd_growth * steps),
            crit=round(profile.crit + profile.crit_growth * steps, 2),
        )
        self.equipment_bonus = Stats()
        self.max_hp = self.atk = self.defense = self.spd = 0
        self.crit = 0.0
        self._refresh_stats()

        self.current_hp = self.max_hp
        self.is_alive = True
        self.initiative = 0
        self.experience = 0
        self.cooldowns: Dict[str, int] = {}
        self.effects = StatusEffectList(self.name)

        self.resistances: Dict[Element, int] = no_resistances()
        self.resistances.update(CLASS_RESISTANCES[self.hero_class])
        self.weaknesses: Set[Element] = set(CLASS_WEAKNESSES[self.hero_class])

    def __repr__(self) -> str:
        return f"Hero({self.name!r}, {self.hero_class.value}, lv={self.level}, hp={self.current_hp}/{self.max_hp})"

    # ---------------- Stats ----------------

    @property
    def acc(self) -> int:
        return 100 + math.floor(self.spd * 0.5)

    @property
    def eva(self) -> int:
        return math.floor(self.spd * 0.3)

    def _refresh_stats(self):
        total = self.base + self.equipment_bonus
        self.max_hp = total.hp
        self.atk = total.atk
        self.defense = total.defense
        self.spd = total.spd
        self.crit = total.crit

    def apply_equipment(self, bonus: Stats):
        """Recompute stats from base + equipment totals, clamping current HP."""
        self.equipment_bonus = bonus
        self._refresh_stats()
        if self.current_hp > self.max_hp:
            self.current_hp = self.max_hp

    def get_position_bonuses(self) -> PositionBonus:
        return POSITION_BONUSES[self.position]

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

    def get_score(self) -> int:
        """Hero power rating used for rankings."""
        base = self.max_hp * 0.5 + self.atk * 5 + self.defense * 3 + self.spd * 2 + self.crit * 10
        return math.floor(base * HERO_RARITY_MULTIPLIER[self.rarity])

    # ---------------- Experience ----------------

    @property
    def required_xp(self) -> int:
        return required_xp(self.level)

    def gain_xp(self, amount: int) -> List[str]:
        """Add XP, levelling up as many times as it covers. Returns level-up messages."""
        self.experience += max(0, int(amount))
        messages = []
        while self.experience >= self.required_xp:
            self.experience -= self.required_xp
            old_hp, old_atk = self.max_hp, self.atk
            self.level += 1
            self._apply_level_up_growth()
            if self.is_alive:
                self.current_hp = self.max_hp
            messages.append(f"{self.name} leveled up! (Lv.{self.level - 1} -> Lv.{self.level})")
            messages.append(f"  HP: {old_hp} -> {self.max_hp}, ATK: {old_atk} -> {self.atk}")
            log.debug("%s reached level %d", self.name, self.level)
        return messages

    def _apply_level_up_growth(self):
        b = self.base
        self.base = Stats(
            hp=math.ceil(b.hp * (1 + LEVEL_UP_GROWTH['HP'])),
            atk=math.ceil(b.atk * (1 + LEVEL_UP_GROWTH['ATK'])),
            defense=math.ceil(b.defense * (1 + LEVEL_UP_GROWTH['DEF'])),
            spd=math.ceil(b.spd * (1 + LEVEL_UP_GROWTH['SPD'])),
            crit=round(b.crit + LEVEL_UP_CRIT, 1),
        )
        self._refresh_stats()

    # ---------------- Combat capability ----------------

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

    @property
    def skills(self) -> Tuple[Skill, ...]:
        return skills_for(self.hero_class)

    def ready_skills(self) -> List[Skill]:
        """Class skills off cooldown, in priority order."""
        return [s for s in self.skills if self.cooldowns.get(s.name, 0) == 0]

    def set_cooldown(self, skill: str, turns: int):
        self.cooldowns[skill] = max(0, int(turns))

    def tick_cooldowns(self):
        for skill, turns in self.cooldowns.items():
            if turns > 0:
                self.cooldowns[skill] = turns - 1

    def roll_initiative(self, rng: Any = None) -> int:
        rng = rng or random
        self.initiative = self.spd + rng.randint(0, 10)
        return self.initiative

    def reset_combat_state(self):
        self.cooldowns.clear()
        self.effects.clear()

    def reset(self):
        self.current_hp = self.max_hp
        self.is_alive = True
        self.reset_combat_state()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'class': self.hero_class.value,
            'rarity': self.rarity.value,
            'level': self.level,
            'experience': self.experience,
            'hp': self.current_hp,
            'maxHP': self.max_hp,
            'base': self.base.to_dict(),
            'position': self.position.value,
        }
