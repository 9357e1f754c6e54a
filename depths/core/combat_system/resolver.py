"""Attack resolution: hit roll, crit roll and the damage mitigation pipeline.

Supports an injectable RNG for deterministic tests:
- CombatResolver(rng) or set_rng(r) replaces the module-level random source
- the free functions take an optional ``rng`` argument
"""
from __future__ import annotations
import logging
import math
import random
from typing import Any, Dict, Iterable, Optional

from ...results import InvariantError
from .models import AttackResult, Element

log = logging.getLogger(__name__)

MIN_HIT_CHANCE = 5.0
MAX_HIT_CHANCE = 95.0
WEAKNESS_MULTIPLIER = 1.5
CRIT_MULTIPLIER = 1.5


def hit_chance(accuracy: float, evasion: float) -> float:
    """Percent chance to hit, clamped to [5, 95]."""
    chance = 100 + (accuracy - evasion) / 10
    return max(MIN_HIT_CHANCE, min(MAX_HIT_CHANCE, chance))


def mitigate(raw_damage: float, is_crit: bool, element: Element, defense: float,
             resistances: Dict[Element, int], weaknesses: Iterable[Element],
             damage_reduction: float = 0.0) -> int:
    """Damage left after armor, element and status reduction. Never below 1."""
    defense = max(0, defense)
    if is_crit:
        damage = math.floor(raw_damage * CRIT_MULTIPLIER * (100 / (100 + defense * 0.5)))
    else:
        damage = math.floor(raw_damage * (100 / (100 + defense)))

    # weakness multiplies on top of the resistance-adjusted value
    modifier = 1 - resistances.get(element, 0) / 100
    if element in weaknesses:
        modifier *= WEAKNESS_MULTIPLIER
    damage = math.floor(damage * modifier)

    if damage_reduction > 0:
        damage = math.floor(damage * (1 - damage_reduction / 100))

    return max(1, damage)


def check_hp_invariant(combatant: Any):
    """Raise InvariantError when HP left [0, max_hp] or the alive flag disagrees with HP."""
    hp = combatant.current_hp
    if hp < 0 or hp > combatant.max_hp or combatant.is_alive != (hp > 0):
        log.error("HP invariant broken on %s: %s/%s alive=%s",
                  combatant.name, hp, combatant.max_hp, combatant.is_alive)
        raise InvariantError(
            f"{combatant.name} has HP {hp}/{combatant.max_hp} (alive={combatant.is_alive})")


def _subtract_hp(combatant: Any, damage: int):
    combatant.current_hp = max(0, combatant.current_hp - damage)
    if combatant.current_hp == 0:
        combatant.is_alive = False
    check_hp_invariant(combatant)


def apply_damage(defender: Any, raw_damage: float, is_crit: bool = False,
                 element: Element = Element.PHYSICAL) -> int:
    """Run the mitigation pipeline against a combatant and subtract HP. Returns damage dealt."""
    if not defender.is_alive:
        return 0
    if defender.effects.has_immunity():
        log.debug("%s is immune to damage", defender.name)
        return 0

    stats = defender.get_combat_stats()
    damage = mitigate(raw_damage, is_crit, element, stats.defense,
                      defender.resistances, defender.weaknesses,
                      defender.effects.damage_reduction())

    _subtract_hp(defender, damage)
    return damage


def apply_heal(combatant: Any, amount: int) -> int:
    """Heal a living combatant up to max HP. Returns HP restored."""
    if not combatant.is_alive or amount <= 0:
        return 0
    before = combatant.current_hp
    combatant.current_hp = min(combatant.max_hp, combatant.current_hp + int(amount))
    check_hp_invariant(combatant)
    return combatant.current_hp - before


def apply_true_damage(combatant: Any, amount: int) -> int:
    """Unmitigated HP loss for room hazards. Ignores immunity and reduction."""
    if not combatant.is_alive or amount <= 0:
        return 0
    amount = int(amount)
    _subtract_hp(combatant, amount)
    return amount


def resolve_attack(attacker: Any, target: Any, rng: Any = None, multiplier: float = 1.0,
                   element: Element = Element.PHYSICAL) -> Optional[AttackResult]:
    """Basic attack: hit roll, crit roll, then damage scaled by the target's row.

    None if either side is down.
    """
    if not attacker.is_alive or not target.is_alive:
        return None
    rng = rng or random

    attacker_stats = attacker.get_combat_stats()
    target_stats = target.get_combat_stats()
    chance = hit_chance(attacker_stats.acc, target_stats.eva)

    if rng.random() * 100 >= chance:
        log.debug("%s missed %s (%.1f%%)", attacker.name, target.name, chance)
        return AttackResult(attacker, target, did_miss=True, element=element, hit_chance=chance)

    is_crit = rng.random() * 100 < attacker_stats.crit
    raw = math.floor(attacker_stats.atk * multiplier * target.get_position_bonuses().damage_taken)
    damage = target.take_damage(raw, is_crit, element)
    return AttackResult(attacker, target, damage=damage, is_crit=is_crit,
                        element=element, hit_chance=chance)


class CombatResolver:
    """Stateful wrapper holding an RNG for a whole battle."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng

    def set_rng(self, rng: random.Random):
        self._rng = rng

    @property
    def rng(self):
        return self._rng or random

    def resolve_attack(self, attacker: Any, target: Any, multiplier: float = 1.0,
                       element: Element = Element.PHYSICAL) -> Optional[AttackResult]:
        return resolve_attack(attacker, target, self.rng, multiplier, element)
