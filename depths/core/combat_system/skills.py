"""Hero skills: three per class, each gated by its own cooldown.

A skill can:
- damage one or every opponent (no hit roll, crits follow the skill's rule)
- heal wounded allies
- put a status effect on its targets (stun, stat buff, shield, immunity)

Cooldowns are set on use and tick down once per round like any other
cooldown on the caster.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
import logging
import math
import random
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .ai import choose_target, living, lowest_hp_ratio
from .models import AttackResult, Element, HeroClass, StatusEffect

log = logging.getLogger(__name__)

# Heals wait until an ally drops below this share of max HP
HEAL_THRESHOLD = 0.6


class SkillKind(Enum):
    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"


class SkillTarget(Enum):
    ENEMY = "enemy"
    ALL_ENEMIES = "all_enemies"
    SELF = "self"
    ALLY = "ally"
    ALL_ALLIES = "all_allies"


@dataclass(frozen=True)
class Skill:
    name: str
    description: str
    cooldown: int  # rounds
    kind: SkillKind
    target: SkillTarget
    multiplier: float = 0.0  # share of caster ATK dealt as damage
    element: Element = Element.PHYSICAL
    crit: Optional[bool] = None  # None rolls CRIT, True/False forces the outcome
    heal: int = 0
    lifesteal: float = 0.0  # share of damage dealt healed back to the caster
    effect: Optional[StatusEffect] = None  # template, copied for every target

    def new_effect(self) -> Optional[StatusEffect]:
        return replace(self.effect) if self.effect is not None else None


@dataclass
class SkillResult:
    caster: Any
    skill: Skill
    hits: List[AttackResult] = field(default_factory=list)
    heals: List[Tuple[Any, int]] = field(default_factory=list)
    affected: List[Any] = field(default_factory=list)


CLASS_SKILLS: Dict[HeroClass, Tuple[Skill, ...]] = {
    HeroClass.WARRIOR: (
        Skill('Heavy Slash', 'Deal 150% ATK damage to one enemy', 2,
              SkillKind.DAMAGE, SkillTarget.ENEMY, multiplier=1.5),
        Skill('Shield Bash', 'Deal 80% ATK damage and stun for 1 turn', 3,
              SkillKind.DAMAGE, SkillTarget.ENEMY, multiplier=0.8, crit=False,
              effect=StatusEffect('Stunned', 1, 'debuff', stun=True)),
        Skill('Battle Cry', 'Increase team ATK by 30% for 3 turns', 5,
              SkillKind.BUFF, SkillTarget.ALL_ALLIES,
              effect=StatusEffect('Battle Cry', 3, stat='ATK', value=30)),
    ),
    HeroClass.ARCHER: (
        Skill('Precise Shot', 'Deal 180% ATK damage with a guaranteed crit', 2,
              SkillKind.DAMAGE, SkillTarget.ENEMY, multiplier=1.8, crit=True),
        Skill('Multi-Shot', 'Deal 80% ATK damage to all enemies', 4,
              SkillKind.DAMAGE, SkillTarget.ALL_ENEMIES, multiplier=0.8),
        Skill('Evasion', 'Increase SPD by 50% for 2 turns', 3,
              SkillKind.BUFF, SkillTarget.SELF,
              effect=StatusEffect('Evasion', 2, stat='SPD', value=50)),
    ),
    HeroClass.MAGE: (
        Skill('Fireball', 'Deal 200% ATK fire damage to one enemy', 2,
              SkillKind.DAMAGE, SkillTarget.ENEMY, multiplier=2.0, element=Element.FIRE),
        Skill('Chain Lightning', 'Deal 120% ATK lightning damage to all enemies', 4,
              SkillKind.DAMAGE, SkillTarget.ALL_ENEMIES, multiplier=1.2, element=Element.LIGHTNING),
        Skill('Mana Shield', 'Reduce incoming damage by 40% for 3 turns', 5,
              SkillKind.BUFF, SkillTarget.SELF,
              effect=StatusEffect('Mana Shield', 3, stat='damageReduction', value=40)),
    ),
    HeroClass.CLERIC: (
        Skill('Heal', 'Restore 100 HP to one ally', 2,
              SkillKind.HEAL, SkillTarget.ALLY, heal=100),
        Skill('Group Heal', 'Restore 60 HP to all allies', 4,
              SkillKind.HEAL, SkillTarget.ALL_ALLIES, heal=60),
        Skill('Holy Smite', 'Deal 100% ATK holy damage', 3,
              SkillKind.DAMAGE, SkillTarget.ENEMY, multiplier=1.0, element=Element.HOLY, crit=False),
    ),
    HeroClass.PALADIN: (
        Skill('Smite', 'Deal 130% ATK damage and heal for 30% of it', 2,
              SkillKind.DAMAGE, SkillTarget.ENEMY, multiplier=1.3, lifesteal=0.3),
        Skill('Divine Shield', 'Become immune to damage for 1 turn', 5,
              SkillKind.BUFF, SkillTarget.SELF,
              effect=StatusEffect('Divine Shield', 1, immunity=True)),
        Skill('Blessing', 'Increase ally DEF by 40% for 3 turns', 3,
              SkillKind.BUFF, SkillTarget.ALLY,
              effect=StatusEffect('Blessing', 3, stat='DEF', value=40)),
    ),
}


def skills_for(hero_class: HeroClass | str) -> Tuple[Skill, ...]:
    return CLASS_SKILLS[HeroClass(hero_class)]


def _wounded(allies: Sequence[Any]) -> List[Any]:
    return [a for a in living(allies) if a.current_hp < a.max_hp * HEAL_THRESHOLD]


def pick_targets(skill: Skill, caster: Any, allies: Sequence[Any], opponents: Sequence[Any],
                 rng: Any = None) -> List[Any]:
    """Targets for ``skill`` right now. Empty means the skill should wait."""
    if skill.target == SkillTarget.SELF:
        return [caster]
    if skill.target == SkillTarget.ENEMY:
        target = choose_target(opponents, rng)
        return [target] if target is not None else []
    if skill.target == SkillTarget.ALL_ENEMIES:
        return living(opponents)

    if skill.kind == SkillKind.HEAL:
        wounded = _wounded(allies)
        if not wounded:
            return []
        if skill.target == SkillTarget.ALLY:
            return [lowest_hp_ratio(wounded)]
        return living(allies)

    if skill.target == SkillTarget.ALLY:
        ally = lowest_hp_ratio(allies)
        return [ally] if ally is not None else []
    return living(allies)


def use_skill(caster: Any, skill: Skill, targets: Sequence[Any], rng: Any = None,
              multiplier: float = 1.0) -> SkillResult:
    """Apply ``skill`` to ``targets`` and start its cooldown on the caster."""
    rng = rng or random
    result = SkillResult(caster, skill)
    stats = caster.get_combat_stats()

    for target in targets:
        if not target.is_alive:
            continue
        if skill.multiplier:
            is_crit = skill.crit if skill.crit is not None else rng.random() * 100 < stats.crit
            raw = math.floor(stats.atk * skill.multiplier * multiplier
                             * target.get_position_bonuses().damage_taken)
            damage = target.take_damage(raw, is_crit, skill.element)
            result.hits.append(AttackResult(caster, target, damage=damage, is_crit=is_crit,
                                            element=skill.element, hit_chance=100.0))
            if skill.lifesteal and damage:
                healed = caster.heal(math.floor(damage * skill.lifesteal))
                if healed:
                    result.heals.append((caster, healed))
        if skill.heal:
            healed = target.heal(skill.heal)
            if healed:
                result.heals.append((target, healed))
        if skill.effect is not None and target.is_alive:
            target.add_status_effect(skill.new_effect())
            result.affected.append(target)

    caster.set_cooldown(skill.name, skill.cooldown)
    log.debug("%s used %s on %d target(s)", caster.name, skill.name, len(targets))
    return result
