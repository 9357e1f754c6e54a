"""Automated party-vs-enemies battle loop.

Each round:
- ticks cooldowns and status effects of every living combatant
- rolls initiative and acts in descending order
- skips dead or stunned combatants
- checks victory/defeat after every action

A combatant with a skill off cooldown uses it (when it has valid targets)
instead of a basic attack. Rewards (XP and loot) are granted once, on victory.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import math
import random
from typing import Any, Dict, List, Optional

from ..loot import CombatLootGenerator, ItemGenerator
from .combat_system.ai import choose_target, living
from .combat_system.resolver import CombatResolver
from .combat_system.skills import Skill, pick_targets, use_skill

log = logging.getLogger(__name__)

DEFAULT_MAX_ROUNDS = 50
XP_PER_ENEMY_LEVEL = 50

# Consecutive hits by the same combatant add 10% damage, up to +50%
COMBO_STEP = 0.1
MAX_COMBO = 5


class BattleOutcome(Enum):
    ONGOING = "ongoing"
    VICTORY = "victory"
    DEFEAT = "defeat"
    TIMEOUT = "timeout"


@dataclass
class BattleReport:
    """Summary returned by Battle.run()."""
    outcome: BattleOutcome
    rounds: int
    log: List[str] = field(default_factory=list)
    experience: int = 0
    loot: Dict[str, Any] = field(default_factory=lambda: {'gold': 0, 'items': []})

    @property
    def victory(self) -> bool:
        return self.outcome == BattleOutcome.VICTORY


class Battle:
    """Runs heroes against enemies with an injectable RNG.

    ``ids`` names dropped items; pass the dungeon's factory so loot from
    every battle of a run shares one id space.
    """

    def __init__(self, heroes: List[Any], enemies: List[Any], rng: Optional[random.Random] = None,
                 loot_generator: Optional[CombatLootGenerator] = None, ids=None):
        self.heroes = list(heroes)
        self.enemies = list(enemies)
        self._rng = rng
        self.resolver = CombatResolver(rng)
        self.loot_generator = loot_generator or CombatLootGenerator(ItemGenerator(ids=ids, rng=rng), rng=rng)
        self.round = 0
        self.outcome = BattleOutcome.ONGOING
        self.log: List[str] = []
        self._combo: Dict[str, int] = {}

    @property
    def rng(self):
        return self._rng or random

    @property
    def is_over(self) -> bool:
        return self.outcome != BattleOutcome.ONGOING

    def combatants(self) -> List[Any]:
        return self.heroes + self.enemies

    def _check_end(self) -> bool:
        if not living(self.enemies):
            self.outcome = BattleOutcome.VICTORY
        elif not living(self.heroes):
            self.outcome = BattleOutcome.DEFEAT
        return self.is_over

    def _turn_order(self) -> List[Any]:
        order = living(self.combatants())
        for combatant in order:
            combatant.roll_initiative(self.rng)
        # stable sort keeps heroes ahead of enemies on equal initiative
        return sorted(order, key=lambda c: c.initiative, reverse=True)

    def _combo_multiplier(self, combatant: Any) -> float:
        return 1 + COMBO_STEP * min(self._combo.get(combatant.id, 0), MAX_COMBO)

    def _act(self, actor: Any):
        if actor.is_enemy:
            allies, opponents = self.enemies, self.heroes
        else:
            allies, opponents = self.heroes, self.enemies
        if not living(opponents):
            return

        for skill in actor.ready_skills():
            targets = pick_targets(skill, actor, allies, opponents, self.rng)
            if targets:
                self._use_skill(actor, skill, targets)
                return
        self._attack(actor, opponents)

    def _use_skill(self, actor: Any, skill: Skill, targets: List[Any]):
        result = use_skill(actor, skill, targets, self.rng, actor.get_position_bonuses().damage_dealt)
        self.log.append(f"{actor.name} uses {skill.name}")
        for hit in result.hits:
            crit = " (critical!)" if hit.is_crit else ""
            self.log.append(f"  {hit.target.name} takes {hit.damage}{crit}")
            if not hit.target.is_alive:
                self.log.append(f"{hit.target.name} is defeated")
        for target, amount in result.heals:
            self.log.append(f"  {target.name} recovers {amount} HP")
        for target in result.affected:
            self.log.append(f"  {target.name} gains {skill.effect.name}")

    def _attack(self, actor: Any, opponents: List[Any]):
        target = choose_target(opponents, self.rng)
        if target is None:
            return

        multiplier = self._combo_multiplier(actor) * actor.get_position_bonuses().damage_dealt
        result = self.resolver.resolve_attack(actor, target, multiplier)
        if result is None:
            return

        if result.did_miss:
            self._combo[actor.id] = 0
            self.log.append(f"{actor.name} misses {target.name}")
            return

        self._combo[actor.id] = self._combo.get(actor.id, 0) + 1
        crit = " (critical!)" if result.is_crit else ""
        self.log.append(f"{actor.name} hits {target.name} for {result.damage}{crit}")
        if not target.is_alive:
            self.log.append(f"{target.name} is defeated")

    def run_round(self) -> BattleOutcome:
        """Play one full round. No-op once the battle has ended."""
        if self.is_over:
            return self.outcome
        self.round += 1

        for combatant in living(self.combatants()):
            combatant.tick_cooldowns()
            combatant.tick_status_effects()

        for actor in self._turn_order():
            if not actor.is_alive:
                continue
            if actor.is_stunned():
                self.log.append(f"{actor.name} is stunned")
                continue
            self._act(actor)
            if self._check_end():
                break

        return self.outcome

    def experience_reward(self) -> int:
        """floor(50 x average enemy level x enemy count)."""
        if not self.enemies:
            return 0
        avg_level = sum(e.level for e in self.enemies) / len(self.enemies)
        return math.floor(XP_PER_ENEMY_LEVEL * avg_level * len(self.enemies))

    def _grant_rewards(self, report: BattleReport):
        report.experience = self.experience_reward()
        for hero in living(self.heroes):
            for line in hero.gain_xp(report.experience):
                report.log.append(line)
        report.loot = self.loot_generator.generate_loot(self.enemies)

    def run(self, max_rounds: int = DEFAULT_MAX_ROUNDS) -> BattleReport:
        """Play rounds until one side falls or ``max_rounds`` is reached."""
        if not self._check_end():
            while self.round < max_rounds:
                if self.run_round() != BattleOutcome.ONGOING:
                    break
        if not self.is_over:
            self.outcome = BattleOutcome.TIMEOUT

        report = BattleReport(self.outcome, self.round, list(self.log))
        if self.outcome == BattleOutcome.VICTORY:
            self._grant_rewards(report)
        log.debug("Battle ended: %s after %d rounds", self.outcome.value, self.round)

        for combatant in self.combatants():
            combatant.reset_combat_state()
        return report
