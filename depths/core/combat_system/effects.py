"""Status effects with duration and tick management."""
from __future__ import annotations
import logging
import math
from typing import Iterator, List, Optional

from .models import StatusEffect

log = logging.getLogger(__name__)

MAX_DAMAGE_REDUCTION = 90


class StatusEffectList:
    """Active effects on one combatant, keyed by name (no stacking)."""

    def __init__(self, owner_name: str = ""):
        self.owner_name = owner_name
        self._effects: List[StatusEffect] = []

    def __iter__(self) -> Iterator[StatusEffect]:
        return iter(list(self._effects))

    def __len__(self) -> int:
        return len(self._effects)

    def get(self, name: str) -> Optional[StatusEffect]:
        for effect in self._effects:
            if effect.name == name:
                return effect
        return None

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def add(self, effect: StatusEffect):
        """Apply an effect; re-adding an existing name only refreshes its duration."""
        existing = self.get(effect.name)
        if existing:
            existing.duration = effect.duration
        else:
            self._effects.append(effect)
        log.debug("%s gained %s (%d turns)", self.owner_name, effect.name, effect.duration)

    def tick(self) -> List[StatusEffect]:
        """Decrement every duration once. Returns the effects that expired."""
        expired = []
        remaining = []
        for effect in self._effects:
            if effect.tick():
                expired.append(effect)
            else:
                remaining.append(effect)
        self._effects = remaining
        for effect in expired:
            log.debug("%s expired on %s", effect.name, self.owner_name)
        return expired

    def remove(self, name: str):
        self._effects = [e for e in self._effects if e.name != name]

    def clear(self):
        self._effects = []

    def is_stunned(self) -> bool:
        return any(e.stun for e in self._effects)

    def has_immunity(self) -> bool:
        return any(e.immunity for e in self._effects)

    def modifier(self, stat: str) -> float:
        """Sum of percentage modifiers targeting a stat."""
        return sum(e.value for e in self._effects if e.stat == stat and e.value)

    def effective_stat(self, base: float, stat: str) -> int:
        """floor(base * (1 + sum/100))."""
        return math.floor(base * (1 + self.modifier(stat) / 100))

    def damage_reduction(self) -> float:
        """Incoming damage cut in percent, capped at 90."""
        return min(self.modifier('damageReduction'), MAX_DAMAGE_REDUCTION)
