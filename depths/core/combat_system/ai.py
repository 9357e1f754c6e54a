"""Target selection for automated combatants."""
from __future__ import annotations
import random
from typing import Any, List, Optional, Sequence

# Chance to focus the weakest opponent instead of picking by threat
FOCUS_LOWEST_HP_CHANCE = 0.2


def living(combatants: Sequence[Any]) -> List[Any]:
    return [c for c in combatants if c.is_alive]


def aggro_weight(combatant: Any) -> int:
    return combatant.get_position_bonuses().aggro_weight


def choose_target(opponents: Sequence[Any], rng: Any = None) -> Optional[Any]:
    """20% lowest current HP, otherwise weighted by each row's aggro."""
    candidates = living(opponents)
    if not candidates:
        return None
    rng = rng or random
    if rng.random() < FOCUS_LOWEST_HP_CHANCE:
        return min(candidates, key=lambda c: c.current_hp)
    return rng.choices(candidates, weights=[aggro_weight(c) for c in candidates])[0]


def lowest_hp_ratio(allies: Sequence[Any]) -> Optional[Any]:
    """Living ally missing the largest share of its HP."""
    candidates = living(allies)
    if not candidates:
        return None
    return min(candidates, key=lambda c: c.current_hp / c.max_hp)
