"""Five-stat block shared by items, equipment totals and heroes.

Stats are HP, ATK, DEF, SPD (integers) and CRIT (a percentage that keeps
two decimals). Persisted records use the upper-case keys.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Any

STAT_KEYS = ('HP', 'ATK', 'DEF', 'SPD', 'CRIT')
_FIELDS = {'HP': 'hp', 'ATK': 'atk', 'DEF': 'defense', 'SPD': 'spd', 'CRIT': 'crit'}

# Power score weights per hero role (used by the equipment advisor)
DEFAULT_WEIGHTS: Dict[str, float] = {'HP': 1.0, 'ATK': 2.0, 'DEF': 1.5, 'SPD': 1.0, 'CRIT': 10.0}
ROLE_WEIGHTS: Dict[str, Dict[str, float]] = {
    'tank': {'HP': 1.5, 'ATK': 1.0, 'DEF': 2.5, 'SPD': 0.5, 'CRIT': 5.0},
    'dps': {'HP': 0.5, 'ATK': 3.0, 'DEF': 0.5, 'SPD': 1.5, 'CRIT': 15.0},
    'healer': {'HP': 1.5, 'ATK': 1.0, 'DEF': 1.5, 'SPD': 1.5, 'CRIT': 5.0},
    'support': {'HP': 1.0, 'ATK': 1.5, 'DEF': 1.5, 'SPD': 2.0, 'CRIT': 8.0},
}


def weights_for_role(role: Any = None) -> Dict[str, float]:
    """Weight profile for a role name (or Role enum), falling back to the default profile."""
    if role is None:
        return DEFAULT_WEIGHTS
    return ROLE_WEIGHTS.get(getattr(role, 'value', role), DEFAULT_WEIGHTS)


@dataclass
class Stats:
    """HP/ATK/DEF/SPD/CRIT container."""
    hp: int = 0
    atk: int = 0
    defense: int = 0
    spd: int = 0
    crit: float = 0.0

    def get(self, key: str) -> float:
        """Get stat by upper-case key (HP, ATK, ...)."""
        return getattr(self, _FIELDS[key])

    def __add__(self, other: 'Stats') -> 'Stats':
        return Stats(
            hp=self.hp + other.hp,
            atk=self.atk + other.atk,
            defense=self.defense + other.defense,
            spd=self.spd + other.spd,
            crit=round(self.crit + other.crit, 2),
        )

    def scaled(self, multiplier: float) -> 'Stats':
        """Multiply every stat, flooring the integer ones and rounding CRIT to 2 decimals."""
        return Stats(
            hp=int(self.hp * multiplier),
            atk=int(self.atk * multiplier),
            defense=int(self.defense * multiplier),
            spd=int(self.spd * multiplier),
            crit=round(self.crit * multiplier, 2),
        )

    def power_score(self, weights: Optional[Dict[str, float]] = None) -> float:
        """Weighted scalar used to rank gear."""
        w = weights or DEFAULT_WEIGHTS
        return sum(self.get(k) * w.get(k, 0.0) for k in STAT_KEYS)

    def is_zero(self) -> bool:
        return all(self.get(k) == 0 for k in STAT_KEYS)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with upper-case keys, omitting zero stats."""
        return {k: self.get(k) for k in STAT_KEYS if self.get(k)}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Stats':
        data = data or {}
        return cls(
            hp=int(data.get('HP', 0)),
            atk=int(data.get('ATK', 0)),
            defense=int(data.get('DEF', 0)),
            spd=int(data.get('SPD', 0)),
            crit=float(data.get('CRIT', 0.0)),
        )
