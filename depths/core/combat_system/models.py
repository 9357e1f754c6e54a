"""Core combat data models and enums."""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Set


class Element(Enum):
    """Damage elements; every combatant carries a resistance for each."""
    PHYSICAL = "physical"
    FIRE = "fire"
    ICE = "ice"
    LIGHTNING = "lightning"
    HOLY = "holy"
    DARK = "dark"


# Elements eligible for random enemy affinities/weaknesses
MAGIC_ELEMENTS: List[Element] = [Element.FIRE, Element.ICE, Element.LIGHTNING, Element.HOLY, Element.DARK]


def no_resistances() -> Dict[Element, int]:
    return {element: 0 for element in Element}


class Position(Enum):
    """Battlefield row."""
    FRONT = "front"
    MIDDLE = "middle"
    BACK = "back"


@dataclass(frozen=True)
class PositionBonus:
    damage_dealt: float  # outgoing damage multiplier
    damage_taken: float  # incoming damage multiplier
    aggro_weight: int  # relative threat, higher draws more attention


POSITION_BONUSES: Dict[Position, PositionBonus] = {
    Position.FRONT: PositionBonus(damage_dealt=1.1, damage_taken=1.1, aggro_weight=3),
    Position.MIDDLE: PositionBonus(damage_dealt=1.0, damage_taken=1.0, aggro_weight=2),
    Position.BACK: PositionBonus(damage_dealt=0.9, damage_taken=0.8, aggro_weight=1),
}


class EnemyType(Enum):
    NORMAL = "normal"
    ELITE = "elite"
    BOSS = "boss"


class HeroClass(Enum):
    WARRIOR = "warrior"
    ARCHER = "archer"
    MAGE = "mage"
    CLERIC = "cleric"
    PALADIN = "paladin"


class HeroRarity(Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Role(Enum):
    TANK = "tank"
    DPS = "dps"
    HEALER = "healer"
    SUPPORT = "support"


# Stats a status effect may modify ("damageReduction" is a flat % cut on incoming damage)
MODIFIABLE_STATS = ('ATK', 'DEF', 'SPD', 'CRIT', 'ACC', 'EVA', 'damageReduction')


@dataclass
class StatusEffect:
    """Timed buff/debuff on a combatant."""
    name: str
    duration: int  # remaining rounds
    kind: str = "buff"  # buff/debuff
    stat: Optional[str] = None  # one of MODIFIABLE_STATS
    value: float = 0.0  # percentage
    stun: bool = False
    immunity: bool = False

    def __post_init__(self):
        if self.stat is not None and self.stat not in MODIFIABLE_STATS:
            raise ValueError(f"Unknown status effect stat: {self.stat}")

    def tick(self) -> bool:
        """Process one tick. Returns True if effect should be removed."""
        self.duration -= 1
        return self.duration <= 0


@dataclass(frozen=True)
class CombatStats:
    """Stats after status-effect modifiers."""
    atk: int
    defense: int
    spd: int
    crit: float
    acc: int
    eva: int


@dataclass
class AttackResult:
    """Outcome of one basic attack."""
    attacker: Any
    target: Any
    damage: int = 0
    is_crit: bool = False
    did_miss: bool = False
    element: Element = Element.PHYSICAL
    hit_chance: float = 0.0


class Combatant(Protocol):
    """Capabilities shared by heroes and enemies."""
    id: str
    name: str
    level: int
    max_hp: int
    current_hp: int
    is_alive: bool
    position: Position
    resistances: Dict[Element, int]
    weaknesses: Set[Element]
    initiative: int

    def get_combat_stats(self) -> CombatStats: ...

    def take_damage(self, raw_damage: int, is_crit: bool = False,
                    element: Element = Element.PHYSICAL) -> int: ...

    def heal(self, amount: int) -> int: ...

    def add_status_effect(self, effect: StatusEffect) -> None: ...

    def tick_status_effects(self) -> None: ...

    def tick_cooldowns(self) -> None: ...

    def ready_skills(self) -> List[Any]: ...

    def is_stunned(self) -> bool: ...

    def roll_initiative(self, rng: Any = None) -> int: ...
