"""Structured operation results shared by every rules-engine component.

Expected domain failures (wrong room type, full inventory, level too low...)
are never raised: they come back as ``Err``. Only broken structural
invariants raise ``InvariantError``.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union


class InvariantError(RuntimeError):
    """A structural invariant was violated (programming error, not a game outcome)."""
    pass


@dataclass
class Rewards:
    """Reward shape returned by room resolvers."""
    gold: int = 0
    items: List[Any] = field(default_factory=list)  # Item instances
    experience: int = 0

    def is_empty(self) -> bool:
        return not self.gold and not self.items and not self.experience


@dataclass
class HeroDamage:
    """Damage dealt to one hero by a room event."""
    hero: Any
    damage: int


@dataclass(frozen=True)
class Ok:
    """Successful outcome."""
    message: str = ""
    rewards: Optional[Rewards] = None
    damage: List[HeroDamage] = field(default_factory=list)
    value: Any = None

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome. ``damage`` is set when the failure still hurt the party."""
    message: str
    damage: List[HeroDamage] = field(default_factory=list)
    value: Any = None

    @property
    def success(self) -> bool:
        return False


Result = Union[Ok, Err]

__all__ = ['InvariantError', 'Rewards', 'HeroDamage', 'Ok', 'Err', 'Result']
