"""Dungeon floor data model: rooms, typed room payloads and floors."""
from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from ..results import InvariantError, Rewards

log = logging.getLogger(__name__)


class Direction(Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def delta(self) -> Tuple[int, int]:
        return DIRECTION_DELTAS[self]

    @property
    def opposite(self) -> 'Direction':
        return OPPOSITES[self]


DIRECTION_DELTAS: Dict[Direction, Tuple[int, int]] = {
    Direction.NORTH: (0, -1),
    Direction.SOUTH: (0, 1),
    Direction.EAST: (1, 0),
    Direction.WEST: (-1, 0),
}

OPPOSITES: Dict[Direction, Direction] = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}


class RoomType(Enum):
    START = "start"
    COMBAT = "combat"
    ELITE = "elite"
    MINIBOSS = "miniboss"
    BOSS = "boss"
    TREASURE = "treasure"
    TRAP = "trap"
    REST = "rest"
    SHRINE = "shrine"
    MYSTERY = "mystery"
    EXIT = "exit"


COMBAT_ROOM_TYPES = (RoomType.COMBAT, RoomType.ELITE, RoomType.MINIBOSS, RoomType.BOSS)


class RoomStatus(Enum):
    UNEXPLORED = "unexplored"
    CURRENT = "current"
    COMPLETED = "completed"
    LOCKED = "locked"  # reserved, default generation never locks rooms


class Difficulty(Enum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    ELITE = "elite"


class ShrineBuff(Enum):
    DAMAGE = "damage"
    XP = "xp"
    GOLD = "gold"
    STATS = "stats"


class MysteryEvent(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


# ---------------- Room payloads ----------------

@dataclass
class CombatPayload:
    """Enemies of a combat/elite/miniboss/boss room."""
    enemies: List[Any] = field(default_factory=list)
    completed: bool = False
    rewards: Optional[Rewards] = None  # elite rooms only


@dataclass
class TreasurePayload:
    gold: int = 0
    items: List[Any] = field(default_factory=list)
    looted: bool = False


@dataclass
class TrapPayload:
    damage: int = 0
    description: str = ""
    disarmed: bool = False
    triggered: bool = False


@dataclass
class RestPayload:
    heal_amount: int = 0
    used: bool = False


@dataclass
class ShrinePayload:
    buff: ShrineBuff = ShrineBuff.DAMAGE
    used: bool = False


@dataclass
class MysteryPayload:
    event: MysteryEvent = MysteryEvent.NEUTRAL
    description: str = ""
    resolved: bool = False


RoomPayload = Union[CombatPayload, TreasurePayload, TrapPayload, RestPayload,
                    ShrinePayload, MysteryPayload, None]

# Payload class each room type must carry (None for start/exit)
PAYLOAD_TYPES: Dict[RoomType, Optional[type]] = {
    RoomType.START: None,
    RoomType.EXIT: None,
    RoomType.COMBAT: CombatPayload,
    RoomType.ELITE: CombatPayload,
    RoomType.MINIBOSS: CombatPayload,
    RoomType.BOSS: CombatPayload,
    RoomType.TREASURE: TreasurePayload,
    RoomType.TRAP: TrapPayload,
    RoomType.REST: RestPayload,
    RoomType.SHRINE: ShrinePayload,
    RoomType.MYSTERY: MysteryPayload,
}


@dataclass
class Room:
    id: str
    type: RoomType
    position: Tuple[int, int]
    difficulty: Difficulty = Difficulty.NORMAL
    status: RoomStatus = RoomStatus.UNEXPLORED
    connections: Set[Direction] = field(default_factory=set)
    payload: RoomPayload = None

    def __post_init__(self):
        expected = PAYLOAD_TYPES[self.type]
        if expected is None and self.payload is not None:
            raise InvariantError(f"{self.type.value} room {self.id} cannot carry a payload")
        if expected is not None and self.payload is not None and not isinstance(self.payload, expected):
            raise InvariantError(
                f"{self.type.value} room {self.id} expects {expected.__name__}, "
                f"got {type(self.payload).__name__}")

    @property
    def x(self) -> int:
        return self.position[0]

    @property
    def y(self) -> int:
        return self.position[1]

    def is_combat(self) -> bool:
        return self.type in COMBAT_ROOM_TYPES

    def neighbor_position(self, direction: Direction) -> Tuple[int, int]:
        dx, dy = direction.delta
        return self.x + dx, self.y + dy

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type.value,
            'status': self.status.value,
            'difficulty': self.difficulty.value,
            'position': {'x': self.x, 'y': self.y},
            'connections': sorted(d.value for d in self.connections),
        }


@dataclass
class ActiveBuff:
    """Floor-scoped shrine blessing."""
    buff: ShrineBuff
    percent: int
    description: str


@dataclass
class Floor:
    number: int
    rooms: List[Room]
    start_room_id: str
    exit_room_id: str
    current_room_id: str
    difficulty: float = 1.0  # enemy stat multiplier
    boss_room_id: Optional[str] = None
    grid_size: int = 0
    explored: bool = False
    completed: bool = False
    active_buffs: List[ActiveBuff] = field(default_factory=list)

    def get_room(self, room_id: str) -> Optional[Room]:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    def room_at(self, position: Tuple[int, int]) -> Optional[Room]:
        for room in self.rooms:
            if room.position == position:
                return room
        return None

    @property
    def current_room(self) -> Optional[Room]:
        return self.get_room(self.current_room_id)

    def rooms_of_type(self, room_type: RoomType) -> List[Room]:
        return [r for r in self.rooms if r.type == room_type]

    def minimap_data(self) -> Dict[str, Any]:
        """Plain snapshot of room layout for map widgets."""
        current = self.current_room
        return {
            'rooms': [dict(room.to_dict(), isCurrent=room.id == self.current_room_id)
                      for room in self.rooms],
            'currentPosition': {'x': current.x, 'y': current.y} if current else None,
            'gridSize': {'width': self.grid_size, 'height': self.grid_size},
        }


def reachable_room_ids(floor: Floor) -> Set[str]:
    """Room ids reachable from the start room by following connections."""
    start = floor.get_room(floor.start_room_id)
    if start is None:
        return set()
    seen = {start.id}
    queue = deque([start])
    while queue:
        room = queue.popleft()
        for direction in room.connections:
            neighbor = floor.room_at(room.neighbor_position(direction))
            if neighbor is not None and neighbor.id not in seen:
                seen.add(neighbor.id)
                queue.append(neighbor)
    return seen


def validate_floor(floor: Floor):
    """Raise InvariantError if the floor breaks a structural rule.

    Checked: unique positions, distinct start/exit/boss cells, symmetric
    connections that land on a room, and full reachability from the start.
    """
    def fail(message: str):
        log.error("Floor %d invalid: %s", floor.number, message)
        raise InvariantError(f"Floor {floor.number}: {message}")

    positions = [room.position for room in floor.rooms]
    if len(set(positions)) != len(positions):
        fail("two rooms share a grid cell")

    key_ids = [floor.start_room_id, floor.exit_room_id]
    if floor.boss_room_id:
        key_ids.append(floor.boss_room_id)
    if len(set(key_ids)) != len(key_ids):
        fail("start, exit and boss must be distinct rooms")
    for room_id in key_ids:
        if floor.get_room(room_id) is None:
            fail(f"missing room {room_id}")

    for room in floor.rooms:
        for direction in room.connections:
            neighbor = floor.room_at(room.neighbor_position(direction))
            if neighbor is None:
                fail(f"room {room.id} connects {direction.value} into empty space")
            if direction.opposite not in neighbor.connections:
                fail(f"connection {room.id} -> {neighbor.id} is not reciprocal")

    unreachable = {room.id for room in floor.rooms} - reachable_room_ids(floor)
    if unreachable:
        fail(f"unreachable rooms: {sorted(unreachable)}")
