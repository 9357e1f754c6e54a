"""Procedural floor generation.

A floor is grown on a sparse square grid: the start room sits in the
center, a random walk lays down the path rooms, then an optional boss room
and the exit are attached to the end of the path. Every room is placed
orthogonally next to a room that already exists, and a final adjacency pass
links every pair of neighboring cells, so the whole floor is reachable.
"""
from __future__ import annotations
import logging
import math
import random
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..core.combat_system.enemy import Enemy
from ..core.combat_system.models import EnemyType
from ..core.ids import default_ids
from ..items import Rarity
from ..loot import ItemGenerator
from ..results import InvariantError, Rewards
from .model import (
    CombatPayload, Difficulty, Direction, Floor, MysteryEvent, MysteryPayload, RestPayload,
    Room, RoomStatus, RoomType, ShrineBuff, ShrinePayload, TrapPayload, TreasurePayload,
    validate_floor,
)

log = logging.getLogger(__name__)

Position = Tuple[int, int]

MIN_ROOM_COUNT = 3

# Path growth order before shuffling (east, south, west, north)
CARDINAL_OFFSETS: List[Position] = [(1, 0), (0, 1), (-1, 0), (0, -1)]
DIAGONAL_OFFSETS: List[Position] = [(1, 1), (1, -1), (-1, 1), (-1, -1)]

DIFFICULTY_LEVEL_FACTOR: Dict[Difficulty, float] = {
    Difficulty.EASY: 0.7,
    Difficulty.NORMAL: 1.0,
    Difficulty.HARD: 1.3,
    Difficulty.ELITE: 1.5,
}

ELITE_LEVEL_FACTOR = 1.4
MINIBOSS_LEVEL_FACTOR = 1.5
BOSS_LEVEL_FACTOR = 1.6

MINIBOSS_EMPOWER = {'hp': 1.5, 'atk': 1.3, 'defense': 1.3}

TREASURE_RARITIES = [Rarity.COMMON, Rarity.UNCOMMON, Rarity.RARE]
ELITE_REWARD_RARITIES = [Rarity.RARE, Rarity.EPIC]

TRAP_DESCRIPTIONS = [
    'A poison dart trap!',
    'A swinging blade trap!',
    'A spike pit trap!',
    'A fire burst trap!',
    'A falling boulder trap!',
]

MYSTERY_DESCRIPTIONS: Dict[MysteryEvent, List[str]] = {
    MysteryEvent.POSITIVE: [
        'A mysterious merchant offers you a gift!',
        'You find a hidden stash of treasures!',
        'An ancient fountain restores your vitality!',
        'A friendly spirit blesses your party!',
    ],
    MysteryEvent.NEGATIVE: [
        'A cursed artifact drains your strength...',
        'Poisonous gas fills the room!',
        'Dark magic weakens your defenses...',
        'A malevolent spirit attacks!',
    ],
    MysteryEvent.NEUTRAL: [
        'You find an ancient inscription on the wall.',
        'A strange device sits in the center of the room.',
        'Mysterious runes glow faintly...',
        'An abandoned campsite with burned-out fire.',
    ],
}


def grid_size_for(room_count: int) -> int:
    return math.ceil(math.sqrt(room_count * 2))


def path_length(room_count: int, guarantee_boss: bool) -> int:
    """Rooms between start and boss/exit."""
    return room_count - (3 if guarantee_boss else 2)


def _neighbors(position: Position, offsets: Iterable[Position]) -> List[Position]:
    x, y = position
    return [(x + dx, y + dy) for dx, dy in offsets]


class FloorGenerator:
    """Builds Floor instances from an injected RNG and id factory."""

    def __init__(self, rng: Optional[random.Random] = None, ids=None,
                 item_generator: Optional[ItemGenerator] = None):
        self._rng = rng
        self.ids = ids or default_ids("room")
        self.item_generator = item_generator or ItemGenerator(ids=self.ids, rng=rng)

    def set_rng(self, rng: random.Random):
        self._rng = rng
        self.item_generator.set_rng(rng)

    @property
    def rng(self):
        return self._rng or random

    # ---------------- Public API ----------------

    def generate_floor(self, floor_number: int, room_count: int, difficulty_multiplier: float = 1.0,
                       guarantee_boss: bool = True, hero_level: Optional[int] = None) -> Floor:
        """Generate a fully connected floor.

        Raises:
            InvariantError: if room_count cannot hold start, one path room and exit
        """
        min_rooms = MIN_ROOM_COUNT + (1 if guarantee_boss else 0)
        if room_count < min_rooms:
            log.error("Refusing to generate floor %d with %d rooms", floor_number, room_count)
            raise InvariantError(
                f"room_count {room_count} too small (need at least {min_rooms} "
                f"{'with' if guarantee_boss else 'without'} a boss)")

        grid = grid_size_for(room_count)
        occupied: Set[Position] = set()
        links: List[Tuple[Room, Room]] = []
        context = (floor_number, difficulty_multiplier, hero_level)

        start = self._create_room(RoomType.START, (grid // 2, grid // 2), Difficulty.EASY, context)
        start.status = RoomStatus.CURRENT
        occupied.add(start.position)
        rooms: List[Room] = [start]

        by_position: Dict[Position, Room] = {start.position: start}
        count = path_length(room_count, guarantee_boss)
        previous = start
        for i in range(count):
            position, anchor = self._next_position(previous.position, occupied, grid)
            room = self._create_room(self._roll_room_type(i, count), position,
                                     self._roll_difficulty(), context)
            links.append((by_position[anchor], room))
            rooms.append(room)
            occupied.add(position)
            by_position[position] = room
            previous = room

        boss = None
        if guarantee_boss:
            position, anchor = self._boss_position(previous.position, occupied, grid)
            boss = self._create_room(RoomType.BOSS, position, Difficulty.ELITE, context)
            links.append((by_position[anchor], boss))
            rooms.append(boss)
            occupied.add(position)
            by_position[position] = boss
            previous = boss

        position, anchor = self._exit_position(previous.position, occupied, grid)
        exit_room = self._create_room(RoomType.EXIT, position, Difficulty.EASY, context)
        links.append((by_position[anchor], exit_room))
        rooms.append(exit_room)
        occupied.add(position)
        by_position[position] = exit_room

        for a, b in links:
            connect_rooms(a, b)
        create_grid_connections(rooms)

        floor = Floor(
            number=floor_number,
            rooms=rooms,
            start_room_id=start.id,
            exit_room_id=exit_room.id,
            current_room_id=start.id,
            difficulty=difficulty_multiplier,
            boss_room_id=boss.id if boss else None,
            grid_size=grid,
        )
        validate_floor(floor)
        log.debug("Generated floor %d: %d rooms on a %dx%d grid (boss=%s)",
                  floor_number, len(rooms), grid, grid, guarantee_boss)
        return floor

    # ---------------- Placement ----------------

    def _next_position(self, current: Position, occupied: Set[Position], grid: int) -> Tuple[Position, Position]:
        """Random free orthogonal neighbor of ``current``, else the first free cell touching any room."""
        offsets = list(CARDINAL_OFFSETS)
        self.rng.shuffle(offsets)
        for candidate in _neighbors(current, offsets):
            if self._is_free(candidate, occupied, grid):
                return candidate, current
        return self._scan_free_cell(occupied, grid)

    def _boss_position(self, last: Position, occupied: Set[Position], grid: int) -> Tuple[Position, Position]:
        preferred = (min(grid - 1, last[0] + 1), last[1])
        if preferred != last and self._is_free(preferred, occupied, grid):
            return preferred, last
        for candidate in _neighbors(last, CARDINAL_OFFSETS):
            if self._is_free(candidate, occupied, grid):
                return candidate, last
        return self._scan_free_cell(occupied, grid)

    def _exit_position(self, last: Position, occupied: Set[Position], grid: int) -> Tuple[Position, Position]:
        """Cardinal neighbors first, then diagonals that still touch a room orthogonally."""
        for candidate in _neighbors(last, CARDINAL_OFFSETS):
            if self._is_free(candidate, occupied, grid):
                return candidate, last
        for candidate in _neighbors(last, DIAGONAL_OFFSETS):
            if not self._is_free(candidate, occupied, grid):
                continue
            for touching in _neighbors(candidate, CARDINAL_OFFSETS):
                if touching in occupied:
                    return candidate, touching
        return self._scan_free_cell(occupied, grid)

    @staticmethod
    def _is_free(position: Position, occupied: Set[Position], grid: int) -> bool:
        x, y = position
        return 0 <= x < grid and 0 <= y < grid and position not in occupied

    def _scan_free_cell(self, occupied: Set[Position], grid: int) -> Tuple[Position, Position]:
        """First free in-grid cell (x-major scan) orthogonally next to an occupied one."""
        log.warning("Path walk boxed in, scanning the grid for a free cell")
        for x in range(grid):
            for y in range(grid):
                cell = (x, y)
                if cell in occupied:
                    continue
                for touching in _neighbors(cell, CARDINAL_OFFSETS):
                    if touching in occupied:
                        return cell, touching
        log.error("No free cell left on a %dx%d grid with %d rooms", grid, grid, len(occupied))
        raise InvariantError("grid has no free cell next to an existing room")

    # ---------------- Rolls ----------------

    def _roll_room_type(self, index: int, total: int) -> RoomType:
        """Weighted room type; treasure/rest/shrine only in the middle 40% of the path."""
        roll = self.rng.random()
        mid = total * 0.3 < index < total * 0.7
        if roll < 0.35:
            return RoomType.COMBAT
        if roll < 0.50 and mid:
            return RoomType.TREASURE
        if roll < 0.60:
            return RoomType.TRAP
        if roll < 0.68 and mid:
            return RoomType.REST
        if roll < 0.75:
            return RoomType.ELITE
        if roll < 0.82 and mid:
            return RoomType.SHRINE
        if roll < 0.88:
            return RoomType.MYSTERY
        if roll < 0.93:
            return RoomType.MINIBOSS
        return RoomType.COMBAT

    def _roll_difficulty(self) -> Difficulty:
        roll = self.rng.random()
        if roll < 0.4:
            return Difficulty.EASY
        if roll < 0.75:
            return Difficulty.NORMAL
        if roll < 0.95:
            return Difficulty.HARD
        return Difficulty.ELITE

    # ---------------- Population ----------------

    def _create_room(self, room_type: RoomType, position: Position, difficulty: Difficulty, context) -> Room:
        floor_number, multiplier, hero_level = context
        room = Room(id=self.ids(room_type.value), type=room_type, position=position, difficulty=difficulty)
        populate = getattr(self, f"_populate_{room_type.value}", None)
        if populate is not None:
            room.payload = populate(room, floor_number * multiplier, floor_number, hero_level)
        return room

    def _spawn(self, count: int, level: int, enemy_type: EnemyType) -> List[Enemy]:
        return Enemy.generate_group(count, level, [enemy_type], rng=self.rng, ids=self.ids)

    @staticmethod
    def _item_level(level: int, hero_level: Optional[int]) -> int:
        return max(level, hero_level) if hero_level else level

    def _populate_combat(self, room: Room, base_level: float, floor_number: int, hero_level) -> CombatPayload:
        level = max(1, math.floor(base_level * DIFFICULTY_LEVEL_FACTOR[room.difficulty]))
        if room.difficulty == Difficulty.EASY:
            count = 1
        elif room.difficulty == Difficulty.ELITE:
            count = 3
        else:
            count = 2
        enemy_type = EnemyType.ELITE if room.difficulty == Difficulty.ELITE else EnemyType.NORMAL
        return CombatPayload(self._spawn(count, level, enemy_type))

    def _populate_elite(self, room: Room, base_level: float, floor_number: int, hero_level) -> CombatPayload:
        rng = self.rng
        level = max(1, math.floor(base_level * ELITE_LEVEL_FACTOR))
        count = 1 if rng.random() < 0.5 else 2
        enemies = self._spawn(count, level, EnemyType.ELITE)

        item_level = self._item_level(level, hero_level)
        rarity = rng.choice(ELITE_REWARD_RARITIES)
        rewards = Rewards(
            gold=math.floor(item_level * 100 * (1 + rng.random() * 0.5)),
            items=[self.item_generator.generate(item_level, rarity, item_id=self.ids("item"))],
        )
        return CombatPayload(enemies, rewards=rewards)

    def _populate_miniboss(self, room: Room, base_level: float, floor_number: int, hero_level) -> CombatPayload:
        level = max(1, math.floor(base_level * MINIBOSS_LEVEL_FACTOR))
        enemies = self._spawn(1, level, EnemyType.ELITE)
        enemies[0].empower(**MINIBOSS_EMPOWER)
        return CombatPayload(enemies)

    def _populate_boss(self, room: Room, base_level: float, floor_number: int, hero_level) -> CombatPayload:
        level = max(1, math.floor(base_level * BOSS_LEVEL_FACTOR))
        return CombatPayload(self._spawn(1, level, EnemyType.BOSS))

    def _populate_treasure(self, room: Room, base_level: float, floor_number: int, hero_level) -> TreasurePayload:
        rng = self.rng
        item_level = self._item_level(max(1, math.floor(base_level)), hero_level)
        items = [
            self.item_generator.generate(item_level, rng.choice(TREASURE_RARITIES), item_id=self.ids("item"))
            for _ in range(rng.randint(1, 2))
        ]
        gold = math.floor(item_level * 50 * (0.8 + rng.random() * 0.4))
        return TreasurePayload(gold=gold, items=items)

    def _populate_trap(self, room: Room, base_level: float, floor_number: int, hero_level) -> TrapPayload:
        rng = self.rng
        base_damage = math.floor(base_level * 10)
        damage = math.floor(base_damage * (0.8 + rng.random() * 0.4))
        return TrapPayload(damage=damage, description=rng.choice(TRAP_DESCRIPTIONS))

    def _populate_rest(self, room: Room, base_level: float, floor_number: int, hero_level) -> RestPayload:
        return RestPayload(heal_amount=math.floor(50 + floor_number * 10))

    def _populate_shrine(self, room: Room, base_level: float, floor_number: int, hero_level) -> ShrinePayload:
        return ShrinePayload(buff=self.rng.choice(list(ShrineBuff)))

    def _populate_mystery(self, room: Room, base_level: float, floor_number: int, hero_level) -> MysteryPayload:
        rng = self.rng
        event = rng.choice(list(MysteryEvent))
        return MysteryPayload(event=event, description=rng.choice(MYSTERY_DESCRIPTIONS[event]))


# ---------------- Connections ----------------

def direction_between(a: Room, b: Room) -> Optional[Direction]:
    """Cardinal direction from a to b, or None unless the rooms are orthogonal neighbors."""
    for direction in Direction:
        if a.neighbor_position(direction) == b.position:
            return direction
    return None


def connect_rooms(a: Room, b: Room):
    """Add the reciprocal connection pair between two neighboring rooms."""
    direction = direction_between(a, b)
    if direction is None:
        log.error("Cannot connect non-adjacent rooms %s at %s and %s at %s", a.id, a.position, b.id, b.position)
        raise InvariantError(f"rooms {a.id} and {b.id} are not adjacent")
    a.connections.add(direction)
    b.connections.add(direction.opposite)


def create_grid_connections(rooms: List[Room]):
    """Link every pair of rooms sitting in orthogonally adjacent cells."""
    by_position = {room.position: room for room in rooms}
    for room in rooms:
        for direction in Direction:
            neighbor = by_position.get(room.neighbor_position(direction))
            if neighbor is not None:
                room.connections.add(direction)
                neighbor.connections.add(direction.opposite)
