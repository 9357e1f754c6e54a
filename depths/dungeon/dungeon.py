"""Dungeon run state: floors, navigation and room-event resolution.

Every resolver follows the same shape:
- reject when the current room is not of the matching type
- reject when the room's one-time action was already taken
- apply the effect and set the flag
- return Ok/Err with message, optional rewards and per-hero damage
"""
from __future__ import annotations
from dataclasses import dataclass
import logging
import math
import random
import time
from typing import Any, Dict, List, Optional

import config
from ..core.combat import Battle
from ..core.combat_system.resolver import apply_heal, apply_true_damage
from ..results import Err, HeroDamage, Ok, Result, Rewards
from .generator import FloorGenerator
from .model import (
    ActiveBuff, Direction, Floor, MysteryEvent, Room, RoomStatus, RoomType, ShrineBuff,
)

log = logging.getLogger(__name__)

ROOM_DESCRIPTIONS: Dict[RoomType, str] = {
    RoomType.START: 'the entrance',
    RoomType.COMBAT: 'a combat room',
    RoomType.TREASURE: 'a treasure room',
    RoomType.TRAP: 'a trapped room',
    RoomType.REST: 'a rest area',
    RoomType.BOSS: 'the boss chamber',
    RoomType.EXIT: 'the exit',
    RoomType.SHRINE: 'a shrine',
    RoomType.MYSTERY: 'a mysterious room',
    RoomType.ELITE: 'an elite combat room',
    RoomType.MINIBOSS: 'a mini-boss chamber',
}

COMBAT_MESSAGES: Dict[RoomType, str] = {
    RoomType.BOSS: 'Boss defeated!',
    RoomType.MINIBOSS: 'Mini-Boss defeated!',
    RoomType.ELITE: 'Elite enemies defeated!',
    RoomType.COMBAT: 'Combat completed!',
}

# Shrine buff -> (percent, description)
SHRINE_BUFFS: Dict[ShrineBuff, tuple] = {
    ShrineBuff.DAMAGE: (10, 'The shrine grants +10% damage for this floor!'),
    ShrineBuff.XP: (15, 'The shrine grants +15% XP for this floor!'),
    ShrineBuff.GOLD: (20, 'The shrine grants +20% gold drops for this floor!'),
    ShrineBuff.STATS: (10, 'The shrine grants +10% to all stats for this floor!'),
}

# Rooms added per floor after the first
ROOMS_PER_FLOOR_GROWTH = 0.5


def room_description(room: Room) -> str:
    return ROOM_DESCRIPTIONS.get(room.type, 'an unknown room')


def damage_heroes(heroes: List[Any], amount: int) -> List[HeroDamage]:
    """Hit every living hero for max(1, amount - DEF), flooring HP at 0."""
    results = []
    for hero in heroes:
        if not hero.is_alive:
            continue
        actual = max(1, amount - hero.defense)
        apply_true_damage(hero, actual)
        if not hero.is_alive:
            log.debug("%s fell to a room hazard", hero.name)
        results.append(HeroDamage(hero, actual))
    return results


def heal_heroes(heroes: List[Any], amount: int):
    for hero in heroes:
        apply_heal(hero, amount)


@dataclass
class DungeonConfig:
    """Per-run settings, snapshotted from config at construction."""
    name: str = config.DUNGEON_NAME
    starting_floor: int = 1
    rooms_min: int = config.ROOMS_PER_FLOOR_MIN
    rooms_max: int = config.ROOMS_PER_FLOOR_MAX
    difficulty_scaling: float = config.DIFFICULTY_SCALING
    boss_floor_interval: int = config.BOSS_FLOOR_INTERVAL
    trap_disarm_chance: float = config.TRAP_DISARM_CHANCE
    hero_level: Optional[int] = None

    def __post_init__(self):
        if self.rooms_max < self.rooms_min:
            log.warning("rooms_max %d below rooms_min %d, using %d",
                        self.rooms_max, self.rooms_min, self.rooms_min)
            self.rooms_max = self.rooms_min

    @classmethod
    def from_env(cls, **overrides) -> 'DungeonConfig':
        """Current module-level config values, with keyword overrides."""
        values = dict(
            name=config.DUNGEON_NAME,
            rooms_min=config.ROOMS_PER_FLOOR_MIN,
            rooms_max=config.ROOMS_PER_FLOOR_MAX,
            difficulty_scaling=config.DIFFICULTY_SCALING,
            boss_floor_interval=config.BOSS_FLOOR_INTERVAL,
            trap_disarm_chance=config.TRAP_DISARM_CHANCE,
        )
        values.update(overrides)
        return cls(**values)


class Dungeon:
    """A dungeon run. Owns its floors; floors are generated lazily and never regenerated."""

    def __init__(self, dungeon_config: Optional[DungeonConfig] = None, rng: Optional[random.Random] = None,
                 ids=None, generator: Optional[FloorGenerator] = None):
        self.config = dungeon_config or DungeonConfig.from_env()
        self._rng = rng
        self.generator = generator or FloorGenerator(rng=rng, ids=ids)
        self.name = self.config.name
        self.floors: List[Floor] = []
        self.current_floor_index = 0
        self.max_floor_reached = 0
        self.is_active = False
        self.start_time: Optional[float] = None

        self.total_gold_earned = 0
        self.total_items_found = 0
        self.total_enemies_defeated = 0

        self.generate_floor(self.config.starting_floor)

    @property
    def rng(self):
        return self._rng or random

    @property
    def ids(self):
        """Id factory shared by this run's rooms, enemies and loot."""
        return self.generator.ids

    # ---------------- Lifecycle ----------------

    def start(self):
        self.is_active = True
        self.start_time = time.time()
        self.max_floor_reached = max(self.max_floor_reached, self.current_floor_index + 1)

    def end(self):
        self.is_active = False

    def room_count_for(self, floor_number: int) -> int:
        """Random room count; both bounds grow by half a room per floor."""
        growth = math.floor((floor_number - 1) * ROOMS_PER_FLOOR_GROWTH)
        low = self.config.rooms_min + growth
        # an inverted range collapses to the minimum
        high = max(low, self.config.rooms_max + growth)
        return self.rng.randint(low, high)

    def difficulty_for(self, floor_number: int) -> float:
        return 1 + (floor_number - 1) * self.config.difficulty_scaling

    def generate_floor(self, floor_number: int) -> Floor:
        """Generate and append the floor with the given number."""
        floor = self.generator.generate_floor(
            floor_number,
            self.room_count_for(floor_number),
            self.difficulty_for(floor_number),
            guarantee_boss=floor_number % self.config.boss_floor_interval == 0,
            hero_level=self.config.hero_level,
        )
        self.floors.append(floor)
        return floor

    # ---------------- Accessors ----------------

    @property
    def current_floor(self) -> Optional[Floor]:
        if 0 <= self.current_floor_index < len(self.floors):
            return self.floors[self.current_floor_index]
        return None

    @property
    def current_room(self) -> Optional[Room]:
        floor = self.current_floor
        return floor.current_room if floor else None

    def _room_of_type(self, *room_types: RoomType, label: str):
        """Current room when it matches, else an Err to return."""
        room = self.current_room
        if room is None:
            return None, Err('No active room')
        if room.type not in room_types:
            return None, Err(f'Not a {label} room')
        return room, None

    # ---------------- Navigation ----------------

    def move_to_room(self, direction: Direction | str) -> Result:
        try:
            direction = Direction(direction)
        except ValueError:
            return Err(f"Unknown direction: {direction}")
        floor = self.current_floor
        room = self.current_room
        if floor is None or room is None:
            return Err('Cannot move - no active room or floor')

        if direction not in room.connections:
            return Err(f"Cannot move {direction.value} - no connection in that direction")

        target = floor.room_at(room.neighbor_position(direction))
        if target is None:
            return Err('Target room not found')

        room.status = RoomStatus.COMPLETED
        target.status = RoomStatus.CURRENT
        floor.current_room_id = target.id
        floor.explored = all(r.status != RoomStatus.UNEXPLORED for r in floor.rooms)
        log.debug("Moved %s from %s to %s", direction.value, room.id, target.id)
        return Ok(f"Moved {direction.value} to {room_description(target)}", value=target.id)

    # ---------------- Room resolvers ----------------

    def start_battle(self, heroes: List[Any]) -> Result:
        """Battle against the current room's enemies, dropping loot under this run's ids."""
        room, error = self._room_of_type(RoomType.COMBAT, RoomType.BOSS, RoomType.ELITE,
                                         RoomType.MINIBOSS, label='combat')
        if error:
            return error
        if room.payload.completed:
            return Err('Combat already completed')
        battle = Battle(heroes, room.payload.enemies, rng=self._rng, ids=self.ids)
        return Ok(f"Battle started in {room_description(room)}", value=battle)

    def complete_combat(self, heroes: Optional[List[Any]] = None) -> Result:
        room, error = self._room_of_type(RoomType.COMBAT, RoomType.BOSS, RoomType.ELITE,
                                         RoomType.MINIBOSS, label='combat')
        if error:
            return error
        payload = room.payload
        if payload.completed:
            return Err('Combat already completed')

        payload.completed = True
        self.total_enemies_defeated += len(payload.enemies)

        rewards = None
        if payload.rewards is not None and not payload.rewards.is_empty():
            rewards = payload.rewards
            self.add_loot_to_stats(rewards.gold, len(rewards.items))
        return Ok(COMBAT_MESSAGES[room.type], rewards=rewards)

    def loot_treasure(self) -> Result:
        room, error = self._room_of_type(RoomType.TREASURE, label='treasure')
        if error:
            return error
        payload = room.payload
        if payload.looted:
            return Err('Treasure already looted')

        payload.looted = True
        self.add_loot_to_stats(payload.gold, len(payload.items))
        return Ok('Treasure looted!', rewards=Rewards(gold=payload.gold, items=list(payload.items)))

    def disarm_trap(self, heroes: List[Any], success_chance: Optional[float] = None) -> Result:
        room, error = self._room_of_type(RoomType.TRAP, label='trap')
        if error:
            return error
        payload = room.payload
        if payload.disarmed or payload.triggered:
            return Err('Trap already disarmed')

        chance = self.config.trap_disarm_chance if success_chance is None else success_chance
        if self.rng.random() < chance:
            payload.disarmed = True
            return Ok(f"Trap disarmed successfully! {payload.description}")

        payload.triggered = True
        damage = damage_heroes(heroes, payload.damage)
        log.debug("Trap %s triggered for %d base damage", room.id, payload.damage)
        return Err(f"Failed to disarm trap! {payload.description}", damage=damage)

    def use_rest(self, heroes: List[Any]) -> Result:
        room, error = self._room_of_type(RoomType.REST, label='rest')
        if error:
            return error
        payload = room.payload
        if payload.used:
            return Err('Rest area already used')

        heal_heroes(heroes, payload.heal_amount)
        payload.used = True
        return Ok(f"Party rested and recovered {payload.heal_amount} HP!")

    def use_shrine(self) -> Result:
        room, error = self._room_of_type(RoomType.SHRINE, label='shrine')
        if error:
            return error
        payload = room.payload
        if payload.used:
            return Err('Shrine already used')

        payload.used = True
        percent, message = SHRINE_BUFFS[payload.buff]
        buff = ActiveBuff(payload.buff, percent, message)
        self.current_floor.active_buffs.append(buff)
        return Ok(message, value=buff)

    def resolve_mystery(self, heroes: List[Any]) -> Result:
        room, error = self._room_of_type(RoomType.MYSTERY, label='mystery')
        if error:
            return error
        payload = room.payload
        if payload.resolved:
            return Err('Mystery already resolved')

        payload.resolved = True
        rng = self.rng
        message = payload.description or 'Something mysterious happens...'

        if payload.event == MysteryEvent.POSITIVE:
            heal = 30 + rng.randint(0, 19)
            heal_heroes(heroes, heal)
            gold = math.floor(50 + rng.random() * 100)
            self.add_loot_to_stats(gold, 0)
            return Ok(f"{message}\nYour party is healed for {heal} HP!", rewards=Rewards(gold=gold))

        if payload.event == MysteryEvent.NEGATIVE:
            damage = damage_heroes(heroes, 15 + rng.randint(0, 19))
            return Ok(f"{message}\nYour party takes damage!", damage=damage)

        gold = math.floor(20 + rng.random() * 30)
        self.add_loot_to_stats(gold, 0)
        return Ok(f"{message}\nYou find some gold.", rewards=Rewards(gold=gold))

    def proceed_to_next_floor(self) -> Result:
        room = self.current_room
        if room is None or room.type != RoomType.EXIT:
            return Err('Must reach exit room to proceed')

        self.current_floor.completed = True
        self.current_floor_index += 1
        self.max_floor_reached = max(self.max_floor_reached, self.current_floor_index + 1)

        if self.current_floor_index >= len(self.floors):
            self.generate_floor(self.floors[-1].number + 1)
        floor = self.current_floor
        log.debug("Descended to floor %d", floor.number)
        return Ok(f"Descended to Floor {floor.number}", value=floor.number)

    # ---------------- Buffs & statistics ----------------

    def add_loot_to_stats(self, gold: int, items_count: int):
        self.total_gold_earned += gold
        self.total_items_found += items_count

    def get_active_buffs(self) -> List[ShrineBuff]:
        floor = self.current_floor
        return [b.buff for b in floor.active_buffs] if floor else []

    def has_active_buff(self, buff: ShrineBuff | str) -> bool:
        return self.buff_percent(buff) > 0

    def buff_percent(self, buff: ShrineBuff | str) -> int:
        """Summed percent of every active buff of this kind on the current floor. 0 for unknown kinds."""
        try:
            buff = ShrineBuff(buff)
        except ValueError:
            log.debug("Ignoring unknown shrine buff %r", buff)
            return 0
        floor = self.current_floor
        return sum(b.percent for b in floor.active_buffs if b.buff == buff) if floor else 0

    def get_statistics(self) -> Dict[str, Any]:
        rooms_cleared = sum(
            1 for floor in self.floors for room in floor.rooms if room.status == RoomStatus.COMPLETED
        )
        elapsed = time.time() - self.start_time if self.start_time else 0.0
        return {
            'floors_explored': self.max_floor_reached,
            'rooms_cleared': rooms_cleared,
            'enemies_defeated': self.total_enemies_defeated,
            'gold_earned': self.total_gold_earned,
            'items_found': self.total_items_found,
            'time_elapsed': elapsed,
        }
