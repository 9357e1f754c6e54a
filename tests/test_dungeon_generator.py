import random

import pytest

from depths.core.ids import SequentialIds
from depths.dungeon.generator import FloorGenerator, grid_size_for
from depths.dungeon.model import (
    CombatPayload, Direction, Floor, RestPayload, Room, RoomStatus, RoomType,
    TreasurePayload, reachable_room_ids, validate_floor,
)
from depths.results import InvariantError


def make_generator(seed=1):
    return FloorGenerator(rng=random.Random(seed), ids=SequentialIds('room'))


def test_floor_one_with_boss_has_expected_layout():
    floor = make_generator().generate_floor(1, 8, 1.0, guarantee_boss=True)
    assert len(floor.rooms) == 8
    assert len(floor.rooms_of_type(RoomType.START)) == 1
    assert len(floor.rooms_of_type(RoomType.EXIT)) == 1
    assert len(floor.rooms_of_type(RoomType.BOSS)) == 1
    path = [r for r in floor.rooms if r.type not in (RoomType.START, RoomType.EXIT, RoomType.BOSS)]
    assert len(path) == 5

    start = floor.get_room(floor.start_room_id)
    assert start.connections
    assert start.status == RoomStatus.CURRENT
    assert floor.current_room_id == start.id
    assert start.position == (floor.grid_size // 2, floor.grid_size // 2)
    assert floor.grid_size == grid_size_for(8) == 4


@pytest.mark.parametrize('seed', range(40))
def test_every_room_reachable(seed):
    rng = random.Random(seed)
    gen = FloorGenerator(rng=rng, ids=SequentialIds('room'))
    room_count = rng.randint(4, 20)
    boss = seed % 2 == 0
    floor = gen.generate_floor(seed % 7 + 1, room_count, 1 + seed * 0.1, guarantee_boss=boss)
    assert reachable_room_ids(floor) == {r.id for r in floor.rooms}
    assert len(floor.rooms) == room_count


@pytest.mark.parametrize('seed', range(20))
def test_connections_symmetric_and_positions_unique(seed):
    floor = make_generator(seed).generate_floor(3, 12, 1.6, guarantee_boss=True)
    positions = [r.position for r in floor.rooms]
    assert len(positions) == len(set(positions))
    key = {floor.start_room_id, floor.exit_room_id, floor.boss_room_id}
    assert len(key) == 3
    for room in floor.rooms:
        for d in room.connections:
            other = floor.room_at(room.neighbor_position(d))
            assert other is not None
            assert d.opposite in other.connections


def test_adjacent_rooms_are_always_linked():
    floor = make_generator(5).generate_floor(2, 14, 1.3, guarantee_boss=False)
    for room in floor.rooms:
        for d in Direction:
            neighbor = floor.room_at(room.neighbor_position(d))
            if neighbor is not None:
                assert d in room.connections


def test_room_payloads_match_types():
    floor = make_generator(9).generate_floor(4, 20, 1.9, guarantee_boss=True, hero_level=15)
    for room in floor.rooms:
        if room.type in (RoomType.START, RoomType.EXIT):
            assert room.payload is None
        elif room.is_combat():
            assert isinstance(room.payload, CombatPayload)
            assert room.payload.enemies
        elif room.type == RoomType.TREASURE:
            assert all(item.level >= 15 for item in room.payload.items)
            assert 1 <= len(room.payload.items) <= 2


def test_boss_level_scales_with_floor():
    floor = make_generator(2).generate_floor(5, 10, 2.2, guarantee_boss=True)
    boss_room = floor.get_room(floor.boss_room_id)
    (boss,) = boss_room.payload.enemies
    assert boss.level == 17  # floor(5 * 2.2 * 1.6)


def test_too_few_rooms_is_rejected():
    gen = make_generator()
    with pytest.raises(InvariantError):
        gen.generate_floor(1, 2, guarantee_boss=False)
    with pytest.raises(InvariantError):
        gen.generate_floor(1, 3, guarantee_boss=True)
    floor = gen.generate_floor(1, 3, guarantee_boss=False)
    assert len(floor.rooms) == 3


def test_same_seed_same_floor():
    a = make_generator(42).generate_floor(1, 10)
    b = make_generator(42).generate_floor(1, 10)
    assert [(r.id, r.type, r.position) for r in a.rooms] == [(r.id, r.type, r.position) for r in b.rooms]


def test_validate_floor_detects_unreachable_room():
    start = Room('s', RoomType.START, (0, 0), connections={Direction.EAST})
    exit_room = Room('e', RoomType.EXIT, (1, 0), connections={Direction.WEST})
    island = Room('i', RoomType.REST, (5, 5), payload=RestPayload(60))
    floor = Floor(1, [start, exit_room, island], 's', 'e', 's')
    with pytest.raises(InvariantError):
        validate_floor(floor)


def test_validate_floor_detects_one_way_connection():
    start = Room('s', RoomType.START, (0, 0), connections={Direction.EAST})
    exit_room = Room('e', RoomType.EXIT, (1, 0))
    with pytest.raises(InvariantError):
        validate_floor(Floor(1, [start, exit_room], 's', 'e', 's'))


def test_room_rejects_wrong_payload():
    with pytest.raises(InvariantError):
        Room('t', RoomType.TRAP, (0, 0), payload=TreasurePayload())
    with pytest.raises(InvariantError):
        Room('s', RoomType.START, (0, 0), payload=RestPayload())


def test_minimap_snapshot():
    floor = make_generator().generate_floor(1, 8)
    data = floor.minimap_data()
    assert len(data['rooms']) == 8
    assert sum(1 for r in data['rooms'] if r['isCurrent']) == 1
    assert data['gridSize'] == {'width': 4, 'height': 4}
