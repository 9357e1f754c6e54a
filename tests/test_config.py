import importlib
import logging
import random

import config
from depths.core.ids import SequentialIds, UuidIds, default_ids
from depths.dungeon import DungeonConfig
from depths.loot import ItemGenerator


def test_int_env_falls_back_on_bad_values(monkeypatch):
    monkeypatch.setenv('FD_TEST_INT', 'twelve')
    assert config._get_int_env('FD_TEST_INT', 7) == 7
    monkeypatch.setenv('FD_TEST_INT', '2')
    assert config._get_int_env('FD_TEST_INT', 7, minval=4) == 7
    monkeypatch.setenv('FD_TEST_INT', '9')
    assert config._get_int_env('FD_TEST_INT', 7, minval=4) == 9
    monkeypatch.delenv('FD_TEST_INT')
    assert config._get_int_env('FD_TEST_INT', 7) == 7


def test_float_and_bool_env(monkeypatch):
    monkeypatch.setenv('FD_TEST_FLOAT', '1.5')
    assert config._get_float_env('FD_TEST_FLOAT', 0.6, maxval=1.0) == 0.6
    monkeypatch.setenv('FD_TEST_FLOAT', '0.25')
    assert config._get_float_env('FD_TEST_FLOAT', 0.6, maxval=1.0) == 0.25
    monkeypatch.setenv('FD_TEST_BOOL', 'Yes')
    assert config._get_bool_env('FD_TEST_BOOL', False)
    monkeypatch.setenv('FD_TEST_BOOL', 'nah')
    assert not config._get_bool_env('FD_TEST_BOOL', True)


def test_log_level(monkeypatch):
    monkeypatch.setenv('FD_LOG_LEVEL', 'debug')
    assert config.get_log_level() == logging.DEBUG
    monkeypatch.setenv('FD_LOG_LEVEL', 'chatty')
    assert config.get_log_level() == logging.WARNING


def test_dungeon_config_overrides():
    cfg = DungeonConfig.from_env(rooms_min=5, hero_level=3)
    assert cfg.rooms_min == 5
    assert cfg.rooms_max == config.ROOMS_PER_FLOOR_MAX
    assert cfg.hero_level == 3


def test_id_factories(monkeypatch):
    ids = SequentialIds('room')
    assert [ids(), ids('item'), ids()] == ['room_1', 'item_2', 'room_3']
    uid = UuidIds()('enemy')
    assert uid.startswith('enemy_')
    assert uid != UuidIds()('enemy')
    monkeypatch.setattr(config, 'USE_UUID_IDS', True)
    assert isinstance(default_ids('room'), UuidIds)
    monkeypatch.setattr(config, 'USE_UUID_IDS', False)
    shared = default_ids('room')
    assert shared is default_ids('room')
    assert shared is not default_ids('item')
    assert shared() != default_ids('room')()


def test_raised_room_minimum_lifts_default_maximum(monkeypatch):
    monkeypatch.setenv('FD_ROOMS_MIN', '15')
    monkeypatch.delenv('FD_ROOMS_MAX', raising=False)
    try:
        importlib.reload(config)
        assert config.ROOMS_PER_FLOOR_MIN == 15
        assert config.ROOMS_PER_FLOOR_MAX == 15
        cfg = DungeonConfig.from_env()
        assert cfg.rooms_min <= cfg.rooms_max
    finally:
        monkeypatch.delenv('FD_ROOMS_MIN')
        importlib.reload(config)
    assert config.ROOMS_PER_FLOOR_MIN == 8
    assert config.ROOMS_PER_FLOOR_MAX == 12


def test_default_ids_shared_across_generators(monkeypatch):
    monkeypatch.setattr(config, 'USE_UUID_IDS', False)
    first = ItemGenerator(rng=random.Random(1)).generate(3, 'common')
    second = ItemGenerator(rng=random.Random(1)).generate(3, 'common')
    assert first.id != second.id
