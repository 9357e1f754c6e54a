"""Dungeon module - floor generation and run state."""
from .model import (
    Direction, RoomType, RoomStatus, Difficulty, ShrineBuff, MysteryEvent,
    Room, Floor, ActiveBuff, validate_floor,
)
from .generator import FloorGenerator
from .dungeon import Dungeon, DungeonConfig, room_description

__all__ = [
    'Direction', 'RoomType', 'RoomStatus', 'Difficulty', 'ShrineBuff', 'MysteryEvent',
    'Room', 'Floor', 'ActiveBuff', 'validate_floor',
    'FloorGenerator', 'Dungeon', 'DungeonConfig', 'room_description'
]
