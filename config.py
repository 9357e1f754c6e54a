"""Central configuration for Forgotten Depths.

All tunable rules-engine parameters live here (floor size, difficulty
scaling, trap odds, inventory capacity, shop constants, logging). Every
value has a sensible default and can be overridden via environment
variables prefixed with ``FD_``.
"""
from __future__ import annotations
import logging
import os


def _get_int_env(name: str, default: int, minval: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw)
        if minval is not None and v < minval:
            return default
        return v
    except ValueError:
        return default


def _get_float_env(name: str, default: float, minval: float | None = None,
                   maxval: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = float(raw)
        if minval is not None and v < minval:
            return default
        if maxval is not None and v > maxval:
            return default
        return v
    except ValueError:
        return default


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    return val in {"1", "true", "yes", "on"}


# ---------------- Dungeon ----------------
DUNGEON_NAME: str = os.getenv("FD_DUNGEON_NAME", "The Forgotten Depths")

# Rooms per floor on floor 1 (grows by half a room per floor)
ROOMS_PER_FLOOR_MIN: int = _get_int_env("FD_ROOMS_MIN", 8, minval=4)
# Clamped so a raised minimum never leaves the default maximum below it
ROOMS_PER_FLOOR_MAX: int = max(ROOMS_PER_FLOOR_MIN, _get_int_env("FD_ROOMS_MAX", 12, minval=ROOMS_PER_FLOOR_MIN))

# Difficulty multiplier added per floor after the first
DIFFICULTY_SCALING: float = _get_float_env("FD_DIFFICULTY_SCALING", 0.3, minval=0.0)

# Every Nth floor guarantees a boss room
BOSS_FLOOR_INTERVAL: int = _get_int_env("FD_BOSS_INTERVAL", 5, minval=1)

# Default odds of disarming a trap
TRAP_DISARM_CHANCE: float = _get_float_env("FD_TRAP_DISARM_CHANCE", 0.6, minval=0.0, maxval=1.0)


# ---------------- Inventory ----------------
INVENTORY_DEFAULT_SLOTS: int = _get_int_env("FD_INVENTORY_SLOTS", 50, minval=1)
INVENTORY_MAX_SLOTS: int = max(INVENTORY_DEFAULT_SLOTS,
                               _get_int_env("FD_INVENTORY_MAX_SLOTS", 100, minval=INVENTORY_DEFAULT_SLOTS))
EXPANSION_BASE_COST: int = _get_int_env("FD_EXPANSION_COST", 1000, minval=0)
EXPANSION_COST_MULTIPLIER: float = 1.2


# ---------------- Items & market ----------------
ENCHANT_BASE_COST: int = 100
ENCHANT_COST_MULTIPLIER: float = 1.5

SHOP_SIZE: int = _get_int_env("FD_SHOP_SIZE", 6, minval=1)
SHOP_ITEM_LEVEL_VARIANCE: int = 2
SHOP_BUY_MARKUP: float = 1.5
SHOP_SELL_MULTIPLIER: float = 0.5


# ---------------- Identity ----------------
# Use uuid4 ids instead of sequential counters for generated items/rooms
USE_UUID_IDS: bool = _get_bool_env("FD_UUID_IDS", False)


# ---------------- Logging ----------------

def get_log_level() -> int:
    """Log level for hosts that call configure_logging(). Var: FD_LOG_LEVEL (default WARNING)."""
    name = os.getenv("FD_LOG_LEVEL", "WARNING").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: int | None = None) -> None:
    """Attach a basic stderr handler. The engine itself never calls this."""
    logging.basicConfig(
        level=level if level is not None else get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = [
    # Dungeon
    "DUNGEON_NAME", "ROOMS_PER_FLOOR_MIN", "ROOMS_PER_FLOOR_MAX", "DIFFICULTY_SCALING",
    "BOSS_FLOOR_INTERVAL", "TRAP_DISARM_CHANCE",
    # Inventory
    "INVENTORY_DEFAULT_SLOTS", "INVENTORY_MAX_SLOTS", "EXPANSION_BASE_COST", "EXPANSION_COST_MULTIPLIER",
    # Items & market
    "ENCHANT_BASE_COST", "ENCHANT_COST_MULTIPLIER", "SHOP_SIZE", "SHOP_ITEM_LEVEL_VARIANCE",
    "SHOP_BUY_MARKUP", "SHOP_SELL_MULTIPLIER",
    # Identity / logging
    "USE_UUID_IDS", "get_log_level", "configure_logging",
]
