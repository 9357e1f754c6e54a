"""Save/Load helpers for inventories and equipment.

Records are plain JSON-compatible dicts stamped with a ``_save_metadata``
block so newer save formats are refused instead of half-loaded.
"""
from __future__ import annotations
import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from ..equipment import Equipment
from ..inventory import Inventory

log = logging.getLogger(__name__)

# Save format version - increment when making breaking changes
SAVE_VERSION = 1


class SaveError(Exception):
    """Exception raised for save/load operations."""
    pass


def _save_metadata() -> Dict[str, Any]:
    return {
        "version": SAVE_VERSION,
        "timestamp": time.time(),
        "date_saved": datetime.now().isoformat(),
    }


def _check_version(data: Dict[str, Any]) -> Dict[str, Any]:
    """Strip metadata and refuse records written by a newer format."""
    data = dict(data)
    metadata = data.pop("_save_metadata", {})
    save_version = metadata.get("version", 0)
    if save_version > SAVE_VERSION:
        raise SaveError(f"Save file version {save_version} is newer than supported version {SAVE_VERSION}")
    return data


def serialize_inventory(inventory: Inventory) -> Dict[str, Any]:
    data = inventory.to_dict()
    data["_save_metadata"] = _save_metadata()
    return data


def deserialize_inventory(data: Dict[str, Any]) -> Inventory:
    data = _check_version(data)
    try:
        return Inventory.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise SaveError(f"Invalid inventory record: {e}")


def serialize_equipment(equipment: Equipment) -> Dict[str, Any]:
    data = equipment.to_dict()
    data["_save_metadata"] = _save_metadata()
    return data


def deserialize_equipment(data: Dict[str, Any], owner: Any = None) -> Equipment:
    data = _check_version(data)
    try:
        return Equipment.from_dict(data, owner)
    except (KeyError, TypeError, ValueError) as e:
        raise SaveError(f"Invalid equipment record: {e}")


def save_json(data: Dict[str, Any], path: str | Path) -> str:
    """Write a record to disk, creating parent directories.

    Returns:
        Path to the written file

    Raises:
        SaveError: If the write fails
    """
    filepath = Path(path)
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except (OSError, TypeError, ValueError) as e:
        raise SaveError(f"Failed to save {filepath}: {e}")
    log.debug("Saved %s", filepath)
    return str(filepath)


def load_json(path: str | Path) -> Dict[str, Any]:
    """Read a record written by save_json.

    Raises:
        SaveError: If the file is missing, malformed or from a newer version
    """
    filepath = Path(path)
    if not filepath.exists():
        raise SaveError(f"Save file not found: {filepath}")
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise SaveError(f"Failed to load {filepath}: {e}")
    if not isinstance(data, dict):
        raise SaveError(f"Failed to load {filepath}: expected an object")

    metadata: Optional[Dict[str, Any]] = data.get("_save_metadata")
    if metadata and metadata.get("version", 0) > SAVE_VERSION:
        raise SaveError(f"Save file version {metadata['version']} is newer than supported version {SAVE_VERSION}")
    return data
