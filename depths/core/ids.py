"""Identifier factories injected into generators instead of a global counter."""
from __future__ import annotations
import itertools
import uuid
from typing import Dict, Optional

import config


class SequentialIds:
    """Deterministic ``<prefix>_<n>`` ids, one counter per factory instance."""

    def __init__(self, prefix: str = "id", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self, kind: Optional[str] = None) -> str:
        return f"{kind or self.prefix}_{next(self._counter)}"


class UuidIds:
    """Random uuid4-based ids for production runs."""

    def __call__(self, kind: Optional[str] = None) -> str:
        return f"{kind or 'id'}_{uuid.uuid4().hex[:12]}"


# One counter per prefix for the whole process
_shared_ids: Dict[str, SequentialIds] = {}


def default_ids(prefix: str = "id"):
    """Process-wide factory for ``prefix`` honoring FD_UUID_IDS.

    Every caller asking for the same prefix draws from the same counter, so
    generators built independently never hand out the same id twice.
    """
    if config.USE_UUID_IDS:
        return UuidIds()
    if prefix not in _shared_ids:
        _shared_ids[prefix] = SequentialIds(prefix)
    return _shared_ids[prefix]
