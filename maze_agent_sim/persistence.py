"""Best-effort local caching of a carved maze.

Snapshots are plain JSON validated against ``maze_snapshot.schema.json``.
Cache failures are logged and reported through the return value; they never
interrupt carving.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .schema import MAZE_SNAPSHOT_SCHEMA, validate_or_raise
from .world import Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MazeSnapshot:
    width: int
    height: int
    rows: List[List[int]]
    plow: Position
    entry: Optional[Position]
    exit: Optional[Position]

    def to_document(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "grid": self.rows,
            "plowPosition": _pos_doc(self.plow),
            "entry": _pos_doc(self.entry),
            "exit": _pos_doc(self.exit),
        }

    @staticmethod
    def from_document(doc: Any) -> "MazeSnapshot":
        validate_or_raise(doc, MAZE_SNAPSHOT_SCHEMA)
        width, height = doc["width"], doc["height"]
        rows = doc["grid"]
        if len(rows) != height or any(len(row) != width for row in rows):
            raise ValueError("Snapshot grid does not match its declared dimensions.")
        return MazeSnapshot(
            width=width,
            height=height,
            rows=[list(row) for row in rows],
            plow=_pos_from(doc["plowPosition"]),
            entry=_pos_from(doc["entry"]),
            exit=_pos_from(doc["exit"]),
        )


def save_snapshot(path: Path, snapshot: MazeSnapshot) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(snapshot.to_document()), encoding="utf-8")
    except OSError as exc:
        logger.warning("Failed to save maze snapshot to %s: %s", path, exc)
        return False
    return True


def load_snapshot(path: Path, width: int, height: int) -> Optional[MazeSnapshot]:
    """Return the cached maze if one exists for these dimensions."""
    if not path.exists():
        return None
    try:
        snapshot = MazeSnapshot.from_document(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, ValueError) as exc:
        logger.warning("Failed to load maze snapshot from %s: %s", path, exc)
        return None
    if snapshot.width != width or snapshot.height != height:
        logger.info("Ignoring cached %dx%d maze for a %dx%d session", snapshot.width, snapshot.height, width, height)
        return None
    return snapshot


def _pos_doc(pos: Optional[Position]) -> Optional[Dict[str, int]]:
    return None if pos is None else {"x": pos[0], "y": pos[1]}


def _pos_from(doc: Optional[Dict[str, int]]) -> Optional[Position]:
    return None if doc is None else (doc["x"], doc["y"])
