from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .agents import AgentState
from .paths import longest_path, shortest_path
from .persistence import MazeSnapshot, load_snapshot, save_snapshot
from .simulation import SimulationConfig, SimulationRuntime
from .tiers import TierDraft
from .world import Direction, MazeGrid, Position

logger = logging.getLogger(__name__)


class SessionMode(str, Enum):
    CARVING = "carving"
    RUNNING = "running"


@dataclass(frozen=True)
class SessionConfig:
    width: int = 20
    height: int = 20
    snapshot_path: Optional[Path] = None
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    seed: Optional[int] = None


@dataclass(frozen=True)
class MazeStats:
    total_open: int
    shortest_path: Optional[List[Position]] = None
    longest_path: Optional[List[Position]] = None

    @property
    def shortest_length(self) -> Optional[int]:
        return None if self.shortest_path is None else len(self.shortest_path)

    @property
    def longest_length(self) -> Optional[int]:
        return None if self.longest_path is None else len(self.longest_path)


class MazeSession:
    """A maze under construction plus the agents running through it.

    The plow starts on the carved centre cell. The first two perimeter cells it
    opens become the entry and the exit. Carving is only possible in
    ``CARVING`` mode; ``RUNNING`` mode needs both markers and hosts the
    simulation runtime.
    """

    def __init__(self, config: SessionConfig | None = None) -> None:
        self.config = config or SessionConfig()
        self.grid = MazeGrid(self.config.width, self.config.height)
        self.plow: Position = _center(self.config.width, self.config.height)
        self.entry: Optional[Position] = None
        self.exit: Optional[Position] = None
        self.mode = SessionMode.CARVING
        self.tier_draft = TierDraft()
        self.runtime: Optional[SimulationRuntime] = None
        self._history: List[MazeSnapshot] = []

        if not self._restore_cached():
            self.grid.carve(self.plow)
        self._initial = self.snapshot()
        self._history.append(self._initial)

    @property
    def is_complete(self) -> bool:
        return self.entry is not None and self.exit is not None

    def snapshot(self) -> MazeSnapshot:
        return MazeSnapshot(
            width=self.grid.width,
            height=self.grid.height,
            rows=self.grid.rows(),
            plow=self.plow,
            entry=self.entry,
            exit=self.exit,
        )

    def restore(self, snapshot: MazeSnapshot) -> None:
        self.grid = MazeGrid.from_rows(snapshot.rows)
        self.plow = snapshot.plow
        self.entry = snapshot.entry
        self.exit = snapshot.exit

    def move_plow(self, direction: Direction) -> bool:
        """Drive the plow one cell, carving as it goes. Returns whether it moved."""
        if self.mode != SessionMode.CARVING:
            return False
        x, y = direction.step(self.plow)
        target = (min(max(x, 0), self.grid.width - 1), min(max(y, 0), self.grid.height - 1))
        if target == self.plow or not self.grid.can_carve(target):
            return False

        self.plow = target
        self.grid.carve(target)
        if self.grid.is_on_perimeter(target):
            if self.entry is None:
                self.entry = target
                logger.info("entry marked at %s", target)
            elif self.exit is None and target != self.entry:
                self.exit = target
                logger.info("exit marked at %s", target)

        self._history.append(self.snapshot())
        self._cache()
        return True

    def drive(self, directions: List[Direction]) -> int:
        return sum(1 for d in directions if self.move_plow(d))

    def undo(self) -> bool:
        if self.mode != SessionMode.CARVING or len(self._history) <= 1:
            return False
        self._history.pop()
        self.restore(self._history[-1])
        self._cache()
        return True

    def reset_maze(self) -> None:
        self.set_mode(SessionMode.CARVING)
        self.restore(self._initial)
        self._history = [self._initial]
        self._cache()

    def resize_and_reset(self, width: int, height: int) -> None:
        self.set_mode(SessionMode.CARVING)
        self.grid.resize_and_reset(width, height)
        self.plow = _center(width, height)
        self.entry = None
        self.exit = None
        self.grid.carve(self.plow)
        self._initial = self.snapshot()
        self._history = [self._initial]
        logger.info("session reset to %dx%d", width, height)
        self._cache()

    def stats(self) -> MazeStats:
        if not self.is_complete:
            return MazeStats(total_open=self.grid.count_open())
        return MazeStats(
            total_open=self.grid.count_open(),
            shortest_path=shortest_path(self.grid, self.entry, self.exit),
            longest_path=longest_path(self.grid, self.entry, self.exit),
        )

    def set_mode(self, mode: SessionMode) -> bool:
        if mode == self.mode:
            return True
        if mode == SessionMode.RUNNING:
            if not self.is_complete:
                return False
            self.runtime = SimulationRuntime(
                grid=self.grid,
                entry=self.entry,
                exit=self.exit,
                config=self.config.simulation,
                seed=self.config.seed,
            )
        elif self.runtime is not None:
            self.runtime.stop_all()
            self.runtime = None
        self.mode = mode
        return True

    def spawn_agent(self, speed_ms: float | None = None, moves_per_second: float | None = None) -> AgentState:
        """Spawn an agent with a frozen copy of the tier draft, then clear the draft."""
        if self.runtime is None:
            raise ValueError("Agents can only be spawned in running mode.")
        state = self.runtime.spawn(self.tier_draft.freeze(), speed_ms=speed_ms, moves_per_second=moves_per_second)
        self.tier_draft.clear()
        return state

    def _restore_cached(self) -> bool:
        if self.config.snapshot_path is None:
            return False
        snapshot = load_snapshot(self.config.snapshot_path, self.config.width, self.config.height)
        if snapshot is None:
            return False
        self.restore(snapshot)
        return True

    def _cache(self) -> None:
        if self.config.snapshot_path is not None:
            save_snapshot(self.config.snapshot_path, self.snapshot())


def _center(width: int, height: int) -> Position:
    return width // 2, height // 2
