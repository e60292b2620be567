from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .agents import AgentStatus
from .paths import longest_path, shortest_path
from .session import MazeSession, SessionConfig, SessionMode
from .simulation import SimulationConfig, SimulationRuntime
from .tiers import TierConfig
from .world import MazeGrid, Position


@dataclass
class SimulationSummary:
    elapsed_ms: float
    finished: int
    stuck: int
    still_active: int
    total_events: int
    shortest_path: Optional[int]
    longest_path: Optional[int]


class MazeGameLibrary:
    """Factory + orchestration API for carving mazes and racing agents through them."""

    def create_session(self, width: int = 20, height: int = 20, seed: int | None = None) -> MazeSession:
        return MazeSession(SessionConfig(width=width, height=height, seed=seed))

    def create_runtime(
        self,
        grid: MazeGrid,
        entry: Position,
        exit: Position,
        config: SimulationConfig | None = None,
        seed: int | None = None,
    ) -> SimulationRuntime:
        """Runtime over a hand-built grid, bypassing the plow."""
        if not grid.is_open(entry) or not grid.is_open(exit):
            raise ValueError("Entry and exit must be open cells.")
        return SimulationRuntime(grid=grid, entry=entry, exit=exit, config=config or SimulationConfig(), seed=seed)

    def run_agents(
        self,
        session: MazeSession,
        tier_configs: Sequence[TierConfig],
        speed_ms: float | None = None,
        max_time_ms: float | None = None,
    ) -> tuple[SimulationRuntime, SimulationSummary]:
        if not session.set_mode(SessionMode.RUNNING):
            raise ValueError("Maze needs both an entry and an exit before agents can run.")
        runtime = session.runtime
        for tiers in tier_configs:
            runtime.spawn(tiers, speed_ms=speed_ms)
        runtime.run_until_settled(max_time_ms)
        return runtime, self.summarize(runtime)

    def summarize(self, runtime: SimulationRuntime) -> SimulationSummary:
        statuses: List[AgentStatus] = [a.status for a in runtime.agents]
        short = long_ = None
        if runtime.entry is not None and runtime.exit is not None:
            route = shortest_path(runtime.grid, runtime.entry, runtime.exit)
            short = None if route is None else len(route)
            route = longest_path(runtime.grid, runtime.entry, runtime.exit)
            long_ = None if route is None else len(route)
        return SimulationSummary(
            elapsed_ms=runtime.now_ms,
            finished=statuses.count(AgentStatus.FINISHED),
            stuck=statuses.count(AgentStatus.STUCK),
            still_active=statuses.count(AgentStatus.ACTIVE),
            total_events=len(runtime.events),
            shortest_path=short,
            longest_path=long_,
        )


def grid_with_open_cells(width: int, height: int, cells: Iterable[Position]) -> MazeGrid:
    """Carve ``cells`` into a blank grid, skipping any the carving rules refuse."""
    grid = MazeGrid(width, height)
    for pos in cells:
        if grid.can_carve(pos):
            grid.carve(pos)
    return grid
