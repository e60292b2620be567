from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

from .blocks import DecisionContext
from .engine import Decision, DecisionEngine
from .moves import Move
from .tiers import TierConfig
from .world import Direction, Position


class AgentStatus(str, Enum):
    ACTIVE = "active"
    FINISHED = "finished"
    STUCK = "stuck"
    STOPPED = "stopped"


@dataclass
class AgentState:
    agent_id: str
    position: Position
    tiers: TierConfig = field(default_factory=TierConfig)
    speed_ms: float = 500.0
    visited: Set[Position] = field(default_factory=set)
    visit_counts: Dict[Position, int] = field(default_factory=dict)
    path: List[Position] = field(default_factory=list)
    last_direction: Optional[Direction] = None
    status: AgentStatus = AgentStatus.ACTIVE
    thought: Optional[str] = None
    removed: bool = False
    paused: bool = False

    def __post_init__(self) -> None:
        if not self.path:
            self.path.append(self.position)
        if not self.visited:
            self.visited.add(self.position)
            self.visit_counts[self.position] = self.visit_counts.get(self.position, 0) + 1

    @property
    def is_live(self) -> bool:
        return self.status == AgentStatus.ACTIVE and not self.removed

    @property
    def moves_per_second(self) -> float:
        return 1000.0 / self.speed_ms

    def record_move(self, move: Move) -> None:
        self.position = move.position
        self.last_direction = move.direction
        self.path.append(move.position)
        self.visited.add(move.position)
        self.visit_counts[move.position] = self.visit_counts.get(move.position, 0) + 1


class BaseAgentController:
    def decide(self, ctx: DecisionContext) -> Decision:
        raise NotImplementedError


class TieredController(BaseAgentController):
    """Runs the agent's own tier configuration through a private engine."""

    def __init__(self, tiers: TierConfig, seed: int | None = None, rng: random.Random | None = None) -> None:
        self.engine = DecisionEngine(tiers=tiers, rng=rng or random.Random(seed))

    def decide(self, ctx: DecisionContext) -> Decision:
        return self.engine.decide_next_move(ctx)
