"""Maze carving and tiered multi-agent navigation simulator."""

from .agents import AgentState, AgentStatus, BaseAgentController, TieredController
from .blocks import (
    BacktrackMode,
    Backtracking,
    CheckMap,
    DecisionContext,
    LineOfSight,
    RandomGuesser,
    Social,
    SocialMode,
    Thought,
    TowardExit,
    UnknownBlock,
    WallFollowing,
    WallSide,
)
from .engine import Decision, DecisionEngine
from .library import MazeGameLibrary, SimulationSummary
from .moves import Move, legal_moves
from .paths import longest_path, shortest_path
from .session import MazeSession, SessionConfig, SessionMode
from .simulation import SimulationConfig, SimulationRuntime
from .tiers import Priority, TierConfig, TierDraft
from .world import CellType, Direction, MazeGrid

__all__ = [
    "AgentState",
    "AgentStatus",
    "BaseAgentController",
    "TieredController",
    "BacktrackMode",
    "Backtracking",
    "CheckMap",
    "DecisionContext",
    "LineOfSight",
    "RandomGuesser",
    "Social",
    "SocialMode",
    "Thought",
    "TowardExit",
    "UnknownBlock",
    "WallFollowing",
    "WallSide",
    "Decision",
    "DecisionEngine",
    "MazeGameLibrary",
    "SimulationSummary",
    "Move",
    "legal_moves",
    "longest_path",
    "shortest_path",
    "MazeSession",
    "SessionConfig",
    "SessionMode",
    "SimulationConfig",
    "SimulationRuntime",
    "Priority",
    "TierConfig",
    "TierDraft",
    "CellType",
    "Direction",
    "MazeGrid",
]
