from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .world import Direction, MazeGrid, Position

# Candidate order; later stages use it as their tie-break input.
MOVE_ORDER = (Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT)


@dataclass(frozen=True)
class Move:
    position: Position
    direction: Direction

    @property
    def x(self) -> int:
        return self.position[0]

    @property
    def y(self) -> int:
        return self.position[1]


def legal_moves(pos: Position, grid: MazeGrid) -> List[Move]:
    moves = []
    for direction in MOVE_ORDER:
        target = direction.step(pos)
        if grid.in_bounds(target) and grid.is_open(target):
            moves.append(Move(position=target, direction=direction))
    return moves


def exclude_reversal(moves: Sequence[Move], last_direction: Optional[Direction]) -> List[Move]:
    """Drop the move that undoes ``last_direction`` unless nothing else is left."""
    if last_direction is None:
        return list(moves)
    backward = last_direction.opposite
    forward = [m for m in moves if m.direction != backward]
    return forward if forward else list(moves)
