"""Shortest and longest routes between two cells of a maze.

Both searches expand neighbours in the fixed order Down, Right, Up, Left, so
equal-length routes always resolve the same way for a given grid.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, Iterator, List, Optional, Set

from .world import Direction, MazeGrid, Position

SEARCH_ORDER = (Direction.DOWN, Direction.RIGHT, Direction.UP, Direction.LEFT)


def _open_neighbors(grid: MazeGrid, pos: Position) -> Iterator[Position]:
    for direction in SEARCH_ORDER:
        nxt = direction.step(pos)
        if grid.is_open(nxt):
            yield nxt


def shortest_path(grid: MazeGrid, entry: Position, exit: Position) -> Optional[List[Position]]:
    if not grid.is_open(entry) or not grid.is_open(exit):
        return None

    parents: Dict[Position, Optional[Position]] = {entry: None}
    queue = deque([entry])
    while queue:
        current = queue.popleft()
        if current == exit:
            path = []
            node: Optional[Position] = current
            while node is not None:
                path.append(node)
                node = parents[node]
            path.reverse()
            return path
        for nxt in _open_neighbors(grid, current):
            if nxt not in parents:
                parents[nxt] = current
                queue.append(nxt)
    return None


def longest_path(grid: MazeGrid, entry: Position, exit: Position) -> Optional[List[Position]]:
    """Longest simple route from entry to exit by exhaustive depth-first search.

    Exponential in the number of cycles; carved mazes stay close to trees, so
    this is fine for the grid sizes the simulator uses. The search is driven by
    an explicit stack so deep corridors do not hit the recursion limit.
    """
    if not grid.is_open(entry) or not grid.is_open(exit):
        return None
    if entry == exit:
        return [entry]

    best: Optional[List[Position]] = None
    path: List[Position] = [entry]
    visited: Set[Position] = {entry}
    frontier: List[Iterator[Position]] = [_open_neighbors(grid, entry)]

    while frontier:
        nxt = next(frontier[-1], None)
        if nxt is None:
            frontier.pop()
            visited.discard(path.pop())
            continue
        if nxt in visited:
            continue
        if nxt == exit:
            if best is None or len(path) + 1 > len(best):
                best = path + [nxt]
            continue
        visited.add(nxt)
        path.append(nxt)
        frontier.append(_open_neighbors(grid, nxt))

    return best
