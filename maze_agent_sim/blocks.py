"""Navigation heuristics that agents combine into tiered personalities.

Every block kind answers two questions about a set of candidate moves: whether
it has anything to say (``is_applicable``) and which candidates it prefers
(``apply_block``). A block only ever narrows the candidate set; when its
preference matches none of the candidates it hands the set back unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, AbstractSet, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from .moves import Move
from .paths import shortest_path
from .world import Direction, MazeGrid, Position

if TYPE_CHECKING:
    from .agents import AgentState

UNCHARTED_LOOKAHEAD = 5
SOCIAL_LOOKAHEAD = 7


class Thought(str, Enum):
    WALL_LEFT = "←"
    WALL_RIGHT = "→"
    INSIGHT = "❗"
    COMPASS = "🧭"
    MAP = "🗺️"
    AVOID_REVISIT = "🧠"
    SEEK_REVISIT = "❓"
    FOLLOW = "❤️"
    SHY = "🫣"
    DICE = "🎲"
    CELEBRATE = "🎉"
    STUCK = "❌"


class WallSide(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class BacktrackMode(str, Enum):
    AVOID = "avoid"
    SEEK = "seek"


class SocialMode(str, Enum):
    FOLLOW = "follow"
    AVOID = "avoid"


@dataclass(frozen=True)
class WallFollowing:
    weight: float = 1.0
    mode: WallSide = WallSide.RIGHT


@dataclass(frozen=True)
class LineOfSight:
    weight: float = 1.0


@dataclass(frozen=True)
class TowardExit:
    weight: float = 1.0


@dataclass(frozen=True)
class CheckMap:
    weight: float = 1.0


@dataclass(frozen=True)
class Backtracking:
    weight: float = 1.0
    mode: BacktrackMode = BacktrackMode.AVOID


@dataclass(frozen=True)
class Social:
    weight: float = 1.0
    mode: SocialMode = SocialMode.FOLLOW


@dataclass(frozen=True)
class RandomGuesser:
    weight: float = 1.0


@dataclass(frozen=True)
class UnknownBlock:
    """Placeholder for a kind this version does not recognise; never applicable."""

    kind: str
    weight: float = 0.0


RuleBlock = Union[WallFollowing, LineOfSight, TowardExit, CheckMap, Backtracking, Social, RandomGuesser, UnknownBlock]


@dataclass(frozen=True)
class DecisionContext:
    """Everything a block may look at while judging candidate moves."""

    position: Position
    grid: MazeGrid
    exit: Optional[Position] = None
    visited: AbstractSet[Position] = field(default_factory=frozenset)
    visit_counts: Mapping[Position, int] = field(default_factory=dict)
    last_direction: Optional[Direction] = None
    agents: Sequence["AgentState"] = ()
    agent_index: int = -1

    def visits(self, pos: Position) -> int:
        return self.visit_counts.get(pos, 0)


def is_applicable(block: RuleBlock, ctx: DecisionContext, moves: Sequence[Move]) -> bool:
    match block:
        case WallFollowing():
            return ctx.last_direction is not None
        case LineOfSight():
            return exit_visible(ctx) or any(distance_to_uncharted(ctx, m.direction) > 0 for m in moves)
        case TowardExit():
            return bool(_closer_moves(ctx, moves))
        case CheckMap():
            route = _route_to_exit(ctx)
            return route is not None and len(route) > 1
        case Backtracking():
            return len({ctx.visits(m.position) for m in moves}) > 1
        case Social():
            return any(agents_in_direction(ctx, m.direction) > 0 for m in moves)
        case RandomGuesser():
            return True
        case _:
            return False


def apply_block(block: RuleBlock, ctx: DecisionContext, moves: Sequence[Move]) -> Tuple[List[Move], Thought]:
    match block:
        case WallFollowing(mode=mode):
            thought = Thought.WALL_LEFT if mode == WallSide.LEFT else Thought.WALL_RIGHT
            if ctx.last_direction is None:
                return list(moves), thought
            order = wall_priority(ctx.last_direction, mode)
            return _keep_best(moves, lambda m: -order.index(m.direction)), thought
        case LineOfSight():
            return _line_of_sight(ctx, moves), Thought.INSIGHT
        case TowardExit():
            closer = _closer_moves(ctx, moves)
            if not closer:
                return list(moves), Thought.COMPASS
            return _keep_best(closer, lambda m: -_distance_sq(m.position, ctx.exit)), Thought.COMPASS
        case CheckMap():
            route = _route_to_exit(ctx)
            if route is None or len(route) < 2:
                return list(moves), Thought.MAP
            return _narrow(moves, [m for m in moves if m.position == route[1]]), Thought.MAP
        case Backtracking(mode=BacktrackMode.SEEK):
            return _keep_best(moves, lambda m: ctx.visits(m.position)), Thought.SEEK_REVISIT
        case Backtracking():
            return _keep_best(moves, lambda m: -ctx.visits(m.position)), Thought.AVOID_REVISIT
        case Social(mode=SocialMode.AVOID):
            return _keep_best(moves, lambda m: -agents_in_direction(ctx, m.direction)), Thought.SHY
        case Social():
            return _keep_best(moves, lambda m: agents_in_direction(ctx, m.direction)), Thought.FOLLOW
        case _:
            return list(moves), Thought.DICE


def wall_priority(last_direction: Direction, mode: WallSide) -> List[Direction]:
    """Directions from most to least preferred for a wall follower."""
    if mode == WallSide.LEFT:
        return [last_direction.turn_left(), last_direction, last_direction.turn_right(), last_direction.opposite]
    return [last_direction.turn_right(), last_direction, last_direction.turn_left(), last_direction.opposite]


def exit_visible(ctx: DecisionContext) -> bool:
    """True when the exit shares a row or column with no blocked cell between."""
    if ctx.exit is None:
        return False
    (x, y), (ex, ey) = ctx.position, ctx.exit
    if x == ex:
        return all(ctx.grid.is_open((x, cy)) for cy in range(min(y, ey) + 1, max(y, ey)))
    if y == ey:
        return all(ctx.grid.is_open((cx, y)) for cx in range(min(x, ex) + 1, max(x, ex)))
    return False


def distance_to_uncharted(ctx: DecisionContext, direction: Direction) -> int:
    """Steps to the first unvisited open cell straight ahead, or 0 if none is in view."""
    for distance in range(1, UNCHARTED_LOOKAHEAD + 1):
        pos = direction.step(ctx.position, distance)
        if not ctx.grid.is_open(pos):
            break
        if pos not in ctx.visited:
            return distance
    return 0


def agents_in_direction(ctx: DecisionContext, direction: Direction) -> int:
    """Count other live agents standing in the corridor straight ahead."""
    if len(ctx.agents) <= 1:
        return 0
    count = 0
    for distance in range(1, SOCIAL_LOOKAHEAD + 1):
        pos = direction.step(ctx.position, distance)
        if not ctx.grid.is_open(pos):
            break
        for index, other in enumerate(ctx.agents):
            if index != ctx.agent_index and other.is_live and other.position == pos:
                count += 1
    return count


def _line_of_sight(ctx: DecisionContext, moves: Sequence[Move]) -> List[Move]:
    if exit_visible(ctx):
        (x, y), (ex, ey) = ctx.position, ctx.exit
        toward = set()
        if x == ex and ey != y:
            toward.add(Direction.UP if ey < y else Direction.DOWN)
        elif y == ey and ex != x:
            toward.add(Direction.LEFT if ex < x else Direction.RIGHT)
        heading = [m for m in moves if m.direction in toward]
        if heading:
            return heading

    distances = {m: distance_to_uncharted(ctx, m.direction) for m in moves}
    positive = [d for d in distances.values() if d > 0]
    if not positive:
        return list(moves)
    nearest = min(positive)
    return [m for m in moves if distances[m] == nearest]


def _route_to_exit(ctx: DecisionContext) -> Optional[List[Position]]:
    if ctx.exit is None:
        return None
    return shortest_path(ctx.grid, ctx.position, ctx.exit)


def _distance_sq(a: Position, b: Position) -> int:
    return (a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2


def _closer_moves(ctx: DecisionContext, moves: Sequence[Move]) -> List[Move]:
    if ctx.exit is None:
        return []
    here = _distance_sq(ctx.position, ctx.exit)
    return [m for m in moves if _distance_sq(m.position, ctx.exit) < here]


def _keep_best(moves: Sequence[Move], score: Callable[[Move], float]) -> List[Move]:
    if not moves:
        return []
    scores = [score(m) for m in moves]
    top = max(scores)
    return [m for m, s in zip(moves, scores) if s == top]


def _narrow(moves: Sequence[Move], kept: List[Move]) -> List[Move]:
    return kept if kept else list(moves)
