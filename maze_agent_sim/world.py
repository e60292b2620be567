from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Iterable, Iterator, List, Tuple

Position = Tuple[int, int]


class CellType(IntEnum):
    BLOCKED = 0
    OPEN = 1


class Direction(Enum):
    UP = "up"
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"

    @property
    def delta(self) -> Tuple[int, int]:
        return _DELTAS[self]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    def turn_right(self) -> "Direction":
        return _CLOCKWISE[(_CLOCKWISE.index(self) + 1) % 4]

    def turn_left(self) -> "Direction":
        return _CLOCKWISE[(_CLOCKWISE.index(self) - 1) % 4]

    def step(self, pos: Position, distance: int = 1) -> Position:
        dx, dy = self.delta
        return pos[0] + dx * distance, pos[1] + dy * distance


_DELTAS = {
    Direction.UP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
}
_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}
_CLOCKWISE = (Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT)


@dataclass
class MazeGrid:
    """Rectangular cell matrix; every cell starts blocked.

    Dimensions are fixed at construction and only change through
    ``resize_and_reset``. Reads outside the grid report ``BLOCKED``; writes
    outside it raise ``IndexError``.
    """

    width: int
    height: int
    cells: List[List[CellType]] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError("Maze grid must be at least 1x1.")
        if not self.cells:
            self.cells = _blank(self.width, self.height)
        elif len(self.cells) != self.height or any(len(row) != self.width for row in self.cells):
            raise ValueError("Cell rows do not match grid dimensions.")

    @staticmethod
    def from_rows(rows: Iterable[Iterable[int]]) -> "MazeGrid":
        cells = [[CellType(v) for v in row] for row in rows]
        if not cells:
            raise ValueError("Maze grid needs at least one row.")
        return MazeGrid(width=len(cells[0]), height=len(cells), cells=cells)

    @staticmethod
    def parse(text: str) -> "MazeGrid":
        """Build a grid from lines where ``.`` is open and ``#`` is blocked."""
        lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
        return MazeGrid.from_rows([[1 if ch == "." else 0 for ch in line] for line in lines])

    def resize_and_reset(self, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError("Maze grid must be at least 1x1.")
        self.width = width
        self.height = height
        self.cells = _blank(width, height)

    def copy(self) -> "MazeGrid":
        return MazeGrid(width=self.width, height=self.height, cells=[list(row) for row in self.cells])

    def rows(self) -> List[List[int]]:
        return [[int(c) for c in row] for row in self.cells]

    def in_bounds(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, pos: Position) -> CellType:
        if not self.in_bounds(pos):
            return CellType.BLOCKED
        x, y = pos
        return self.cells[y][x]

    def is_open(self, pos: Position) -> bool:
        return self.cell(pos) == CellType.OPEN

    def is_on_perimeter(self, pos: Position) -> bool:
        x, y = pos
        return x == 0 or y == 0 or x == self.width - 1 or y == self.height - 1

    def open_cells(self) -> Iterator[Position]:
        for y, row in enumerate(self.cells):
            for x, c in enumerate(row):
                if c == CellType.OPEN:
                    yield (x, y)

    def count_open(self) -> int:
        return sum(1 for _ in self.open_cells())

    def count_open_perimeter(self) -> int:
        return sum(1 for pos in self.open_cells() if self.is_on_perimeter(pos))

    def can_carve(self, pos: Position) -> bool:
        if self.is_open(pos):
            return True
        if self.is_on_perimeter(pos) and self.count_open_perimeter() >= 2:
            return False
        x, y = pos
        # the four 2x2 windows that contain pos, keyed by their top-left corner
        for left, top in ((x - 1, y - 1), (x, y - 1), (x - 1, y), (x, y)):
            if self._window_would_fill(left, top, pos):
                return False
        return True

    def carve(self, pos: Position) -> None:
        if not self.in_bounds(pos):
            raise IndexError(f"Cannot carve outside the grid: {pos}")
        x, y = pos
        self.cells[y][x] = CellType.OPEN

    def _window_would_fill(self, left: int, top: int, pos: Position) -> bool:
        if left < 0 or top < 0 or left + 1 >= self.width or top + 1 >= self.height:
            return False
        for cy in (top, top + 1):
            for cx in (left, left + 1):
                if (cx, cy) != pos and self.cells[cy][cx] != CellType.OPEN:
                    return False
        return True


def _blank(width: int, height: int) -> List[List[CellType]]:
    return [[CellType.BLOCKED for _ in range(width)] for _ in range(height)]
