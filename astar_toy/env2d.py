# env2d.py
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

import numpy as np

GridIndex = Tuple[int, int]  # (x, y) where x is column index, y is row index

BLOCKED_CHAR = "X"
START_CHAR = "S"
GOAL_CHAR = "G"


@dataclass
class RectObstacle:
    """
    Axis-aligned rectangle of blocked cells.

    Attributes
    ----------
    xmin, ymin, xmax, ymax : int
        Inclusive cell bounds of the rectangle.
    """

    xmin: int
    ymin: int
    xmax: int
    ymax: int

    def contains(self, x: int, y: int) -> bool:
        """
        Return True if cell (x, y) lies inside or on the boundary of this rectangle.
        """
        return (self.xmin <= x <= self.xmax) and (self.ymin <= y <= self.ymax)


class GridWorld:
    """
    Rectangular grid of free and blocked cells backed by a dense array.

    The occupancy array has shape (height, width), where:
        1 = blocked
        0 = free
    and occupancy[y, x] is the cell in column x, row y (row 0 at the top).
    """

    def __init__(self, occupancy: np.ndarray):
        """
        Parameters
        ----------
        occupancy : np.ndarray of shape (H, W)
            Binary grid. Any non-zero value is treated as blocked.
        """
        occ = np.asarray(occupancy)
        if occ.ndim != 2:
            raise ValueError(f"Occupancy grid must be 2D, got shape {occ.shape}")
        if occ.shape[0] == 0 or occ.shape[1] == 0:
            raise ValueError("Occupancy grid must have at least one cell")
        self.occupancy = (occ != 0).astype(np.uint8)

    @classmethod
    def empty(cls, width: int, height: int) -> "GridWorld":
        return cls(np.zeros((height, width), dtype=np.uint8))

    @classmethod
    def from_obstacles(
        cls,
        width: int,
        height: int,
        obstacles: Iterable[RectObstacle],
    ) -> "GridWorld":
        """
        Rasterize rectangles into a width x height grid.

        Cells of a rectangle that fall outside the grid are ignored.
        """
        obstacles = list(obstacles)
        occ = np.zeros((height, width), dtype=np.uint8)

        for y in range(height):
            for x in range(width):
                if any(obstacle.contains(x, y) for obstacle in obstacles):
                    occ[y, x] = 1
        return cls(occ)

    @classmethod
    def random_world(
        cls,
        width: int = 32,
        height: int = 32,
        num_obstacles: int = 6,
        min_size: int = 2,
        max_size: int = 8,
        seed: Optional[int] = None,
    ) -> "GridWorld":
        """
        Create a random world with a few random rectangles.

        Each rectangle:
          - width and height are sampled in [min_size, max_size] cells
          - position is chosen so the rectangle starts inside the grid
        """
        rng = np.random.default_rng(seed)

        obstacles: List[RectObstacle] = []
        for _ in range(num_obstacles):
            w = int(rng.integers(min_size, max_size + 1))
            h = int(rng.integers(min_size, max_size + 1))
            xmin = int(rng.integers(0, width))
            ymin = int(rng.integers(0, height))
            obstacles.append(RectObstacle(xmin, ymin, xmin + w - 1, ymin + h - 1))

        return cls.from_obstacles(width, height, obstacles)

    def width(self) -> int:
        return int(self.occupancy.shape[1])

    def height(self) -> int:
        return int(self.occupancy.shape[0])

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width() and 0 <= y < self.height()

    def is_blocked(self, x: int, y: int) -> bool:
        return bool(self.occupancy[y, x])

    def is_free(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and not self.is_blocked(x, y)

    def get_occupancy_grid(self) -> np.ndarray:
        """
        Return a copy of the occupancy grid (values 0 or 1, shape (H, W)).
        """
        return self.occupancy.copy()

    def free_cells(self) -> List[GridIndex]:
        """
        All free cells in row-major order.
        """
        ys, xs = np.nonzero(self.occupancy == 0)
        return [(int(x), int(y)) for y, x in zip(ys, xs)]

    def sample_free_cell(
        self,
        rng: Optional[np.random.Generator] = None,
        max_tries: int = 1000,
    ) -> GridIndex:
        """
        Randomly sample a free cell.

        Algorithm:
          - Try up to max_tries times:
              * sample x, y uniformly over the grid
              * if free, return (x, y)
          - If we fail max_tries times in a row, raise RuntimeError.
        """
        if rng is None:
            rng = np.random.default_rng()
        for _ in range(max_tries):
            x = int(rng.integers(0, self.width()))
            y = int(rng.integers(0, self.height()))
            if not self.is_blocked(x, y):
                return (x, y)
        raise RuntimeError("Failed to sample a free cell within max_tries.")


class SparseGrid:
    """
    Grid that only stores the coordinates of its blocked cells.

    Useful for large, mostly open maps where a dense array is wasteful.
    """

    def __init__(self, width: int, height: int, blocked: Iterable[GridIndex] = ()):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid must have at least one cell, got {width}x{height}")
        self._width = width
        self._height = height
        self.blocked: FrozenSet[GridIndex] = frozenset(
            (int(x), int(y)) for x, y in blocked
        )

    def width(self) -> int:
        return self._width

    def height(self) -> int:
        return self._height

    def is_blocked(self, x: int, y: int) -> bool:
        return (x, y) in self.blocked


def parse_text_map(rows: Sequence[str]) -> Tuple[GridWorld, GridIndex, GridIndex]:
    """
    Build a grid from a text fixture, one character per cell.

    Convention:
      - 'X' = blocked
      - 'S' = start (free)
      - 'G' = goal (free)
      - anything else = free
    Rows are listed top to bottom, so rows[y][x] is cell (x, y).

    Returns
    -------
    world, start, goal
    """
    lines = [row.rstrip("\r\n") for row in rows]
    lines = [row for row in lines if row]
    if not lines:
        raise ValueError("Text map is empty")

    width = len(lines[0])
    occ = np.zeros((len(lines), width), dtype=np.uint8)
    start: Optional[GridIndex] = None
    goal: Optional[GridIndex] = None

    for y, row in enumerate(lines):
        if len(row) != width:
            raise ValueError(
                f"Row {y} has {len(row)} cells, expected {width}"
            )
        for x, char in enumerate(row):
            if char == BLOCKED_CHAR:
                occ[y, x] = 1
            elif char == START_CHAR:
                if start is not None:
                    raise ValueError(f"Duplicate start at {(x, y)}, first at {start}")
                start = (x, y)
            elif char == GOAL_CHAR:
                if goal is not None:
                    raise ValueError(f"Duplicate goal at {(x, y)}, first at {goal}")
                goal = (x, y)

    if start is None:
        raise ValueError(f"Text map has no start cell '{START_CHAR}'")
    if goal is None:
        raise ValueError(f"Text map has no goal cell '{GOAL_CHAR}'")

    return GridWorld(occ), start, goal


def load_text_map(path: str) -> Tuple[GridWorld, GridIndex, GridIndex]:
    with open(path, "r", encoding="utf-8") as f:
        return parse_text_map(f.readlines())
