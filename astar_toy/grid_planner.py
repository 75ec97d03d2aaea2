import heapq
import logging
import math
import numbers
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple, Union

import numpy as np
from env2d import GridWorld

logger = logging.getLogger(__name__)

GridIndex = Tuple[int, int]  # (x, y) where x is column index, y is row index
Path = List[GridIndex]


class GridAdapter(Protocol):
    """
    The only grid capabilities the planner relies on.
    """

    def width(self) -> int: ...

    def height(self) -> int: ...

    def is_blocked(self, x: int, y: int) -> bool: ...


class InvalidInputError(ValueError):
    """
    Start or goal is outside the grid or on a blocked cell.
    """


@dataclass(frozen=True)
class NotFound:
    """
    Search finished without reaching the goal.

    Attributes
    ----------
    expanded : int
        Number of cells moved to the closed set before giving up.
    """

    expanded: int = 0

    def __bool__(self) -> bool:
        return False


SearchResult = Union[Path, NotFound]


@dataclass
class Cell:
    """
    Per-search bookkeeping for one grid coordinate.

    The predecessor is stored as a coordinate so that records never
    reference each other.
    """

    x: int
    y: int
    blocked: bool
    g: float = math.inf
    f: float = math.inf
    parent: Optional[GridIndex] = None


def heuristic(a: GridIndex, b: GridIndex) -> int:
    """
    Manhattan distance; admissible and consistent for 4-connected unit moves.
    """
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


class PathFinder:
    """
    A* on a 4-connected grid with unit move cost.

    Holds no state between calls: every search allocates its own cell arena,
    so one instance may serve concurrent searches over read-only grids.
    """

    # left, right, up, down
    NEIGHBOR_OFFSETS: Tuple[GridIndex, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))

    def search(self, grid: GridAdapter, start: GridIndex, goal: GridIndex) -> SearchResult:
        """
        Find a minimum-length orthogonal path from start to goal.

        Parameters
        ----------
        grid : GridAdapter
            Anything exposing width(), height() and is_blocked(x, y).
        start, goal : (x, y) tuples
            Must be in bounds and free.

        Returns
        -------
        path : list of (x, y) from start to goal (inclusive), or NotFound if
            the goal cannot be reached through free cells.

        Raises
        ------
        InvalidInputError
            If start or goal is out of bounds or blocked.
        """
        width, height = grid.width(), grid.height()
        start = self._validate(grid, width, height, start, "start")
        goal = self._validate(grid, width, height, goal, "goal")

        cells = [
            Cell(x=x, y=y, blocked=bool(grid.is_blocked(x, y)))
            for y in range(height)
            for x in range(width)
        ]

        def cell_at(idx: GridIndex) -> Cell:
            return cells[idx[1] * width + idx[0]]

        first = cell_at(start)
        first.g = 0
        first.f = heuristic(start, goal)

        # Heap entries are (f, discovery order, cell). Among equal f the cell
        # discovered first wins, which is what a linear scan over an
        # insertion-ordered open list would pick. Relaxed cells get a fresh
        # entry with their original discovery order; stale ones are skipped.
        discovered = {start: 0}
        open_heap: List[Tuple[float, int, GridIndex]] = [(first.f, 0, start)]
        closed = set()

        while open_heap:
            f, _, current = heapq.heappop(open_heap)
            if current in closed:
                continue
            cur = cell_at(current)
            if f != cur.f:
                continue

            if current == goal:
                path = self._reconstruct_path(cell_at, goal)
                logger.debug(
                    "Path %s -> %s found: %d cells, %d expanded",
                    start,
                    goal,
                    len(path),
                    len(closed),
                )
                return path

            closed.add(current)

            for nb in self._neighbors(cell_at, width, height, cur):
                if nb in closed:
                    continue

                # Cost between adjacent cells (4-connected) is 1.
                tentative_g = cur.g + 1
                if nb not in discovered:
                    discovered[nb] = len(discovered)

                nb_cell = cell_at(nb)
                if tentative_g >= nb_cell.g:
                    continue

                nb_cell.parent = current
                nb_cell.g = tentative_g
                nb_cell.f = tentative_g + heuristic(nb, goal)
                heapq.heappush(open_heap, (nb_cell.f, discovered[nb], nb))

        logger.debug(
            "No path %s -> %s after expanding %d cells", start, goal, len(closed)
        )
        return NotFound(expanded=len(closed))

    @staticmethod
    def _validate(
        grid: GridAdapter,
        width: int,
        height: int,
        idx: Sequence[int],
        name: str,
    ) -> GridIndex:
        try:
            x, y = idx
        except (TypeError, ValueError):
            raise InvalidInputError(
                f"{name} must be an (x, y) pair, got {idx!r}"
            ) from None
        if not (isinstance(x, numbers.Integral) and isinstance(y, numbers.Integral)):
            raise InvalidInputError(
                f"{name} must hold integer cell indices, got {idx!r}"
            )
        x, y = int(x), int(y)
        if not (0 <= x < width and 0 <= y < height):
            raise InvalidInputError(
                f"{name} {(x, y)} is outside the {width}x{height} grid"
            )
        if grid.is_blocked(x, y):
            raise InvalidInputError(f"{name} {(x, y)} is a blocked cell")
        return (x, y)

    def _neighbors(self, cell_at, width: int, height: int, cell: Cell) -> List[GridIndex]:
        """
        In-bounds, free 4-connected neighbors in left, right, up, down order.
        """
        result: List[GridIndex] = []
        for dx, dy in self.NEIGHBOR_OFFSETS:
            nx, ny = cell.x + dx, cell.y + dy
            if 0 <= nx < width and 0 <= ny < height and not cell_at((nx, ny)).blocked:
                result.append((nx, ny))
        return result

    @staticmethod
    def _reconstruct_path(cell_at, goal: GridIndex) -> Path:
        # Walk predecessors from goal back to start.
        path: Path = [goal]
        parent = cell_at(goal).parent
        while parent is not None:
            path.append(parent)
            parent = cell_at(parent).parent
        path.reverse()
        return path


def astar_on_grid(
    occ: np.ndarray,
    start: GridIndex,
    goal: GridIndex,
) -> Optional[Path]:
    """
    Run A* on a 2D occupancy grid.

    Parameters
    ----------
    occ : np.ndarray of shape (H, W)
        Binary grid. 1 = occupied, 0 = free.
    start, goal : (x, y) tuples
        Start and goal grid indices.

    Returns
    -------
    path : list of (x, y) from start to goal (inclusive),
        or None if no path exists.
    """
    result = PathFinder().search(GridWorld(occ), start, goal)
    if isinstance(result, NotFound):
        return None
    return result


def plan_many(
    grid: GridAdapter,
    requests: Sequence[Tuple[GridIndex, GridIndex]],
    num_threads: int = 4,
) -> List[SearchResult]:
    """
    Run independent (start, goal) searches on one grid using a thread pool.

    Results come back in request order. The grid is only read, and every
    search owns its own cell records, so no locking is needed.
    An InvalidInputError from any request propagates to the caller.
    """
    finder = PathFinder()

    def run(request: Tuple[GridIndex, GridIndex]) -> SearchResult:
        start, goal = request
        return finder.search(grid, start, goal)

    with ThreadPoolExecutor(max_workers=num_threads) as executor:
        results = list(executor.map(run, requests))

    logger.debug(
        "Planned %d requests, %d unreachable",
        len(results),
        sum(1 for r in results if isinstance(r, NotFound)),
    )
    return results
