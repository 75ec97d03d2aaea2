from typing import List, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
from env2d import GridWorld

GridIndex = Tuple[int, int]


def _as_array(grid: Union[GridWorld, np.ndarray]) -> np.ndarray:
    if isinstance(grid, GridWorld):
        return grid.get_occupancy_grid()
    return np.asarray(grid)


def show_occupancy_grid(grid: Union[GridWorld, np.ndarray], ax=None):
    """
    Visualize occupancy grid (H, W) with 1=blocked in black.

    Row 0 is drawn at the top, matching the (x, y) cell convention.
    """
    occ = _as_array(grid)
    if ax is None:
        _, ax = plt.subplots()
    ax.imshow(occ, cmap="gray_r", origin="upper", vmin=0, vmax=1)
    ax.set_title("Occupancy Grid")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    return ax


def show_path_on_grid(
    grid: Union[GridWorld, np.ndarray],
    path: Optional[Sequence[GridIndex]],
    ax=None,
    color="red",
    label="Path",
):
    """
    Overlay a cell path on the grid visualization.

    Cell (x, y) is drawn at pixel center (x, y). A missing or empty path
    (for example a NotFound result) only draws the grid and says so in the
    title.
    """
    ax = show_occupancy_grid(grid, ax=ax)

    points: List[GridIndex] = list(path) if path else []
    if not points:
        ax.set_title(f"{label}: no path")
        return ax

    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    ax.plot(xs, ys, color=color, linewidth=2, label=label)
    ax.scatter(xs[0], ys[0], c="green", s=30, label="Start")
    ax.scatter(xs[-1], ys[-1], c="blue", s=30, label="Goal")
    ax.set_title(f"{label} ({len(points) - 1} moves)")
    ax.legend()
    return ax
