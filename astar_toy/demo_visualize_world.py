# demo_visualize_world.py
"""
Run A* on a text map or a random world and show the result.

Examples:
    python demo_visualize_world.py
    python demo_visualize_world.py --map maze.txt --plot
    python demo_visualize_world.py --random --width 48 --height 32 --seed 3
"""

from __future__ import annotations

import argparse
import logging
import sys

import matplotlib.pyplot as plt
import numpy as np
from env2d import GridWorld, load_text_map, parse_text_map
from grid_planner import InvalidInputError, NotFound, PathFinder
from visualize_world import show_path_on_grid

DEFAULT_MAP = [
    "G-----",
    "XXXXX-",
    "S-X-X-",
    "--X-X-",
    "--X-X-",
    "------",
]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Grid A* demo.")
    parser.add_argument(
        "--map",
        type=str,
        default=None,
        help="Text map file ('X' blocked, 'S' start, 'G' goal). Defaults to a built-in 6x6 map.",
    )
    parser.add_argument(
        "--random",
        action="store_true",
        help="Plan between two random free cells of a random world instead.",
    )
    parser.add_argument("--width", type=int, default=32, help="Random world width.")
    parser.add_argument("--height", type=int, default=32, help="Random world height.")
    parser.add_argument(
        "--obstacles",
        type=int,
        default=6,
        help="Number of rectangles in the random world.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for reproducibility.",
    )
    parser.add_argument(
        "--plot",
        action="store_true",
        help="Open a matplotlib window with the path.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (DEBUG shows search statistics).",
    )
    return parser.parse_args(argv)


def load_world(args: argparse.Namespace):
    if args.random:
        world = GridWorld.random_world(
            width=args.width,
            height=args.height,
            num_obstacles=args.obstacles,
            seed=args.seed,
        )
        rng = np.random.default_rng(args.seed)
        return world, world.sample_free_cell(rng), world.sample_free_cell(rng)
    if args.map:
        return load_text_map(args.map)
    return parse_text_map(DEFAULT_MAP)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        world, start, goal = load_world(args)
    except (OSError, ValueError, RuntimeError) as exc:
        print(f"Could not build map: {exc}", file=sys.stderr)
        return 2

    print("Grid:", f"{world.width()}x{world.height()}")
    print("Start:", start)
    print("Goal:", goal)

    try:
        result = PathFinder().search(world, start, goal)
    except InvalidInputError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2

    if isinstance(result, NotFound):
        print("No path found.")
    else:
        print("Path length (moves):", len(result) - 1)
        print("Path:", " -> ".join(f"({x},{y})" for x, y in result))

    if args.plot:
        show_path_on_grid(world, result, label="A* Path")
        plt.show()

    return 0


if __name__ == "__main__":
    sys.exit(main())
