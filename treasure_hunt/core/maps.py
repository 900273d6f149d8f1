# treasure_hunt/core/maps.py
#!/usr/bin/env python3
"""Map files (JSON exchange format) and random map generation."""

from collections import deque
from pathlib import Path
from typing import Optional, Union
import json
import logging
import random

from treasure_hunt.core import settings
from treasure_hunt.core.types import CellType, Grid, Position

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# shipped as package data next to core/ and app/
SAMPLE_MAP_DIR = Path(__file__).resolve().parents[1] / "maps"
SAMPLE_MAPS = {
    "01_open_field":   SAMPLE_MAP_DIR / "01_open_field.json",
    "02_wall_detour":  SAMPLE_MAP_DIR / "02_wall_detour.json",
    "03_four_chests":  SAMPLE_MAP_DIR / "03_four_chests.json",
}


# ---------- files ----------

def load_map(path: PathLike) -> Grid:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    grid = Grid.from_dict(data)
    logger.debug("Loaded %s: %dx%d, %d treasures", path, grid.rows, grid.cols, len(grid.treasures))
    return grid


def save_map(grid: Grid, path: PathLike) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(grid.to_dict(), f, indent=2)


# ---------- generation ----------

def can_reach(grid: Grid, a: Position, b: Position) -> bool:
    """Breadth-first flood fill from a."""
    visited = {a.key}
    queue = deque([a])
    while queue:
        current = queue.popleft()
        if current == b:
            return True
        for n in current.neighbors():
            if n.key not in visited and grid.is_walkable(n):
                visited.add(n.key)
                queue.append(n)
    return False


def generate_random_map(rows: int = settings.GRID_SIZE, cols: int = settings.GRID_SIZE,
                        rng: Optional[random.Random] = None,
                        wall_density: float = settings.WALL_DENSITY) -> Grid:
    """
    Start top-left, goal bottom-right, random interior walls, 2-3 treasures.

    The border ring stays open so start and goal always connect; treasures
    are only placed on cells reachable from start.
    """
    if rows < 3 or cols < 3:
        raise ValueError("Random maps need at least 3x3 cells")
    rng = rng or random.Random()
    grid = Grid(rows, cols)
    grid.set_cell_type(Position(0, 0), CellType.START)
    grid.set_cell_type(Position(rows - 1, cols - 1), CellType.GOAL)

    for r in range(1, rows - 1):
        for c in range(1, cols - 1):
            if rng.random() < wall_density:
                grid.set_cell_type(Position(r, c), CellType.WALL)

    wanted = 2 + rng.randrange(2)
    placed = 0
    for _ in range(100):
        if placed >= wanted:
            break
        pos = Position(rng.randrange(1, rows - 1), rng.randrange(1, cols - 1))
        if grid.cell_type(pos) != CellType.EMPTY or not can_reach(grid, grid.start, pos):
            continue
        grid.set_cell_type(pos, CellType.TREASURE)
        placed += 1

    if placed == 0:
        # interior fully walled off: fall back to the open border
        grid.set_cell_type(Position(0, cols - 1), CellType.TREASURE)
    logger.debug("Random map %dx%d with %d treasures", rows, cols, len(grid.treasures))
    return grid
