from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from treasure_hunt.core.types import CellType, Grid, Position  # noqa: E402

_SYMBOLS = {
    "#": CellType.WALL,
    "S": CellType.START,
    "G": CellType.GOAL,
    "T": CellType.TREASURE,
}


def grid_from_layout(layout: Sequence[str]) -> Grid:
    """S start, G goal, T treasure (row-major order), # wall, . empty."""
    grid = Grid(len(layout), len(layout[0]))
    for r, line in enumerate(layout):
        assert len(line) == grid.cols, f"ragged layout row {r}"
        for c, ch in enumerate(line):
            if ch in _SYMBOLS:
                grid.set_cell_type(Position(r, c), _SYMBOLS[ch])
    return grid


@pytest.fixture
def build_grid() -> Callable[[Sequence[str]], Grid]:
    return grid_from_layout


@pytest.fixture
def maps_dir() -> Path:
    return PROJECT_ROOT / "treasure_hunt" / "maps"
