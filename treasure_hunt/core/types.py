# treasure_hunt/core/types.py
#!/usr/bin/env python3
import copy
from dataclasses import dataclass, field
from enum import Enum
from math import inf
from typing import List, Optional, Dict, Any, Iterable

INF = inf  # distance sentinel for unreachable pairs


@dataclass(frozen=True)
class Position:
    row: int
    col: int

    @property
    def key(self) -> str:
        """Canonical map/set key."""
        return f"{self.row},{self.col}"

    @staticmethod
    def from_key(key: str) -> "Position":
        row, col = key.split(",")
        return Position(int(row), int(col))

    def neighbors(self) -> List["Position"]:
        # up, down, left, right
        return [
            Position(self.row - 1, self.col),
            Position(self.row + 1, self.col),
            Position(self.row, self.col - 1),
            Position(self.row, self.col + 1),
        ]

    def manhattan(self, other: "Position") -> int:
        return abs(self.row - other.row) + abs(self.col - other.col)

    def to_dict(self) -> Dict[str, int]:
        return {"row": self.row, "col": self.col}

    def __str__(self) -> str:
        return f"({self.row},{self.col})"


class CellType(str, Enum):
    EMPTY = "EMPTY"
    WALL = "WALL"
    START = "START"
    GOAL = "GOAL"
    TREASURE = "TREASURE"


class CellState(str, Enum):
    NORMAL = "NORMAL"
    EXPLORED = "EXPLORED"
    FRONTIER = "FRONTIER"
    PATH = "PATH"
    CURRENT_ROUTE = "CURRENT_ROUTE"
    FINAL_PATH = "FINAL_PATH"
    BACKTRACK = "BACKTRACK"


@dataclass
class Cell:
    type: CellType = CellType.EMPTY
    state: CellState = CellState.NORMAL       # owned by the front end
    animation_progress: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "state": self.state.value,
            "animationProgress": self.animation_progress,
        }


def _position_record(data: Any) -> Optional[Position]:
    if isinstance(data, dict) and "row" in data and "col" in data:
        return Position(int(data["row"]), int(data["col"]))
    return None


@dataclass
class Grid:
    """
    rows x cols maze plus denormalized start/goal/treasure references.

    Every type change goes through set_cell_type(), which keeps the
    references in agreement with the cell matrix.
    """
    rows: int
    cols: int
    cells: List[List[Cell]] = field(default_factory=list)   # [row][col]
    start: Optional[Position] = None
    goal: Optional[Position] = None
    treasures: List[Position] = field(default_factory=list)

    def __post_init__(self):
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {self.rows}x{self.cols}")
        if not self.cells:
            self.cells = [[Cell() for _ in range(self.cols)] for _ in range(self.rows)]

    # -------------------- queries --------------------

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.row < self.rows and 0 <= pos.col < self.cols

    def is_walkable(self, pos: Position) -> bool:
        if not self.in_bounds(pos):
            return False
        return self.cells[pos.row][pos.col].type != CellType.WALL

    def cell_type(self, pos: Position) -> CellType:
        if not self.in_bounds(pos):
            return CellType.WALL
        return self.cells[pos.row][pos.col].type

    def cell_state(self, pos: Position) -> CellState:
        if not self.in_bounds(pos):
            return CellState.NORMAL
        return self.cells[pos.row][pos.col].state

    def is_configured(self) -> bool:
        return self.start is not None and self.goal is not None and len(self.treasures) > 0

    def points_of_interest(self) -> List[Position]:
        """[start, *treasures, goal]; requires a configured grid."""
        if not self.is_configured():
            raise ValueError("Grid needs a start, a goal and at least one treasure")
        return [self.start, *self.treasures, self.goal]

    # -------------------- mutators --------------------

    def set_cell_type(self, pos: Position, cell_type: CellType) -> None:
        if not self.in_bounds(pos):
            raise ValueError(f"Position {pos} is outside the {self.rows}x{self.cols} grid")

        # release whatever role this cell had
        if self.start == pos:
            self.start = None
        if self.goal == pos:
            self.goal = None
        self.treasures = [t for t in self.treasures if t != pos]

        # only one start and one goal: the previous holder becomes empty
        if cell_type == CellType.START and self.start is not None:
            self.cells[self.start.row][self.start.col].type = CellType.EMPTY
            self.start = None
        if cell_type == CellType.GOAL and self.goal is not None:
            self.cells[self.goal.row][self.goal.col].type = CellType.EMPTY
            self.goal = None

        self.cells[pos.row][pos.col].type = cell_type

        if cell_type == CellType.START:
            self.start = pos
        elif cell_type == CellType.GOAL:
            self.goal = pos
        elif cell_type == CellType.TREASURE:
            self.treasures.append(pos)

    def set_cell_state(self, pos: Position, state: CellState) -> None:
        if not self.in_bounds(pos):
            raise ValueError(f"Position {pos} is outside the {self.rows}x{self.cols} grid")
        self.cells[pos.row][pos.col].state = state

    def reset_states(self) -> None:
        for row in self.cells:
            for cell in row:
                cell.state = CellState.NORMAL
                cell.animation_progress = 0.0

    def clear(self) -> None:
        self.cells = [[Cell() for _ in range(self.cols)] for _ in range(self.rows)]
        self.start = None
        self.goal = None
        self.treasures = []

    def copy(self) -> "Grid":
        return copy.deepcopy(self)

    # -------------------- exchange format --------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "cells": [[cell.to_dict() for cell in row] for row in self.cells],
            "start": self.start.to_dict() if self.start else None,
            "goal": self.goal.to_dict() if self.goal else None,
            "treasures": [t.to_dict() for t in self.treasures],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Grid":
        """
        Rebuild a grid from the exchange format.

        Missing cell fields default to EMPTY/NORMAL/0. When the start, goal or
        treasures keys are present they decide the points of interest (in the
        given order); otherwise those are read from the cell types, row-major.
        """
        if not isinstance(data, dict) or not data.get("rows") or not data.get("cols"):
            raise ValueError("Invalid grid data for deserialization")
        grid = cls(int(data["rows"]), int(data["cols"]))

        derived: Dict[CellType, List[Position]] = {
            CellType.START: [], CellType.GOAL: [], CellType.TREASURE: [],
        }
        raw_cells = data.get("cells") or []
        for r, raw_row in enumerate(raw_cells[:grid.rows]):
            for c, raw in enumerate((raw_row or [])[:grid.cols]):
                raw = raw or {}
                cell_type = CellType(raw.get("type") or CellType.EMPTY)
                cell = grid.cells[r][c]
                cell.state = CellState(raw.get("state") or CellState.NORMAL)
                cell.animation_progress = float(raw.get("animationProgress") or 0)
                if cell_type in derived:
                    derived[cell_type].append(Position(r, c))
                else:
                    cell.type = cell_type

        def apply(positions: Iterable[Position], cell_type: CellType):
            for pos in positions:
                if not grid.in_bounds(pos):
                    raise ValueError(f"{cell_type.value} record {pos} is out of bounds")
                grid.set_cell_type(pos, cell_type)

        if "start" in data:
            apply(filter(None, [_position_record(data["start"])]), CellType.START)
        else:
            apply(derived[CellType.START], CellType.START)
        if "goal" in data:
            apply(filter(None, [_position_record(data["goal"])]), CellType.GOAL)
        else:
            apply(derived[CellType.GOAL], CellType.GOAL)
        if "treasures" in data:
            records = data["treasures"] if isinstance(data["treasures"], list) else []
            apply(filter(None, map(_position_record, records)), CellType.TREASURE)
        else:
            apply(derived[CellType.TREASURE], CellType.TREASURE)
        return grid


# -------------------- results --------------------

@dataclass
class StepResult:
    status: str                   # "idle" | "running" | "done" | "no_path"
    opened: List[Position] = field(default_factory=list)
    closed: List[Position] = field(default_factory=list)
    current: Optional[Position] = None
    path: Optional[List[Position]] = None
    metrics: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PathResult:
    path: List[Position]          # source..target inclusive, empty if unreachable
    distance: float               # step count or INF
    explored_cells: List[Position] = field(default_factory=list)

    @property
    def reachable(self) -> bool:
        return self.distance != INF


@dataclass
class TreasureRoute:
    order: List[Position]
    total_distance: float
    permutations_tested: int = 0


class Phase(str, Enum):
    PREPROCESSING = "PREPROCESSING"
    OPTIMIZING = "OPTIMIZING"
    EXECUTING = "EXECUTING"
    COMPLETE = "COMPLETE"


@dataclass
class SimulationResult:
    optimal_route: List[Position]
    total_distance: float
    complete_path: List[Position]
    treasures: List[Position]
    explored_cells: List[Position]
    permutations_tested: int

    def metrics(self) -> dict:
        return {
            "total_distance": self.total_distance,
            "treasures": len(self.treasures),
            "nodes_explored": len(self.explored_cells),
            "routes_tested": self.permutations_tested,
            "path_len": len(self.complete_path),
        }
