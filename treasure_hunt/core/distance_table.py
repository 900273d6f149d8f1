# treasure_hunt/core/distance_table.py
#!/usr/bin/env python3
"""All-pairs shortest paths between the points of interest of a grid."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging

from treasure_hunt.core.astar import ExploreCallback, search
from treasure_hunt.core.types import INF, Grid, Position

logger = logging.getLogger(__name__)


@dataclass
class Segment:
    distance: float
    path: List[Position] = field(default_factory=list)


@dataclass
class DistanceTable:
    entries: Dict[str, Dict[str, Segment]] = field(default_factory=dict)  # from_key -> to_key -> Segment
    explored_cells: List[Position] = field(default_factory=list)
    searches_run: int = 0

    def set(self, a: Position, b: Position, distance: float, path: Sequence[Position] = ()) -> None:
        self.entries.setdefault(a.key, {})[b.key] = Segment(distance, list(path))

    def segment(self, a: Position, b: Position) -> Optional[Segment]:
        return self.entries.get(a.key, {}).get(b.key)

    def distance(self, a: Position, b: Position) -> float:
        seg = self.segment(a, b)
        return INF if seg is None else seg.distance

    def path(self, a: Position, b: Position) -> List[Position]:
        seg = self.segment(a, b)
        return [] if seg is None else seg.path

    def unreachable_treasures(self, start: Position, goal: Position,
                              treasures: Sequence[Position]) -> List[Position]:
        """Treasures that cannot be reached from start or cannot reach goal."""
        return [t for t in treasures
                if self.distance(start, t) == INF or self.distance(t, goal) == INF]


def build_distance_table(grid: Grid, points: Sequence[Position],
                         on_explore: Optional[ExploreCallback] = None) -> DistanceTable:
    """
    Run A* for every ordered pair (i, j), i != j, of points.

    Each pair is searched independently. Self pairs get distance 0 and an
    empty path without searching. Unreachable pairs are stored with INF.
    """
    table = DistanceTable()
    for a in points:
        for b in points:
            if a == b:
                table.set(a, b, 0, [])
                continue
            result = search(grid, a, b, on_explore=on_explore)
            table.searches_run += 1
            table.set(a, b, result.distance, result.path)
            table.explored_cells.extend(result.explored_cells)
            if not result.reachable:
                logger.debug("No path %s -> %s", a, b)
    logger.info("Distance table: %d points, %d searches, %d cells explored",
                len(points), table.searches_run, len(table.explored_cells))
    return table
