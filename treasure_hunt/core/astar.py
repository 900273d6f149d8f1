# treasure_hunt/core/astar.py
#!/usr/bin/env python3
"""
A* over a 4-connected grid, one expansion per step() so a viewer can animate it.

Algorithm API:
- init(grid, source, target) - reset() - step() -> StepResult - result() -> PathResult

Heuristic:
- Manhattan distance, admissible and consistent for unit-cost 4-connected moves.

Tie-breaking in the PQ:
- (f, h, -g, seq, cell): lower f, then lower h, then deeper g, then FIFO by seq.

Stale frontier entries are not removed eagerly; a pop of an already closed
cell is skipped.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple
import heapq
import logging

from treasure_hunt.core.types import INF, Grid, PathResult, Position, StepResult

logger = logging.getLogger(__name__)

ExploreCallback = Callable[[Position], None]


@dataclass
class AStarAlgo:
    name: str = "A*"
    on_explore: Optional[ExploreCallback] = None

    # Internal state
    grid: Optional[Grid] = None
    source: Optional[Position] = None
    target: Optional[Position] = None
    open_pq: List[Tuple[int, int, int, int, Position]] = field(default_factory=list)  # (f, h, -g, seq, cell)
    open_set: Set[str] = field(default_factory=set)
    closed_set: Set[str] = field(default_factory=set)
    g: Dict[str, int] = field(default_factory=dict)
    parent: Dict[str, Position] = field(default_factory=dict)
    explored: List[Position] = field(default_factory=list)
    path: List[Position] = field(default_factory=list)
    popped_count: int = 0
    done: bool = False
    no_path: bool = False
    seq: int = 0  # monotonic counter for PQ stability

    # -------------------- lifecycle --------------------

    def init(self, grid: Grid, source: Position, target: Position) -> None:
        self.grid = grid
        self.source = source
        self.target = target
        self.reset()

    def reset(self) -> None:
        """Clear all state and seed with the source node."""
        if self.grid is None:
            return
        self.open_pq.clear()
        self.open_set.clear()
        self.closed_set.clear()
        self.g.clear()
        self.parent.clear()
        self.explored = []
        self.path = []
        self.popped_count = 0
        self.done = False
        self.no_path = False
        self.seq = 0

        s = self.source
        self.g[s.key] = 0
        h0 = self._h(s)
        heapq.heappush(self.open_pq, (h0, h0, 0, self._bump(), s))
        self.open_set.add(s.key)

    # -------------------- helpers --------------------

    def _bump(self) -> int:
        self.seq += 1
        return self.seq

    def _neighbors4(self, c: Position) -> List[Position]:
        """Walkable, in-bounds neighbors of c."""
        return [n for n in c.neighbors() if self.grid.is_walkable(n)]

    def _h(self, c: Position) -> int:
        return c.manhattan(self.target)

    def _reconstruct_path(self, end: Position) -> List[Position]:
        path: List[Position] = [end]
        cur = end
        while cur.key in self.parent:
            cur = self.parent[cur.key]
            path.append(cur)
        path.reverse()
        return path

    # -------------------- main stepping logic --------------------

    def step(self) -> StepResult:
        """
        Run ONE expansion:
          - Pop the lowest-f node, skipping it if already closed.
          - Close it; if it is the target, reconstruct and finish.
          - Else relax its neighbors with unit edge cost.
        """
        if self.grid is None:
            return StepResult(status="idle", metrics={"algo": self.name})

        if self.done:
            return StepResult(status="done", path=self.path,
                              metrics=self._metrics(path_len=len(self.path)))

        if self.no_path:
            return StepResult(status="no_path", metrics=self._metrics())

        if not self.open_pq:
            self.no_path = True
            return StepResult(status="no_path", metrics=self._metrics())

        _, _, _, _, u = heapq.heappop(self.open_pq)
        if u.key in self.closed_set:
            return StepResult(status="running", current=u, metrics=self._metrics())

        # Finalize u
        self.popped_count += 1
        self.open_set.discard(u.key)
        self.closed_set.add(u.key)
        if u != self.source and u != self.target:
            self.explored.append(u)
            if self.on_explore is not None:
                self.on_explore(u)

        if u == self.target:
            self.done = True
            self.path = self._reconstruct_path(u)
            return StepResult(status="done", closed=[u], current=u, path=self.path,
                              metrics=self._metrics(path_len=len(self.path)))

        opened_now: List[Position] = []
        g_u = self.g[u.key]
        for v in self._neighbors4(u):
            if v.key in self.closed_set:
                continue
            alt = g_u + 1
            if alt < self.g.get(v.key, INF):
                self.g[v.key] = alt
                self.parent[v.key] = u
                h_v = self._h(v)
                heapq.heappush(self.open_pq, (alt + h_v, h_v, -alt, self._bump(), v))
                if v.key not in self.open_set:
                    self.open_set.add(v.key)
                    opened_now.append(v)

        return StepResult(status="running", opened=opened_now, closed=[u], current=u,
                          metrics=self._metrics())

    def result(self) -> PathResult:
        """Outcome so far; distance is INF until the target has been closed."""
        if self.done:
            return PathResult(list(self.path), self.g[self.target.key], list(self.explored))
        return PathResult([], INF, list(self.explored))

    # -------------------- metrics --------------------

    def _metrics(self, path_len: int = 0) -> dict:
        return {
            "algo": self.name,
            "popped": self.popped_count,
            "open_size": len(self.open_set),
            "closed_count": len(self.closed_set),
            "path_len": path_len,
        }


def search(grid: Grid, source: Position, target: Position,
           on_explore: Optional[ExploreCallback] = None) -> PathResult:
    """Shortest walkable path from source to target (empty path and INF if none)."""
    algo = AStarAlgo(on_explore=on_explore)
    algo.init(grid, source, target)
    while True:
        res = algo.step()
        if res.status in ("done", "no_path"):
            break
    result = algo.result()
    logger.debug("A* %s -> %s: distance=%s explored=%d", source, target,
                 result.distance, len(result.explored_cells))
    return result
