# treasure_hunt/core/solver.py
#!/usr/bin/env python3
"""
Treasure hunt solver: PREPROCESSING -> OPTIMIZING -> EXECUTING (path assembly).

solve() works on a deep copy of the grid, so the caller's grid is never
touched, whether the solve succeeds or fails. Callbacks are invoked
synchronously from inside the solve.
"""

from typing import Callable, List, Optional, Sequence
import logging

from treasure_hunt.core.astar import ExploreCallback
from treasure_hunt.core.distance_table import DistanceTable, build_distance_table
from treasure_hunt.core.errors import ConfigurationError, InfeasibleRouteError, UnreachableError
from treasure_hunt.core.route_optimizer import RouteTestCallback, find_optimal_order
from treasure_hunt.core.types import INF, Grid, Phase, Position, SimulationResult

logger = logging.getLogger(__name__)

PhaseCallback = Callable[[str], None]

PHASE_LABELS = {
    Phase.PREPROCESSING: "Preprocessing - Finding shortest paths...",
    Phase.OPTIMIZING: "Optimizing - Finding best treasure order...",
    Phase.EXECUTING: "Executing - Following optimal route...",
}


def validate_grid(grid: Grid, max_treasures: Optional[int] = None) -> None:
    """Raise ConfigurationError if the grid cannot be solved as configured."""
    if grid.start is None:
        raise ConfigurationError("Please place a start point")
    if grid.goal is None:
        raise ConfigurationError("Please place a goal point")
    if not grid.treasures:
        raise ConfigurationError("Add at least one treasure to collect")
    if max_treasures is not None and len(grid.treasures) > max_treasures:
        raise ConfigurationError(
            f"Too many treasures (max {max_treasures})",
            detail=f"{len(grid.treasures)} placed",
        )


def assemble_path(table: DistanceTable, sequence: Sequence[Position]) -> List[Position]:
    """
    Concatenate the cached segment paths along sequence.

    Every segment but the last loses its final cell, which is the first
    cell of the next segment.
    """
    complete: List[Position] = []
    last = len(sequence) - 2
    for i in range(len(sequence) - 1):
        segment = table.path(sequence[i], sequence[i + 1])
        complete.extend(segment[:-1] if i < last else segment)
    return complete


def solve(grid: Grid,
          on_phase_change: Optional[PhaseCallback] = None,
          on_explore: Optional[ExploreCallback] = None,
          on_test_route: Optional[RouteTestCallback] = None,
          max_treasures: Optional[int] = None) -> SimulationResult:
    """
    Shortest start -> all treasures (any order) -> goal route.

    Raises ConfigurationError, UnreachableError or InfeasibleRouteError; there
    is no partial result.
    """
    snapshot = grid.copy()
    try:
        validate_grid(snapshot, max_treasures)
    except ConfigurationError as e:
        logger.warning("Solve rejected: %s", e)
        raise

    start, goal, treasures = snapshot.start, snapshot.goal, list(snapshot.treasures)
    points = [start, *treasures, goal]

    # Phase 1: all-pairs shortest paths
    _notify(on_phase_change, Phase.PREPROCESSING)
    table = build_distance_table(snapshot, points, on_explore=on_explore)

    unreachable = table.unreachable_treasures(start, goal, treasures)
    if unreachable:
        logger.warning("Unreachable treasures: %s", ", ".join(map(str, unreachable)))
        raise UnreachableError(
            "Some treasures are unreachable!",
            detail=", ".join(map(str, unreachable)),
            positions=unreachable,
        )

    # Phase 2: best treasure order
    _notify(on_phase_change, Phase.OPTIMIZING)
    route = find_optimal_order(start, goal, treasures, table, on_test_route=on_test_route)
    if route.total_distance == INF:
        logger.warning("No finite-cost ordering after %d tests", route.permutations_tested)
        raise InfeasibleRouteError("No valid route found!")

    # Phase 3: stitch the segments
    _notify(on_phase_change, Phase.EXECUTING)
    complete_path = assemble_path(table, [start, *route.order, goal])

    result = SimulationResult(
        optimal_route=route.order,
        total_distance=route.total_distance,
        complete_path=complete_path,
        treasures=treasures,
        explored_cells=table.explored_cells,
        permutations_tested=route.permutations_tested,
    )
    logger.info("Solved: distance=%s order=%s", result.total_distance,
                " ".join(map(str, result.optimal_route)))
    return result


def _notify(on_phase_change: Optional[PhaseCallback], phase: Phase) -> None:
    logger.info(PHASE_LABELS[phase])
    if on_phase_change is not None:
        on_phase_change(PHASE_LABELS[phase])
