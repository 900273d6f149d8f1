# treasure_hunt/core/route_optimizer.py
#!/usr/bin/env python3
"""
Exact treasure ordering by depth-first backtracking.

Explores up to n! orderings for n treasures; the caller is expected to cap n.
Treasures are tried in the order they are given, and a later ordering only
replaces the best one if strictly shorter, so among equal-cost orderings the
first one generated wins.
"""

from typing import Callable, List, Optional, Sequence, Tuple
import logging

from treasure_hunt.core.distance_table import DistanceTable
from treasure_hunt.core.types import INF, Position, TreasureRoute

logger = logging.getLogger(__name__)

RouteTestCallback = Callable[[List[Position], float, bool], None]


def find_optimal_order(start: Position, goal: Position, treasures: Sequence[Position],
                       table: DistanceTable,
                       on_test_route: Optional[RouteTestCallback] = None) -> TreasureRoute:
    best_order: List[Position] = []
    min_distance = INF
    tested = 0

    def backtrack(current: Position, visited: Tuple[Position, ...],
                  unvisited: Tuple[Position, ...], cost: float) -> None:
        nonlocal best_order, min_distance, tested

        if not unvisited:
            final_cost = cost + table.distance(current, goal)
            tested += 1
            is_best = final_cost < min_distance
            if is_best:
                min_distance = final_cost
                best_order = list(visited)
            if on_test_route is not None:
                on_test_route(list(visited), final_cost, is_best)
            return

        for i, treasure in enumerate(unvisited):
            step = table.distance(current, treasure)
            if step == INF:
                continue  # prune, not counted
            backtrack(treasure, visited + (treasure,),
                      unvisited[:i] + unvisited[i + 1:], cost + step)

    backtrack(start, (), tuple(treasures), 0)
    logger.info("Optimizer: %d orderings tested, best distance %s", tested, min_distance)
    return TreasureRoute(order=best_order, total_distance=min_distance, permutations_tested=tested)
