import itertools
import random

import pytest

from treasure_hunt.core.distance_table import DistanceTable, build_distance_table
from treasure_hunt.core.route_optimizer import find_optimal_order
from treasure_hunt.core.types import INF, CellType, Grid, Position


def brute_force(start, goal, treasures, table):
    best = INF
    for perm in itertools.permutations(treasures):
        seq = [start, *perm, goal]
        best = min(best, sum(table.distance(a, b) for a, b in zip(seq, seq[1:])))
    return best


def table_from_matrix(points, matrix):
    table = DistanceTable()
    for i, a in enumerate(points):
        for j, b in enumerate(points):
            table.set(a, b, matrix[i][j])
    return table


@pytest.mark.parametrize("seed", range(20))
def test_matches_brute_force_on_random_tables(seed):
    rng = random.Random(seed)
    k = rng.randint(1, 5)
    points = [Position(0, i) for i in range(k + 2)]
    matrix = [[0 if i == j else (INF if rng.random() < 0.15 else rng.randint(1, 20))
               for j in range(k + 2)] for i in range(k + 2)]
    start, treasures, goal = points[0], points[1:-1], points[-1]
    table = table_from_matrix(points, matrix)

    route = find_optimal_order(start, goal, treasures, table)
    expected = brute_force(start, goal, treasures, table)
    assert route.total_distance == expected
    if expected < INF:
        assert sorted(p.key for p in route.order) == sorted(p.key for p in treasures)
        seq = [start, *route.order, goal]
        assert sum(table.distance(a, b) for a, b in zip(seq, seq[1:])) == expected


@pytest.mark.parametrize("seed", range(6))
def test_matches_brute_force_on_grids(seed):
    rng = random.Random(100 + seed)
    grid = Grid(7, 7)
    for r in range(7):
        for c in range(7):
            if rng.random() < 0.2:
                grid.set_cell_type(Position(r, c), CellType.WALL)
    cells = [Position(r, c) for r in range(7) for c in range(7)]
    picks = rng.sample(cells, 2 + rng.randint(1, 4))
    grid.set_cell_type(picks[0], CellType.START)
    grid.set_cell_type(picks[1], CellType.GOAL)
    for p in picks[2:]:
        grid.set_cell_type(p, CellType.TREASURE)

    table = build_distance_table(grid, grid.points_of_interest())
    route = find_optimal_order(grid.start, grid.goal, grid.treasures, table)
    assert route.total_distance == brute_force(grid.start, grid.goal, grid.treasures, table)


def test_counts_every_complete_ordering():
    points = [Position(0, i) for i in range(6)]
    table = table_from_matrix(points, [[0 if i == j else 1 for j in range(6)] for i in range(6)])
    route = find_optimal_order(points[0], points[-1], points[1:-1], table)
    assert route.permutations_tested == 24


def test_pruned_branches_are_not_counted():
    s, a, b, g = (Position(0, i) for i in range(4))
    #           s    a    b    g
    matrix = [[0,   1,   1,   9],
              [1,   0,   INF, 1],
              [1,   INF, 0,   1],
              [9,   1,   1,   0]]
    table = table_from_matrix([s, a, b, g], matrix)
    route = find_optimal_order(s, g, [a, b], table)
    assert route.permutations_tested == 0
    assert route.total_distance == INF
    assert route.order == []


def test_ties_keep_first_generated_ordering():
    points = [Position(0, i) for i in range(6)]
    start, treasures, goal = points[0], points[1:5], points[5]
    table = table_from_matrix(points, [[0 if i == j else 1 for j in range(6)] for i in range(6)])
    calls = []
    route = find_optimal_order(start, goal, treasures, table,
                               on_test_route=lambda o, d, best: calls.append((o, d, best)))
    assert route.order == treasures
    assert route.total_distance == 5
    assert [best for _, _, best in calls].count(True) == 1
    assert calls[0] == (treasures, 5, True)

    reversed_route = find_optimal_order(start, goal, list(reversed(treasures)), table)
    assert reversed_route.order == list(reversed(treasures))


def test_callback_reports_improvements_in_order():
    s, a, b, g = (Position(0, i) for i in range(4))
    #           s  a  b  g
    matrix = [[0, 5, 1, 9],
              [5, 0, 1, 1],
              [1, 1, 0, 9],
              [9, 1, 9, 0]]
    table = table_from_matrix([s, a, b, g], matrix)
    calls = []
    route = find_optimal_order(s, g, [a, b], table,
                               on_test_route=lambda o, d, best: calls.append((o, d, best)))
    assert calls == [([a, b], 15, True), ([b, a], 3, True)]
    assert route.order == [b, a]
    assert route.total_distance == 3
    assert route.permutations_tested == 2


def test_callback_receives_independent_lists():
    s, a, b, g = (Position(0, i) for i in range(4))
    table = table_from_matrix([s, a, b, g], [[0 if i == j else 1 for j in range(4)] for i in range(4)])
    orders = []
    find_optimal_order(s, g, [a, b], table, on_test_route=lambda o, d, best: orders.append(o))
    orders[0].clear()
    assert orders[1] == [b, a]
