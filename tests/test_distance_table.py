from treasure_hunt.core.astar import search
from treasure_hunt.core.distance_table import DistanceTable, build_distance_table
from treasure_hunt.core.types import INF, Position


def test_table_covers_every_ordered_pair(build_grid):
    grid = build_grid([
        "S...#",
        ".T#..",
        "...T.",
        "#...G",
    ])
    points = grid.points_of_interest()
    table = build_distance_table(grid, points)

    assert table.searches_run == len(points) * (len(points) - 1)
    assert set(table.entries) == {p.key for p in points}
    for a in points:
        assert set(table.entries[a.key]) == {p.key for p in points}
        for b in points:
            if a == b:
                assert table.distance(a, b) == 0
                assert table.path(a, b) == []
            else:
                expected = search(grid, a, b)
                assert table.distance(a, b) == expected.distance
                assert table.path(a, b) == expected.path
                assert table.path(a, b)[0] == a and table.path(a, b)[-1] == b


def test_explored_cells_aggregate_all_searches(build_grid):
    grid = build_grid(["S.T", "...", "T.G"])
    points = grid.points_of_interest()
    seen = []
    table = build_distance_table(grid, points, on_explore=seen.append)
    per_pair = []
    for a in points:
        for b in points:
            if a != b:
                per_pair.extend(search(grid, a, b).explored_cells)
    assert table.explored_cells == per_pair
    assert seen == per_pair


def test_unreachable_pairs_are_recorded_not_raised(build_grid):
    grid = build_grid([
        "S.#..",
        "..#T.",
        "###..",
        "T...G",
    ])
    # the wall pocket around start cuts both treasures off from it
    table = build_distance_table(grid, grid.points_of_interest())
    t_right, t_left = Position(1, 3), Position(3, 0)
    assert table.distance(grid.start, t_right) == INF
    assert table.path(grid.start, t_right) == []
    assert table.distance(t_right, grid.goal) < INF
    assert table.unreachable_treasures(grid.start, grid.goal, grid.treasures) == [t_right, t_left]


def test_unknown_pairs_default_to_infinite():
    table = DistanceTable()
    table.set(Position(0, 0), Position(0, 1), 1, [Position(0, 0), Position(0, 1)])
    assert table.distance(Position(0, 1), Position(0, 0)) == INF
    assert table.path(Position(5, 5), Position(0, 0)) == []
    assert table.segment(Position(0, 0), Position(0, 1)).distance == 1
