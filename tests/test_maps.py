import json
import random
from pathlib import Path

import pytest

from treasure_hunt.core.maps import (
    SAMPLE_MAP_DIR,
    SAMPLE_MAPS,
    can_reach,
    generate_random_map,
    load_map,
    save_map,
)
from treasure_hunt.core.solver import solve
from treasure_hunt.core.types import CellType, Grid, Position


def test_save_and_load(tmp_path, build_grid):
    grid = build_grid(["S#T", "..#", "T.G"])
    target = tmp_path / "map.json"
    save_map(grid, target)
    assert json.loads(target.read_text())["rows"] == 3
    assert load_map(target) == grid


def test_load_rejects_garbage(tmp_path):
    target = tmp_path / "bad.json"
    target.write_text(json.dumps({"cols": 4}))
    with pytest.raises(ValueError):
        load_map(target)


@pytest.mark.parametrize("name, distance", [
    ("01_open_field.json", None),
    ("02_wall_detour.json", 12),
    ("03_four_chests.json", None),
])
def test_sample_maps_solve(maps_dir, name, distance):
    grid = load_map(maps_dir / name)
    assert grid.is_configured()
    result = solve(grid)
    assert result.complete_path[0] == grid.start
    assert result.complete_path[-1] == grid.goal
    if distance is not None:
        assert result.total_distance == distance


def test_can_reach(build_grid):
    grid = build_grid(["S#.", "##.", "..G"])
    assert not can_reach(grid, grid.start, grid.goal)
    assert can_reach(grid, Position(0, 2), grid.goal)
    assert can_reach(grid, grid.goal, grid.goal)


@pytest.mark.parametrize("seed", range(15))
def test_random_maps_are_solvable(seed):
    grid = generate_random_map(10, 10, rng=random.Random(seed))
    assert grid.start == Position(0, 0)
    assert grid.goal == Position(9, 9)
    assert 1 <= len(grid.treasures) <= 3
    for r in range(10):
        assert grid.cell_type(Position(r, 0)) != CellType.WALL
        assert grid.cell_type(Position(r, 9)) != CellType.WALL
    result = solve(grid)
    assert set(p.key for p in result.optimal_route) == set(p.key for p in grid.treasures)


def test_random_map_is_reproducible_with_seed():
    a = generate_random_map(8, 8, rng=random.Random(7))
    b = generate_random_map(8, 8, rng=random.Random(7))
    assert a == b


def test_fully_walled_interior_still_gets_a_treasure():
    grid = generate_random_map(4, 4, rng=random.Random(0), wall_density=1.0)
    assert grid.treasures == [Position(0, 3)]
    assert solve(grid).total_distance == 6


def test_random_map_needs_room():
    with pytest.raises(ValueError):
        generate_random_map(2, 5)


def test_loaded_grid_equals_serialized_source(tmp_path):
    grid = Grid(2, 2)
    grid.set_cell_type(Position(0, 0), CellType.START)
    target = tmp_path / "partial.json"
    save_map(grid, target)
    loaded = load_map(target)
    assert loaded.start == Position(0, 0)
    assert loaded.goal is None


def test_sample_maps_live_inside_the_package(maps_dir):
    package_dir = Path(__file__).resolve().parents[1] / "treasure_hunt"
    assert SAMPLE_MAP_DIR == package_dir / "maps" == maps_dir
    for name, path in SAMPLE_MAPS.items():
        assert path.is_file()
        assert path.stem == name
