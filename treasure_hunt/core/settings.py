# treasure_hunt/core/settings.py
"""
Runtime knobs, overridable via environment variables.

- TREASURE_HUNT_MAX_TREASURES  cap enforced by the editor before solving
- TREASURE_HUNT_GRID_SIZE      side of new / random maps
- TREASURE_HUNT_WALL_DENSITY   wall probability for random maps
- TREASURE_HUNT_LOG_LEVEL      see logging_config
"""
import os


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


MAX_TREASURES = _env_int("TREASURE_HUNT_MAX_TREASURES", 8)   # 8! = 40320 orderings
GRID_SIZE = _env_int("TREASURE_HUNT_GRID_SIZE", 10)
WALL_DENSITY = _env_float("TREASURE_HUNT_WALL_DENSITY", 0.4)
LOG_LEVEL = os.getenv("TREASURE_HUNT_LOG_LEVEL", "INFO").upper()
