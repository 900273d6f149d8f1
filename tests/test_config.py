import importlib
import logging

import pytest

from treasure_hunt.core import logging_config, settings


@pytest.fixture
def reload_settings(monkeypatch):
    def _reload(**env):
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return importlib.reload(settings)
    yield _reload
    monkeypatch.undo()
    importlib.reload(settings)


def test_defaults(reload_settings, monkeypatch):
    for name in ("TREASURE_HUNT_MAX_TREASURES", "TREASURE_HUNT_GRID_SIZE",
                 "TREASURE_HUNT_WALL_DENSITY", "TREASURE_HUNT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    s = reload_settings()
    assert s.MAX_TREASURES == 8
    assert s.GRID_SIZE == 10
    assert s.WALL_DENSITY == pytest.approx(0.4)
    assert s.LOG_LEVEL == "INFO"


def test_env_overrides(reload_settings):
    s = reload_settings(TREASURE_HUNT_MAX_TREASURES="5", TREASURE_HUNT_WALL_DENSITY="0.1",
                        TREASURE_HUNT_LOG_LEVEL="debug")
    assert s.MAX_TREASURES == 5
    assert s.WALL_DENSITY == pytest.approx(0.1)
    assert s.LOG_LEVEL == "DEBUG"


def test_bad_env_value(reload_settings):
    with pytest.raises(ValueError, match="TREASURE_HUNT_GRID_SIZE"):
        reload_settings(TREASURE_HUNT_GRID_SIZE="big")


def test_configure_logging_is_idempotent():
    logger = logging_config.configure_logging("DEBUG")
    logging_config.configure_logging("WARNING")
    named = [h for h in logger.handlers if h.get_name() == "treasure_hunt"]
    assert len(named) == 1
    assert logger.level == logging.WARNING
    assert logging_config.configure_logging("nonsense").level == logging.INFO
