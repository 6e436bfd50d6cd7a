"""Test logging setup and performance tracking."""

import logging

import pytest

from arcpath.utils.config import config_manager
from arcpath.utils.logger import (
    LogManager,
    PerformanceTracker,
    get_logger,
    get_performance_metrics,
    log_manager,
    reset_performance_metrics,
    timed,
)


def test_logger_names():
    """Check component loggers live under the library logger."""
    logger = get_logger("trajectory.curve")
    assert logger.name == "arcpath.trajectory.curve"
    assert get_logger("trajectory.curve") is logger
    assert LogManager() is log_manager


def test_component_levels():
    """Check component levels follow the configuration."""
    config_manager.update_from_dict({"logging": {"component_levels": {"algorithms": "DEBUG"}}})
    assert get_logger("algorithms.closest").level == logging.DEBUG
    config_manager.reset()
    assert get_logger("algorithms.closest").level == logging.WARNING


def test_tracker():
    """Check timers accumulate counts and totals."""
    tracker = PerformanceTracker()
    for _ in range(3):
        tracker.stop_timer("op", tracker.start_timer("op"))

    metrics = tracker.get_metrics("op")
    assert metrics["count"] == 3
    assert metrics["min_time"] <= metrics["avg_time"] <= metrics["max_time"]
    assert "ongoing" not in metrics
    assert tracker.get_metrics("other") == {}

    tracker.reset("op")
    assert tracker.get_metrics("op")["count"] == 0


def test_tracker_unknown_timer():
    """Check stopping an unknown timer fails."""
    with pytest.raises(ValueError):
        PerformanceTracker().stop_timer("op", 42)


def test_timed_decorator():
    """Check decorated calls are recorded even when they raise."""
    reset_performance_metrics("test_timed")

    @timed("test_timed")
    def work(fail):
        if fail:
            raise RuntimeError("fail")
        return 5

    assert work(False) == 5
    with pytest.raises(RuntimeError):
        work(True)
    assert get_performance_metrics("test_timed")["count"] == 2
    assert work.__name__ == "work"


def test_file_output(tmp_path):
    """Check a file handler is installed when enabled."""
    path = tmp_path / "logs" / "arcpath.log"
    config_manager.update_from_dict({"logging": {"file_output": True, "file_path": str(path)}})
    get_logger("trajectory.builder").warning("written to file")
    config_manager.reset()

    assert path.exists()
    assert "written to file" in path.read_text()
