"""
Logging and timing for the arcpath curve library.

Every logger lives below the ``arcpath`` logger, so applications embedding
the library keep control of their own root logger. Handlers, levels and
per-component overrides follow the ``logging`` configuration section and are
rebuilt whenever that section changes.

Curve operations decorated with ``timed`` record call counts and durations
which can be read back with ``get_performance_metrics``.
"""

import os
import sys
import time
import logging
import logging.handlers
import threading
import itertools
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional
import functools
import atexit

from arcpath.utils.config import config_manager, LoggingConfig

LIBRARY_LOGGER = "arcpath"


class LogFormatter(logging.Formatter):
    """Formatter that colors the level name when writing to a terminal."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str = None, datefmt: str = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors or record.levelname not in self.COLORS:
            return super().format(record)

        plain = record.levelname
        record.levelname = f"{self.COLORS[plain]}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


@dataclass
class OperationStats:
    """Accumulated durations of one named operation."""

    count: int = 0
    total_time: float = 0.0
    min_time: float = float('inf')
    max_time: float = 0.0

    def add(self, elapsed: float) -> None:
        self.count += 1
        self.total_time += elapsed
        self.min_time = min(self.min_time, elapsed)
        self.max_time = max(self.max_time, elapsed)

    def summary(self) -> Dict[str, Any]:
        result = asdict(self)
        result['avg_time'] = self.total_time / self.count if self.count else 0.0
        return result


class PerformanceTracker:
    """
    Thread-safe registry of operation timers.

    Each ``start_timer`` call hands out a fresh id so that nested and
    concurrent calls of the same operation are timed independently.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self._stats: Dict[str, OperationStats] = {}
        self._running: Dict[int, tuple] = {}
        self._ids = itertools.count(1)

    def start_timer(self, operation: str) -> int:
        """
        Start timing an operation.

        Args:
            operation: Name of the operation

        Returns:
            int: Timer ID to pass to stop_timer
        """
        with self.lock:
            timer_id = next(self._ids)
            self._stats.setdefault(operation, OperationStats())
            self._running[timer_id] = (operation, time.perf_counter())
        return timer_id

    def stop_timer(self, operation: str, timer_id: int) -> float:
        """
        Stop a timer and record its duration.

        Returns:
            float: Elapsed time in seconds

        Raises:
            ValueError: If no such timer is running for the operation
        """
        end_time = time.perf_counter()

        with self.lock:
            running = self._running.get(timer_id)
            if running is None or running[0] != operation:
                raise ValueError(f"No timer found for {operation} with ID {timer_id}")
            del self._running[timer_id]

            elapsed = end_time - running[1]
            self._stats.setdefault(operation, OperationStats()).add(elapsed)

        return elapsed

    def get_metrics(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """Summary of one operation ({} when unknown), or of all operations."""
        with self.lock:
            if operation:
                stats = self._stats.get(operation)
                return stats.summary() if stats is not None else {}
            return {name: stats.summary() for name, stats in self._stats.items()}

    def reset(self, operation: Optional[str] = None) -> None:
        """Clear recorded durations; running timers stay valid."""
        with self.lock:
            for name in ([operation] if operation else list(self._stats)):
                if name in self._stats:
                    self._stats[name] = OperationStats()


class LogManager:
    """
    Owner of the library's handlers and component loggers.

    Singleton, created on import. Component loggers are named
    ``arcpath.<component>``; a component's level is looked up in
    ``component_levels`` by its full name, then by its first dotted part,
    then falls back to the global level.
    """

    _instance = None
    _lock = threading.RLock()

    def __new__(cls, *args, **kwargs):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self, config: Optional[LoggingConfig] = None):
        with self._lock:
            if self._initialized:
                return

            self._config = config or config_manager.get_logging_config()
            self._library_logger = logging.getLogger(LIBRARY_LOGGER)
            self._library_logger.setLevel(logging.DEBUG)

            self._handlers = []
            self._loggers = {}
            self._performance_tracker = PerformanceTracker()
            self._install_handlers()

            config_manager.add_listener(self._on_config_changed)
            atexit.register(self._flush)
            self._initialized = True

            self.get_logger("system").debug("Logging system initialized")

    def _install_handlers(self) -> None:
        """Replace the library logger's handlers with the configured ones."""
        for handler in self._handlers:
            self._library_logger.removeHandler(handler)
            handler.close()
        self._handlers = []

        if self._config.console_output:
            self._add_handler(logging.StreamHandler(sys.stderr),
                              LogFormatter(self._config.format, self._config.date_format))

        if self._config.file_output:
            log_dir = os.path.dirname(self._config.file_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            handler = logging.handlers.RotatingFileHandler(
                self._config.file_path,
                maxBytes=self._config.max_file_size,
                backupCount=self._config.backup_count
            )
            self._add_handler(handler, logging.Formatter(self._config.format, self._config.date_format))

    def _add_handler(self, handler: logging.Handler, formatter: logging.Formatter) -> None:
        handler.setFormatter(formatter)
        handler.setLevel(getattr(logging, self._config.level, logging.WARNING))
        self._library_logger.addHandler(handler)
        self._handlers.append(handler)

    def _on_config_changed(self, section: str) -> None:
        if section != 'logging':
            return
        with self._lock:
            self._config = config_manager.get_logging_config()
            self._install_handlers()
            for name, logger in self._loggers.items():
                logger.setLevel(self._level_for(name))

    def _level_for(self, name: str) -> int:
        levels = self._config.component_levels
        level_name = levels.get(name) or levels.get(name.split('.')[0]) or self._config.level
        return getattr(logging, level_name, logging.WARNING)

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get the logger of a library component.

        Args:
            name: Component name, e.g. ``"trajectory.curve"``

        Returns:
            logging.Logger: The ``arcpath.<name>`` logger
        """
        with self._lock:
            if name not in self._loggers:
                logger = logging.getLogger(f"{LIBRARY_LOGGER}.{name}")
                logger.setLevel(self._level_for(name))
                self._loggers[name] = logger
            return self._loggers[name]

    @property
    def tracker(self) -> PerformanceTracker:
        return self._performance_tracker

    def _flush(self) -> None:
        for handler in self._handlers:
            handler.flush()


def timed(operation: str):
    """
    Decorator recording the duration of every call under ``operation``.

    Calls that raise are recorded as well.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            tracker = log_manager.tracker
            timer_id = tracker.start_timer(operation)
            try:
                return func(*args, **kwargs)
            finally:
                elapsed = tracker.stop_timer(operation, timer_id)
                log_manager.get_logger("performance").debug(
                    f"{operation} completed in {elapsed:.6f} seconds"
                )
        return wrapper
    return decorator


# Global log manager instance
log_manager = LogManager()


def get_logger(name: str) -> logging.Logger:
    return log_manager.get_logger(name)


def get_performance_metrics(operation: Optional[str] = None) -> Dict[str, Any]:
    """Timing summary of one operation, or of all operations."""
    return log_manager.tracker.get_metrics(operation)


def reset_performance_metrics(operation: Optional[str] = None) -> None:
    log_manager.tracker.reset(operation)
