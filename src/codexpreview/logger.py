from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import structlog

LOGGER_NAME = "codexpreview"


@dataclass
class LogRecordEntry:
    logger_name: str
    level: int
    level_name: str
    message: str
    created: float


class LogManager:
    def __init__(self, max_entries: Optional[int] = None) -> None:
        self._max_entries = max_entries
        self._records: list[LogRecordEntry] = []

    def add_record(self, record: logging.LogRecord) -> None:
        entry = LogRecordEntry(
            logger_name=record.name,
            level=record.levelno,
            level_name=record.levelname,
            message=record.getMessage(),
            created=record.created,
        )
        self._records.append(entry)
        if self._max_entries is not None and len(self._records) > self._max_entries:
            overflow = len(self._records) - self._max_entries
            del self._records[0:overflow]

    def get_records(self, min_level: int = logging.NOTSET) -> list[LogRecordEntry]:
        return [r for r in self._records if r.level >= min_level]

    def clear(self) -> None:
        self._records.clear()


class _InMemoryLogHandler(logging.Handler):
    def __init__(self, manager: LogManager) -> None:
        super().__init__()
        self._manager = manager

    def emit(self, record: logging.LogRecord) -> None:
        self._manager.add_record(record)


_log_manager: Optional[LogManager] = None
_log_handler: Optional[_InMemoryLogHandler] = None
_file_handler: Optional[logging.FileHandler] = None


def init_log_manager(max_entries: Optional[int] = None) -> LogManager:
    """
    Attach an in-memory capture handler to the package logger.

    Repeated calls return the same manager.
    """
    global _log_manager, _log_handler
    if _log_manager is None:
        _log_manager = LogManager(max_entries=max_entries)
        _log_handler = _InMemoryLogHandler(_log_manager)

    pkg_logger = logging.getLogger(LOGGER_NAME)
    if _log_handler is not None and _log_handler not in pkg_logger.handlers:
        pkg_logger.addHandler(_log_handler)
    return _log_manager


def get_log_manager() -> Optional[LogManager]:
    return _log_manager


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
) -> None:
    """
    Set the package log level. A log_file replaces any file handler added by
    an earlier call; without one the current file handler is kept.
    """
    global _file_handler
    pkg_logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    pkg_logger.setLevel(level)

    if log_file is not None:
        if _file_handler is not None:
            pkg_logger.removeHandler(_file_handler)
            _file_handler.close()
        _file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        _file_handler.setFormatter(logging.Formatter("%(message)s"))
        pkg_logger.addHandler(_file_handler)


structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.dev.ConsoleRenderer(colors=False),
    ],
)

logger: structlog.BoundLogger = structlog.get_logger(LOGGER_NAME)
