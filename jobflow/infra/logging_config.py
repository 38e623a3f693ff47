"""
Logging configuration module.

Console output plus an optional per-day log file named
logs/jobflow_YYYYMMDD_<HHMMSS>.log, where HHMMSS is when the process started.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

LOGGER_NAME = "jobflow"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_started_at: Optional[str] = None


def _process_started_at() -> str:
    global _started_at
    if _started_at is None:
        _started_at = datetime.now().strftime("%H%M%S")
    return _started_at


def _today() -> str:
    return datetime.now().strftime("%Y%m%d")


class DailyRotatingFileHandler(logging.FileHandler):
    """File handler that moves to a new file when the calendar day changes."""

    def __init__(self, log_dir: str | Path = "logs", encoding: str = "utf-8"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._suffix = _process_started_at()

        self._current_date = _today()
        super().__init__(self._path_for(self._current_date), mode="a", encoding=encoding)

    def _path_for(self, date_str: str) -> str:
        return str(self.log_dir / f"{LOGGER_NAME}_{date_str}_{self._suffix}.log")

    def emit(self, record: logging.LogRecord) -> None:
        today = _today()
        if today != self._current_date:
            self.close()
            self._current_date = today
            self.baseFilename = self._path_for(today)
            self.stream = self._open()

        super().emit(record)


def setup_logging(
    log_level: str = "INFO",
    log_dir: str | Path = "logs",
    to_file: bool = True,
) -> logging.Logger:
    """
    Configure the ``jobflow`` logger and return it.

    Every module logs through ``logging.getLogger(__name__)``, so all
    ``jobflow.*`` loggers inherit these handlers. Calling it again replaces
    the previous handlers.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        log_dir: Directory for the daily log file
        to_file: Attach the daily file handler in addition to the console
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if to_file:
        handlers.append(DailyRotatingFileHandler(log_dir=log_dir))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    target = handlers[-1].baseFilename if to_file else "console only"
    logger.info(f"Logging started - level: {log_level}, output: {target}")

    return logger
