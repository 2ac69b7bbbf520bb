# product_tracker/config/logging_config.py

"""Per-run timestamped logging configuration for product_tracker.

Each launch writes a dedicated log file inside ``logs/`` named with
the launch timestamp (e.g. ``logs/run_20260214_153045.log``).  All
``product_tracker.*`` loggers (one per platform, plus the
orchestrator, HTTP client and CLI) route through this file handler,
and every adapter message carries a ``[<platform>]`` tag.

Retries, bot-challenge detections and scraper crashes are logged at
WARNING or above, so they also reach the console.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from product_tracker.config.settings import Settings

ROOT_LOGGER_NAME = "product_tracker"

# Adapters run in worker threads, so the thread name is kept
_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(threadName)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_STDERR_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure(
    handler: logging.Handler, level: int, fmt: str,
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=_DATE_FORMAT))
    return handler


def _run_log_path(logs_dir: Path) -> Path:
    """``<logs_dir>/run_YYYYMMDD_HHMMSS.log``, creating the directory."""
    logs_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return logs_dir / f"run_{stamp}.log"


def setup_logging(logs_dir: Path | None = None) -> Path:
    """Attach the run-file and stderr handlers to ``product_tracker``.

    Args:
        logs_dir: Directory for the log file; defaults to
            ``Settings.LOGS_DIR``.

    Returns:
        The path of this run's log file.  When handlers are already
        attached the logger is left untouched.
    """
    log_file = _run_log_path(logs_dir or Settings.LOGS_DIR)

    project_logger = logging.getLogger(ROOT_LOGGER_NAME)
    project_logger.setLevel(logging.DEBUG)
    if project_logger.handlers:
        return log_file

    project_logger.addHandler(
        _configure(
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.DEBUG,
            _FILE_FORMAT,
        )
    )
    project_logger.addHandler(
        _configure(
            logging.StreamHandler(sys.stderr),
            logging.WARNING,
            _STDERR_FORMAT,
        )
    )

    project_logger.info("Logging initialised, log file: %s", log_file)
    return log_file
