# fare_tracker/config/logging_config.py

"""Per-run timestamped logging configuration for fare_tracker.

Each launch creates a dedicated log file inside ``logs/``, named with the
launch timestamp (e.g. ``logs/run_20260214_153045.log``).  All
``fare_tracker.*`` loggers route through this file handler, so every cycle,
fetch failure and alert of a monitoring session lands in the same file.

The console handler only emits warnings and above: while the Textual
dashboard owns the terminal, routine cycle output belongs in the dashboard's
log pane, not on stderr.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from fare_tracker.config.settings import Settings

# Reusable format strings --------------------------------------------------

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _current_log_file(root_logger: logging.Logger) -> Path | None:
    """Return the file an already-configured logger writes to, if any."""
    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


def setup_logging() -> Path:
    """Initialise the root ``fare_tracker`` logger for the current run.

    Returns:
        The :class:`~pathlib.Path` to the log file created for this run.
    """
    root_logger = logging.getLogger("fare_tracker")
    root_logger.setLevel(logging.DEBUG)

    # Repeated calls keep the first run's handlers and its file
    existing = _current_log_file(root_logger)
    if existing is not None:
        return existing

    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"run_{timestamp}.log"

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    root_logger.info("Logging initialised, log file: %s", log_file)

    return log_file
