# shopez/config/logging_config.py

"""Per-run timestamped logging configuration for ShopEZ.

Each application launch creates a dedicated log file inside ``logs/``,
named with the launch timestamp (e.g. ``logs/run_20260214_153045.log``).
All ``shopez.*`` loggers route through this file handler so cart,
catalog, and session activity for one run lands in the same place.

The console only receives warnings and above so it does not fight the
terminal UI for the screen.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from shopez.config.settings import Settings

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(threadName)s | %(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int = logging.DEBUG) -> Path:
    """Initialise the root ``shopez`` logger for the current run.

    Returns:
        The :class:`~pathlib.Path` to the log file created for this run.
    """
    root_logger = logging.getLogger("shopez")
    root_logger.setLevel(level)

    # Repeated calls keep the first run's handlers and file
    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)

    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"run_{timestamp}.log"

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
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
