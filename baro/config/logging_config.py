# baro/config/logging_config.py

"""Per-run timestamped logging configuration for baro.

Each launch creates a dedicated log file inside ``logs/`` named with the
launch timestamp (e.g. ``logs/run_20260214_153045.log``).  All ``baro.*``
loggers route through this file handler, so cache, connectivity, remote
fetch and fallback decisions for a run land in the same file.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from baro.config.settings import Settings

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    verbose: bool = False,
    db_path: Path | None = None,
) -> Path:
    """Initialise the root ``baro`` logger for the current run.

    The first record in each run file states the cache database, price
    API, TTL and fetch deadline the run was started with.

    Args:
        verbose: Lower the console handler to INFO instead of WARNING.
        db_path: Cache database used by this run, when not the default.

    Returns:
        The :class:`~pathlib.Path` to the log file created for this run.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"run_{timestamp}.log"

    root_logger = logging.getLogger("baro")
    root_logger.setLevel(logging.DEBUG)

    # Repeated calls (tests, CLI re-entry) keep the first set of handlers
    if root_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    root_logger.info("Logging initialised, log file: %s", log_file)
    root_logger.info(
        "Run context: cache_db=%s price_api=%s ttl=%dms fetch_timeout=%.2fs",
        db_path or Settings.CACHE_DB_PATH,
        Settings.PRICE_API_BASE_URL,
        Settings.CACHE_TTL_MS,
        Settings.API_TIMEOUT,
    )

    return log_file
