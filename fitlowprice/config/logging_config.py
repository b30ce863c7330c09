# fitlowprice/config/logging_config.py

"""Run logging for fitlowprice.

All ``fitlowprice.*`` loggers share one handler pair: a timestamped file
under ``Settings.LOGS_DIR`` that keeps everything down to DEBUG, and a
stderr stream at ``Settings.CONSOLE_LOG_LEVEL``. Adapters absorb their
own failures, so the file is where a degraded source shows up.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from fitlowprice.config.settings import Settings

LOGGER_NAME = "fitlowprice"

_FILE_FORMAT = (
    "%(asctime)s %(levelname)-8s %(name)-24s %(funcName)s:%(lineno)d  %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _console_level() -> int:
    level = logging.getLevelName(Settings.CONSOLE_LOG_LEVEL.strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def _run_log_file(root: logging.Logger) -> Path | None:
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


def setup_logging() -> Path:
    """Attach the run handlers once and return the run's log file.

    Later calls in the same process reuse the existing file.
    """
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(logging.DEBUG)

    existing = _run_log_file(root)
    if existing is not None:
        return existing

    Settings.LOGS_DIR.mkdir(parents=True, exist_ok=True)
    log_file = Settings.LOGS_DIR / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, _DATE_FORMAT))

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_console_level())
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))

    root.addHandler(file_handler)
    root.addHandler(console)
    root.info(
        "Run started (env=%s, sources=%s)",
        Settings.APP_ENV,
        ",".join(s["id"] for s in Settings.AVAILABLE_SOURCES),
    )
    return log_file
