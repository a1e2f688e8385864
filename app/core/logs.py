# app/core/logs.py
"""
Session logging: console + one timestamped file per server run.

    logs/server-2025-01-15_10-30-00.log
"""

import logging
import os
from datetime import datetime
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
SEPARATOR = "=" * 50

# Every module logger lives under "app", so one handler setup covers them all
APP_LOGGER = "app"

_log_file: Optional[str] = None


def truncate(text: str, limit: int) -> str:
    """Shorten long SQL/response bodies for log lines."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def setup_logging(
    log_dir: str = "logs", enabled: bool = True, level: int = logging.INFO
) -> Optional[str]:
    """
    Configure console and file logging for this server session.

    Args:
        log_dir: Directory for session log files (created if missing)
        enabled: When False only the console handler is installed
        level: Log level for the app loggers

    Returns:
        Path of the session log file, or None when file logging is off
    """
    global _log_file

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(level)

    # Re-running setup (tests, reload) must not stack handlers
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    app_logger.addHandler(console)

    _log_file = None
    if enabled:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        _log_file = os.path.join(log_dir, f"server-{timestamp}.log")

        file_handler = logging.FileHandler(_log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        app_logger.addHandler(file_handler)

    return _log_file


def get_log_file() -> Optional[str]:
    return _log_file


def log_section(logger: logging.Logger, title: str) -> None:
    logger.info("%s\n%s\n%s", SEPARATOR, title, SEPARATOR)
