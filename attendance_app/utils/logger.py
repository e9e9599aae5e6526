import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
from typing import Optional, Union

# Main application logger. Modules log through children of it
# (e.g. "attendance_system.state") so one setup covers everything.
LOGGER_NAME = "attendance_system"
LOG_FILE_NAME = "attendance.log"

logger = logging.getLogger(LOGGER_NAME)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if not name:
        return logger
    return logger.getChild(name)


def setup_logging(log_dir: Union[str, Path], level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Attach the file and console handlers to the application logger.

    Safe to call on every Streamlit rerun: handlers are only added once.
    Falls back to console-only logging if the log directory can't be created.
    """
    logger.setLevel(level)
    if logger.handlers:
        return logger

    # --- 1. LOG DIRECTORY ---
    log_dir = Path(log_dir)
    try:
        log_dir.mkdir(exist_ok=True, parents=True)
        log_file: Optional[Path] = log_dir / LOG_FILE_NAME
    except OSError as e:
        # Logging isn't set up yet, so report on stderr directly
        print(f"ERROR: Could not create log directory at {log_dir}: {e}", file=sys.stderr)
        log_file = None

    # --- 2. FORMATTER ---
    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
    )

    # --- 3. HANDLERS ---
    if log_file is not None:
        # Rotates at 5MB
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    logger.info("Logging configuration loaded successfully.")
    return logger
