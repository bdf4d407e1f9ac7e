"""
Logging configuration for the linkding CLI.

Console logging goes to stderr so that stdout stays clean for JSON output
and exported files.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union


def setup_logging(
    debug: bool = False, log_file: Optional[Union[str, Path]] = None
) -> None:
    """
    Set up logging configuration.

    Args:
        debug: Log everything at DEBUG level instead of warnings only
        log_file: Optional log file path; always logs at DEBUG level
    """
    log_level = logging.DEBUG if debug else logging.WARNING

    # Configure logging format
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    # Configure handlers
    handlers = []

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(log_format, date_format))
    handlers.append(console_handler)

    # File handler
    if log_file is not None:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(log_format, date_format))
        handlers.append(file_handler)

    # Configure root logger
    root_level = logging.DEBUG if (debug or log_file is not None) else log_level
    logging.basicConfig(level=root_level, handlers=handlers, force=True)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging initialized (debug={debug}, log_file={log_file})")

    # Reduce noise from some libraries
    if not debug:
        logging.getLogger("urllib3").setLevel(logging.WARNING)
        logging.getLogger("requests").setLevel(logging.WARNING)
        logging.getLogger("chardet").setLevel(logging.WARNING)
