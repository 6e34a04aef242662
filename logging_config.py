"""
Logging setup for the call recorder.

A recording job runs across several threads (caller, process monitor, web
server, stop request), so file output carries the thread name. Console output
stays short for interactive runs.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Iterable, Optional

FILE_FORMAT = '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s - %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Flask logs every health poll and urllib3 every webhook connection
NOISY_LOGGERS = ('werkzeug', 'urllib3')


def _rotating_file_handler(path: Path, max_bytes: int, backup_count: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=str(path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    log_file: str = "call_recorder.log",
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    console_output: bool = True,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS
) -> None:
    """
    Configure the root logger for a recording job.

    Safe to call more than once; existing root handlers are replaced.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the log file (default: ./logs)
        log_file: Name of the log file
        max_bytes: Size at which the log file rotates
        backup_count: Number of rotated files to keep
        console_output: Also log to stderr
        quiet_loggers: Third-party loggers held at WARNING unless DEBUG is requested
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    log_path = Path(log_dir) if log_dir else Path("logs")
    log_path.mkdir(parents=True, exist_ok=True)
    full_log_file = log_path / log_file

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handlers = [_rotating_file_handler(full_log_file, max_bytes, backup_count)]
    if console_output:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
        handlers.append(console_handler)
    for handler in handlers:
        handler.setLevel(numeric_level)
        root_logger.addHandler(handler)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(
            numeric_level if numeric_level <= logging.DEBUG else logging.WARNING
        )

    logging.getLogger(__name__).info(f"Logging initialized: level={log_level}, file={full_log_file}")
