"""
==========================================
Centralized logging for the generic DAL.
==========================================

The library modules only ever call ``logging.getLogger(__name__)``; the host
application decides where output goes by calling ``setup_logging`` once at
startup. Nothing is configured on import.

Provides:
- setup_logging: root logger configuration (console and/or file)
- get_logger: module logger with an optional level override
- truncate_sql: bounded rendering of SQL statements for log lines

Example:
    >>> from core.logger import get_logger, setup_logging
    >>>
    >>> setup_logging(log_file='dal.log')   # level from LOG_LEVEL
    >>> logger = get_logger(__name__)
    >>> logger.debug("Cache miss for %s", truncate_sql(sql))
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Formatter adding ANSI colors to the level name for console output.

    Attributes:
        COLORS: Dict mapping log levels to ANSI color codes
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        # Work on a copy so file handlers sharing the record stay uncolored
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname)
        if color:
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__ of calling module)
        level: Optional logging level override (DEBUG/INFO/WARNING/ERROR/CRITICAL)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if level:
        logger.setLevel(getattr(logging, level.upper()))

    return logger


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    use_colors: bool = True
) -> None:
    """Configure the root logger with console and/or file handlers.

    Should be called once by the host application. Existing root handlers
    are replaced.

    Args:
        log_level: Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL), defaults to
            config.log_level (LOG_LEVEL)
        log_file: Optional log file name (e.g., 'dal.log')
        log_dir: Optional log directory path (defaults to 'logs/')
        console_output: If True, output to console (stdout)
        use_colors: If True, use colored output for console
    """
    level = getattr(logging, (log_level or config.log_level).upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        formatter_cls = ColoredFormatter if use_colors else logging.Formatter
        console_handler.setFormatter(formatter_cls(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_dir) if log_dir else Path('logs')
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)


def truncate_sql(sql: str, limit: int = 200) -> str:
    """Shorten a SQL statement for logging.

    Args:
        sql: Statement text
        limit: Maximum number of characters kept

    Returns:
        The statement unchanged when short enough, otherwise its first
        ``limit`` characters followed by ``...``

    Example:
        >>> truncate_sql("SELECT `a` FROM `t`", limit=10)
        'SELECT `a`...'
    """
    if len(sql) <= limit:
        return sql
    return sql[:limit] + '...'
