"""
==========================================
Core infrastructure package for the DAL.
==========================================

Centralized configuration and logging used by the sql, cache, dal and utils
packages.

Modules:
    config: Configuration management from environment variables
    logger: Logging configuration and helpers

Example:
    >>> from core.config import config
    >>> from core.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Connecting to {config.db_host}")
"""

__version__ = "0.1.0"
__all__ = ['get_logger', 'setup_logging', 'truncate_sql', 'config', 'Config']

from core.config import Config, config
from core.logger import get_logger, setup_logging, truncate_sql
