"""
==================================
Pytest suite for core/logger.py
==================================

Test Coverage:
--------------
- get_logger: level override
- setup_logging: console and file handlers, level from config by default
- ColoredFormatter: colors only the formatted copy
- truncate_sql

How to Execute:
---------------
All tests:          pytest tests/tests_core/test_logger.py -v
"""

import logging

import pytest

from core.config import config
from core.logger import ColoredFormatter, get_logger, setup_logging, truncate_sql


@pytest.fixture
def restore_root_logger(monkeypatch):
    root = logging.getLogger()
    level = root.level
    monkeypatch.setattr(root, 'handlers', [])
    yield root
    for handler in root.handlers:
        handler.close()
    root.setLevel(level)


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_get_logger_with_level():
    logger = get_logger('tests.core.level', 'debug')
    assert logger.name == 'tests.core.level'
    assert logger.level == logging.DEBUG


@pytest.mark.unit
def test_setup_logging_writes_file(tmp_path, restore_root_logger):
    setup_logging(log_level='DEBUG', log_file='dal.log', log_dir=str(tmp_path), console_output=False)

    logging.getLogger('tests.core.file').debug("cache miss")
    for handler in restore_root_logger.handlers:
        handler.flush()

    content = (tmp_path / 'dal.log').read_text(encoding='utf-8')
    assert 'DEBUG' in content
    assert 'cache miss' in content


@pytest.mark.unit
def test_setup_logging_console_only(restore_root_logger):
    setup_logging(log_level='WARNING', use_colors=False)

    assert restore_root_logger.level == logging.WARNING
    assert len(restore_root_logger.handlers) == 1
    assert not isinstance(restore_root_logger.handlers[0].formatter, ColoredFormatter)


@pytest.mark.unit
def test_setup_logging_defaults_to_configured_level(restore_root_logger, monkeypatch):
    monkeypatch.setattr(config.dal, 'log_level', 'error')

    setup_logging(console_output=False)

    assert restore_root_logger.level == logging.ERROR


@pytest.mark.unit
def test_explicit_level_overrides_config(restore_root_logger, monkeypatch):
    monkeypatch.setattr(config.dal, 'log_level', 'ERROR')

    setup_logging(log_level='DEBUG', console_output=False)

    assert restore_root_logger.level == logging.DEBUG


@pytest.mark.unit
def test_colored_formatter_leaves_record_untouched():
    record = logging.LogRecord('x', logging.ERROR, __file__, 1, "boom", None, None)

    output = ColoredFormatter('%(levelname)s %(message)s').format(record)

    assert '\033[31m' in output
    assert record.levelname == 'ERROR'


@pytest.mark.unit
def test_truncate_sql():
    assert truncate_sql("SELECT 1") == "SELECT 1"
    assert truncate_sql("SELECT `a` FROM `t`", limit=10) == "SELECT `a`..."


# ===================
# 2. EDGE CASE TESTS
# ===================

@pytest.mark.edge_case
def test_truncate_sql_at_exact_limit():
    assert truncate_sql("x" * 200) == "x" * 200
    assert truncate_sql("x" * 201) == "x" * 200 + "..."
