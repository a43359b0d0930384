"""Tests for logging setup."""

import logging
import uuid

import pytest

from rbac_admin.core.config import Settings
from rbac_admin.core.logger import configure_logging, get_logger, setup_logger


@pytest.fixture
def logger_name():
    name = f"rbac_admin_test_{uuid.uuid4().hex[:8]}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_console_logger(logger_name):
    logger = setup_logger(name=logger_name, level="debug")
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)


def test_no_duplicate_handlers(logger_name):
    setup_logger(name=logger_name)
    logger = setup_logger(name=logger_name, level="WARNING")
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_file_logging(logger_name, tmp_path):
    logger = setup_logger(name=logger_name, log_dir=str(tmp_path / "logs"), file_logging=True)
    logger.info("hello file")
    for handler in logger.handlers:
        handler.flush()

    log_file = tmp_path / "logs" / f"{logger_name}.log"
    assert log_file.exists()
    content = log_file.read_text()
    assert "[INFO]" in content
    assert f"[{logger_name}]" in content
    assert "hello file" in content


def test_invalid_level(logger_name):
    with pytest.raises(ValueError):
        setup_logger(name=logger_name, level="LOUD")


def test_get_logger(logger_name):
    assert get_logger(logger_name) is logging.getLogger(logger_name)


@pytest.fixture
def restore_levels():
    names = ["rbac_admin", "uvicorn.access", "sqlalchemy.engine"]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_configure_logging_from_settings(restore_levels):
    logger = configure_logging(Settings(log_level="warning", database_echo=True))
    assert logger.name == "rbac_admin"
    assert logger.level == logging.WARNING
    assert logging.getLogger("uvicorn.access").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
