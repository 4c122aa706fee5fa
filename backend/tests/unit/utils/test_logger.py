"""
Unit tests for the logger module.
"""
import logging
from logging.handlers import RotatingFileHandler

from ventureconnect.utils import logger as logger_module
from ventureconnect.utils.logger import setup_logger, get_logger, configure_loggers


def test_setup_logger():
    """Test that setup_logger creates a console-only logger by default."""
    logger = setup_logger("test_logger", level=logging.INFO)

    assert logger.name == "test_logger"
    assert logger.level == logging.INFO
    assert logger.propagate is False
    assert len(logger.handlers) == 1
    assert not isinstance(logger.handlers[0], logging.FileHandler)


def test_setup_logger_with_file(tmp_path):
    logger = setup_logger("test_file_logger", "test.log", level=logging.DEBUG, logs_dir=str(tmp_path))

    logger.debug("Test message from test_setup_logger_with_file")
    for handler in logger.handlers:
        handler.flush()

    assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
    assert "Test message" in (tmp_path / "test.log").read_text()


def test_setup_logger_does_not_duplicate_handlers():
    setup_logger("test_repeat")
    logger = setup_logger("test_repeat")
    assert len(logger.handlers) == 1


def test_get_logger():
    """Known services share their configured logger; others get a new one."""
    assert get_logger("db") is logger_module.db_logger
    assert get_logger("auth") is logger_module.auth_logger

    logger = get_logger("test_component")
    assert logger.name == "test_component"
    assert logger.level == logger_module.log_level


def test_configure_loggers(tmp_path, monkeypatch):
    """configure_loggers adds file handlers once."""
    monkeypatch.setattr(logger_module, "_loggers_configured", False)

    configure_loggers(str(tmp_path))
    configure_loggers(str(tmp_path / "ignored"))

    app_logger = logging.getLogger("app")
    assert any(isinstance(h, logging.FileHandler) for h in app_logger.handlers)
    assert not (tmp_path / "ignored").exists()
    for name in logger_module.LOG_FILES.values():
        assert (tmp_path / name).exists()
