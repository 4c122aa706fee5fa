"""
Logger Configuration Module

Provides centralized logging configuration for all backend services.
Supports both file and console logging with different formatters.

Key Features:
- Configurable log levels
- File and console output
- Service-specific loggers
- Rotating file handlers
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional
from .config import settings

# Log file names for every known service logger
LOG_FILES = {
    'app': 'app.log',
    'api': 'api.log',
    'db': 'db.log',
    'auth': 'auth.log',
    'storage': 'storage.log',
}


def setup_logger(name: str, log_file: Optional[str] = None, level=None,
                 logs_dir: Optional[str] = None) -> logging.Logger:
    """
    Set up a logger with file and console handlers.

    Args:
        name: Logger name (e.g., 'api', 'db')
        log_file: Optional log file name. If None, only console logging is used
        level: Optional log level. If None, uses level from settings
        logs_dir: Directory for log_file, defaults to settings.LOGS_DIR

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Remove any existing handlers to prevent duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(level or settings.LOG_LEVEL)
    logger.propagate = False

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(levelname)s - %(name)s - %(message)s'
    )

    # Always add console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file:
        target_dir = logs_dir or settings.LOGS_DIR
        try:
            os.makedirs(target_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(target_dir, log_file),
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            )
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.error(f"Error setting up file handler for {name}: {str(e)}")

    return logger


log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

# Initialize service loggers with console logging only
app_logger = setup_logger('app', None, level=log_level)
api_logger = setup_logger('api', None, level=log_level)
db_logger = setup_logger('db', None, level=log_level)
auth_logger = setup_logger('auth', None, level=log_level)
storage_logger = setup_logger('storage', None, level=log_level)

_KNOWN_LOGGERS = {
    'app': app_logger,
    'api': api_logger,
    'db': db_logger,
    'auth': auth_logger,
    'storage': storage_logger,
}

# Track if loggers have been reconfigured
_loggers_configured = False


def configure_loggers(logs_dir: str) -> None:
    """
    Attach rotating file handlers to the service loggers.

    Safe to call more than once; only the first call has an effect.
    """
    global _loggers_configured
    if _loggers_configured:
        return

    os.makedirs(logs_dir, exist_ok=True)
    for name, log_file in LOG_FILES.items():
        setup_logger(name, log_file, level=log_level, logs_dir=logs_dir)

    app_logger.info(f"Loggers configured with directory: {logs_dir}")
    _loggers_configured = True


def get_logger(name: str, level=None) -> logging.Logger:
    """
    Get or create a logger for a component.

    For known services, returns the pre-configured logger.
    For new services, creates a console-only logger.
    """
    if name in _KNOWN_LOGGERS:
        return _KNOWN_LOGGERS[name]
    return setup_logger(name, None, level=level or log_level)


__all__ = [
    'app_logger',
    'api_logger',
    'db_logger',
    'auth_logger',
    'storage_logger',
    'setup_logger',
    'get_logger',
    'configure_loggers',
]
