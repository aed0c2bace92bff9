"""Centralized logging configuration for the catpoint security system."""

import logging
import logging.handlers
import os
import sys
from datetime import datetime
from typing import Optional, Dict, Any
from pathlib import Path

LOGGER_PREFIX = "catpoint"


class StructuredFormatter(logging.Formatter):
    """Custom formatter that adds structured information to log records."""

    def __init__(self, include_context: bool = True):
        self.include_context = include_context
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with structured information."""
        base_format = "%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s"

        if self.include_context and hasattr(record, 'context'):
            context_str = " | ".join([f"{k}={v}" for k, v in record.context.items()])
            base_format += f" | Context: {context_str}"

        if record.levelno >= logging.ERROR and record.exc_info:
            base_format += " | %(pathname)s:%(lineno)d"

        formatter = logging.Formatter(base_format)
        return formatter.format(record)


class ContextFilter(logging.Filter):
    """Filter that adds system context to log records."""

    def __init__(self, component_name: Optional[str] = None):
        super().__init__()
        self.component_name = component_name
        self.process_id = os.getpid()

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context information to log record."""
        record.process_id = self.process_id

        if self.component_name:
            record.component = self.component_name

        return True


class LoggingManager:
    """Centralized logging management for the security system.

    Component loggers can be handed out before any handlers exist; handlers
    are only attached once configure_handlers() runs, so importing the
    package never touches the filesystem.
    """

    def __init__(self, log_dir: str = "logs"):
        self.log_dir = Path(log_dir)

        # Log files
        self.main_log_file = self.log_dir / "catpoint.log"
        self.error_log_file = self.log_dir / "errors.log"

        # Logging configuration
        self.log_level = logging.INFO
        self.max_log_size = 10 * 1024 * 1024  # 10MB
        self.backup_count = 5

        self.component_loggers: Dict[str, logging.Logger] = {}
        self.handlers_configured = False

    def configure_handlers(self) -> None:
        """Attach console and rotating file handlers to the package logger."""
        self.log_dir.mkdir(parents=True, exist_ok=True)

        package_logger = logging.getLogger(LOGGER_PREFIX)
        package_logger.setLevel(self.log_level)

        # Clear existing handlers
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()

        # Console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(StructuredFormatter(include_context=False))
        package_logger.addHandler(console_handler)

        # Main log file handler (rotating)
        main_file_handler = logging.handlers.RotatingFileHandler(
            self.main_log_file,
            maxBytes=self.max_log_size,
            backupCount=self.backup_count
        )
        main_file_handler.setLevel(logging.DEBUG)
        main_file_handler.setFormatter(StructuredFormatter(include_context=True))
        package_logger.addHandler(main_file_handler)

        # Error log file handler (errors and critical only)
        error_file_handler = logging.handlers.RotatingFileHandler(
            self.error_log_file,
            maxBytes=self.max_log_size,
            backupCount=self.backup_count
        )
        error_file_handler.setLevel(logging.ERROR)
        error_file_handler.setFormatter(StructuredFormatter(include_context=True))
        package_logger.addHandler(error_file_handler)

        self.handlers_configured = True
        package_logger.info("Logging system initialized")

    def get_component_logger(self, component_name: str,
                             log_level: Optional[int] = None) -> logging.Logger:
        """Get or create a logger for a specific component."""
        if component_name in self.component_loggers:
            return self.component_loggers[component_name]

        logger = logging.getLogger(f"{LOGGER_PREFIX}.{component_name}")

        if log_level:
            logger.setLevel(log_level)

        logger.addFilter(ContextFilter(component_name))

        self.component_loggers[component_name] = logger
        return logger

    def log_with_context(self, logger: logging.Logger, level: int,
                         message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Log message with additional context information."""
        if context:
            if not logger.isEnabledFor(level):
                return
            record = logger.makeRecord(
                logger.name, level, "", 0, message, (), None
            )
            record.context = context
            logger.handle(record)
        else:
            logger.log(level, message)

    def set_log_level(self, level: int) -> None:
        """Set the package-wide log level."""
        self.log_level = level
        logging.getLogger(LOGGER_PREFIX).setLevel(level)

    def get_log_stats(self) -> Dict[str, Any]:
        """Get logging statistics."""
        stats = {
            "log_directory": str(self.log_dir),
            "log_files": {},
            "active_loggers": list(self.component_loggers.keys()),
            "log_level": logging.getLevelName(self.log_level),
            "handlers_configured": self.handlers_configured
        }

        for log_file in [self.main_log_file, self.error_log_file]:
            if log_file.exists():
                stats["log_files"][log_file.name] = {
                    "size_mb": log_file.stat().st_size / (1024 * 1024),
                    "modified": datetime.fromtimestamp(log_file.stat().st_mtime).isoformat()
                }

        return stats


# Global logging manager instance
logging_manager = LoggingManager()


def get_logger(component_name: str) -> logging.Logger:
    """Convenience function to get a component logger."""
    return logging_manager.get_component_logger(component_name)


def log_with_context(logger: logging.Logger, level: int, message: str,
                     context: Optional[Dict[str, Any]] = None) -> None:
    """Convenience wrapper around LoggingManager.log_with_context."""
    logging_manager.log_with_context(logger, level, message, context)


def setup_logging(log_level: str = "INFO", log_dir: str = "logs") -> LoggingManager:
    """Setup centralized logging system."""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    # Reuse the global manager so loggers handed out at import time keep working
    logging_manager.log_dir = Path(log_dir)
    logging_manager.main_log_file = logging_manager.log_dir / "catpoint.log"
    logging_manager.error_log_file = logging_manager.log_dir / "errors.log"
    logging_manager.set_log_level(numeric_level)
    logging_manager.configure_handlers()

    return logging_manager
