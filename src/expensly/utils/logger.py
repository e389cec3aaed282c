"""Logging infrastructure with category context."""
import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional


class CategoryContextFilter(logging.Filter):
    """Add the active category to log records."""

    def __init__(self):
        super().__init__()
        self.category: Optional[str] = None

    def filter(self, record):
        """Add category to record."""
        record.category = self.category or "system"
        return True


class ExpenslyLogger:
    """Centralized logging manager."""

    def __init__(
        self,
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
        max_file_size_mb: int = 10,
        backup_count: int = 30,
        log_file: str = "service.log"
    ):
        if log_dir is None:
            home = os.getenv("EXPENSLY_HOME") or str(Path.home() / ".expensly")
            log_dir = Path(home) / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / log_file
        self.category_filter = CategoryContextFilter()

        self.logger = logging.getLogger("expensly")
        self.logger.setLevel(getattr(logging, log_level.upper()))
        self.logger.handlers.clear()

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)

        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [category:%(category)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        file_handler.setFormatter(formatter)
        console_handler.setFormatter(formatter)

        file_handler.addFilter(self.category_filter)
        console_handler.addFilter(self.category_filter)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

    def set_category_context(self, category: Optional[str]):
        """Set current category context for logging."""
        self.category_filter.category = category

    def get_logger(self) -> logging.Logger:
        """Get the configured logger."""
        return self.logger


# Global logger instance
_logger_instance: Optional[ExpenslyLogger] = None


def configure_logging(
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
    max_file_size_mb: int = 10,
    backup_count: int = 30,
    log_file: str = "service.log"
) -> logging.Logger:
    """Rebuild the global logger from explicit settings."""
    global _logger_instance
    _logger_instance = ExpenslyLogger(log_level, log_dir, max_file_size_mb, backup_count, log_file)
    return _logger_instance.get_logger()


def get_logger(log_level: str = "INFO") -> logging.Logger:
    """Get or create global logger instance."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = ExpenslyLogger(log_level)
    return _logger_instance.get_logger()


def set_category_context(category: Optional[str]):
    """Set category context for logging."""
    global _logger_instance
    if _logger_instance:
        _logger_instance.set_category_context(category)
