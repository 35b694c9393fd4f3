"""Settings and logging configuration."""

from .logging import JSONExceptionFormatter, get_logger, setup_logging
from .settings import Settings, settings

__all__ = ["Settings", "settings", "setup_logging", "get_logger", "JSONExceptionFormatter"]
