"""Configuration and logging setup."""

from .logging_config import configure_logging
from .settings import AppConfig, ConfigurationError

__all__ = ["AppConfig", "ConfigurationError", "configure_logging"]
