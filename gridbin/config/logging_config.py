"""
Logging Configuration

Configures the root logger once at startup. Modules log through
``logging.getLogger(__name__)``; Flask routes use ``current_app.logger``,
which propagates to the same handler.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - [%(levelname)s] - %(message)s"

NOISY_LOGGERS = ("pymongo", "werkzeug", "urllib3")


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger for the application.

    Call once from the entry point, before the app is created.

    Args:
        level: Root log level name, e.g. 'INFO' or 'DEBUG'
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    # Silence noisy libraries
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
