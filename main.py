"""
main.py

Entry point for the gridbin file host.

Loads .env, configures logging, builds the app and runs the development
server. In production serve ``main:app`` with a WSGI server instead.
"""

import atexit

from dotenv import load_dotenv

load_dotenv()

from gridbin.app_factory import create_app  # noqa: E402
from gridbin.config import AppConfig, configure_logging  # noqa: E402

config = AppConfig()
configure_logging(config.log_level)

app = create_app(config)

atexit.register(app.container.shutdown)

if __name__ == "__main__":
    app.logger.info(f"Starting server on {config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=config.debug)
