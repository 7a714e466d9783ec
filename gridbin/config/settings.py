"""
Application Configuration

Settings are read from an optional config.json, then overlaid by
environment variables. The JSON file keeps the nested shape used by
existing deployments:

    {
        "mongodb": {"uri": "...", "database": "..."},
        "server": {"host": "...", "port": 8080},
        "upload": {"maxSize": 104857600, "baseURL": "https://example.com"}
    }

A .env file is loaded into the environment by main.py before this runs.
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

DEFAULT_CONFIG_FILE = "config.json"

STORAGE_BACKENDS = ("gridfs", "local")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# (section, key) in config.json -> attribute
JSON_FIELDS = {
    ("mongodb", "uri"): "mongo_uri",
    ("mongodb", "database"): "mongo_database",
    ("server", "host"): "host",
    ("server", "port"): "port",
    ("upload", "maxSize"): "max_upload_size",
    ("upload", "baseURL"): "base_url",
}

ENV_FIELDS = {
    "MONGODB_URI": "mongo_uri",
    "MONGODB_DATABASE": "mongo_database",
    "GRIDFS_BUCKET": "bucket_name",
    "SERVER_HOST": "host",
    "SERVER_PORT": "port",
    "UPLOAD_MAX_SIZE": "max_upload_size",
    "BASE_URL": "base_url",
    "STORAGE_BACKEND": "storage_backend",
    "LOCAL_STORAGE_DIR": "local_storage_dir",
    "STORE_TIMEOUT_SECONDS": "operation_timeout",
    "MONGODB_CONNECT_TIMEOUT_SECONDS": "connect_timeout",
    "LOG_LEVEL": "log_level",
    "FLASK_DEBUG": "debug",
}

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a configuration value is missing or invalid."""
    pass


class AppConfig:
    """
    Application configuration.

    Precedence, lowest first: built-in defaults, config.json, environment,
    keyword overrides (used by tests and embedding code).

    Raises:
        ConfigurationError: If the config file is unreadable or any value
            fails validation
    """

    def __init__(
        self,
        config_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ):
        environ = os.environ if environ is None else environ

        self.mongo_uri = "mongodb://localhost:27017"
        self.mongo_database = "gridbin"
        self.bucket_name = "fs"
        self.host = "0.0.0.0"
        self.port = 8080
        self.max_upload_size = 100 * 1024 * 1024
        self.base_url = "http://localhost:8080"
        self.storage_backend = "gridfs"
        self.local_storage_dir = "/tmp/gridbin"
        self.operation_timeout = 30.0
        self.connect_timeout = 10.0
        self.log_level = "INFO"
        self.debug = False

        self.config_file = self._locate_config_file(config_file, environ)
        if self.config_file is not None:
            self._apply(self._read_config_file(self.config_file), source=str(self.config_file))
            logger.debug(f"Loaded configuration from {self.config_file}")

        self._apply(
            {attr: environ[name] for name, attr in ENV_FIELDS.items() if environ.get(name)},
            source="environment",
        )

        unknown = set(overrides) - set(ENV_FIELDS.values())
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        self._apply(overrides, source="overrides")

        self._validate()

    @staticmethod
    def _locate_config_file(config_file: Optional[str], environ: Mapping[str, str]) -> Optional[Path]:
        explicit = config_file or environ.get("GRIDBIN_CONFIG_FILE")
        if explicit:
            path = Path(explicit)
            if not path.is_file():
                raise ConfigurationError(f"Config file not found: {path}")
            return path

        default = Path(DEFAULT_CONFIG_FILE)
        return default if default.is_file() else None

    @staticmethod
    def _read_config_file(path: Path) -> Dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Error reading {path}: {e}") from e

        if not isinstance(document, dict):
            raise ConfigurationError(f"{path} must contain a JSON object")

        values = {}
        for (section, key), attr in JSON_FIELDS.items():
            block = document.get(section)
            if isinstance(block, dict) and key in block:
                values[attr] = block[key]
        return values

    def _apply(self, values: Mapping[str, Any], source: str) -> None:
        for attr, raw in values.items():
            try:
                setattr(self, attr, self._coerce(attr, raw))
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid value for {attr} from {source}: {raw!r}") from e

    @staticmethod
    def _coerce(attr: str, raw: Any) -> Any:
        if attr in ("port", "max_upload_size"):
            if isinstance(raw, bool) or isinstance(raw, float):
                raise ValueError(raw)
            return int(raw)
        if attr in ("operation_timeout", "connect_timeout"):
            if isinstance(raw, bool):
                raise ValueError(raw)
            return float(raw)
        if attr == "debug":
            if isinstance(raw, bool):
                return raw
            return str(raw).strip().lower() in ("1", "true", "yes", "on")
        if attr == "storage_backend":
            return str(raw).strip().lower()
        if attr == "log_level":
            return str(raw).strip().upper()
        if not isinstance(raw, str):
            raise TypeError(raw)
        return raw

    def _validate(self) -> None:
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"Port out of range: {self.port}")
        if self.max_upload_size <= 0:
            raise ConfigurationError("Upload max size must be positive")
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ConfigurationError(
                f"Unknown storage backend {self.storage_backend!r}, "
                f"expected one of {', '.join(STORAGE_BACKENDS)}"
            )
        if self.operation_timeout <= 0 or self.connect_timeout <= 0:
            raise ConfigurationError("Timeouts must be positive")
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level {self.log_level!r}")
        if not self.base_url:
            raise ConfigurationError("Base URL must not be empty")
        if self.storage_backend == "gridfs" and not (self.mongo_uri and self.mongo_database):
            raise ConfigurationError("MongoDB URI and database are required for the gridfs backend")

    @property
    def redacted_mongo_uri(self) -> str:
        """The MongoDB URI with any credentials masked, safe to log."""
        return re.sub(r"//[^/@]+@", "//***@", self.mongo_uri)

    def __repr__(self) -> str:
        return (
            f"AppConfig(storage_backend={self.storage_backend!r}, "
            f"mongo_uri={self.redacted_mongo_uri!r}, mongo_database={self.mongo_database!r}, "
            f"host={self.host!r}, port={self.port}, max_upload_size={self.max_upload_size})"
        )
