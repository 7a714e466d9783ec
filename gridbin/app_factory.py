"""
Application Factory

Creates and configures the Flask application with all dependencies.
The blob store is built once here and injected; tests pass their own
store to run the full HTTP stack without MongoDB.
"""

import logging
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from gridbin.api import api_bp, register_error_handlers, viewer_bp
from gridbin.application.dependency_container import DependencyContainer
from gridbin.application.transfer_service import TransferService
from gridbin.config.settings import AppConfig
from gridbin.domain.file_storage.blob_store import IBlobStore
from gridbin.domain.file_storage.identifiers import IdentifierGenerator
from gridbin.domain.file_storage.services import FileRegistry
from gridbin.infrastructure.mongo_connection import MongoConnectionManager
from gridbin.infrastructure.storage_factory import StorageFactory

logger = logging.getLogger(__name__)

# Room for multipart boundaries and part headers on top of the file itself
MULTIPART_OVERHEAD = 64 * 1024


def create_app(config: Optional[AppConfig] = None, blob_store: Optional[IBlobStore] = None) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, read from config.json and the
            environment if None
        blob_store: Store to use instead of the configured backend

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_size + MULTIPART_OVERHEAD
    app.config["GRIDBIN_MAX_UPLOAD_SIZE"] = config.max_upload_size
    # Error bodies are {"error": ...} only
    app.config["ERROR_INCLUDE_MESSAGE"] = False

    # Integrations upload from other origins; there are no credentials to protect
    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "send_wildcard": True,
                "methods": ["GET", "POST", "OPTIONS"],
                "allow_headers": ["Content-Type"],
                "expose_headers": ["Content-Disposition", "Content-Length"],
                "max_age": 3600,
            }
        },
    )

    _initialize_services(app, config, blob_store)
    _register_blueprints(app)
    register_error_handlers(app)
    _register_health_endpoint(app)

    return app


def _initialize_services(app: Flask, config: AppConfig, blob_store: Optional[IBlobStore]) -> None:
    """
    Build the service graph and attach it to the app through DependencyContainer.

    API routes resolve TransferService via ``current_app.container``.

    Args:
        app: Flask application
        config: Application configuration
        blob_store: Injected store, or None to build the configured one
    """
    container = DependencyContainer()

    connection = None
    if blob_store is None:
        blob_store, connection = StorageFactory.create_blob_store(config)
    else:
        logger.info(f"Using injected blob store {type(blob_store).__name__}")

    registry = FileRegistry(blob_store)
    identifier_generator = IdentifierGenerator()
    transfer_service = TransferService(
        registry,
        blob_store,
        identifier_generator,
        max_upload_size=config.max_upload_size,
        base_url=config.base_url,
    )

    container.register_singleton(AppConfig, config)
    if connection is not None:
        container.register_singleton(MongoConnectionManager, connection, owned=True)
    container.register_singleton(IBlobStore, blob_store)
    container.register_singleton(FileRegistry, registry)
    container.register_singleton(IdentifierGenerator, identifier_generator)
    container.register_singleton(TransferService, transfer_service)

    app.container = container

    logger.info(f"Application services initialized ({len(container)} registered)")


def _register_blueprints(app: Flask) -> None:
    app.register_blueprint(api_bp)
    app.register_blueprint(viewer_bp)


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Check the blob store and report overall health.

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {"status": "ok", "message": "gridbin ready", "store": "unknown"}

    blob_store = app.container.resolve(IBlobStore)
    if blob_store.health_check():
        health_status["store"] = "connected"
    else:
        health_status["store"] = "disconnected"
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    @app.route("/health", methods=["GET"])
    def health():
        """Health check of the application and its blob store."""
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
