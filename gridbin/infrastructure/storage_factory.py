"""
Storage Factory

Builds the blob store selected by configuration. The application layer
only sees IBlobStore, so the backend can change without touching it.
"""

import logging
from typing import Optional, Tuple

from gridbin.config.settings import AppConfig
from gridbin.domain.errors import DomainError
from gridbin.domain.file_storage.blob_store import IBlobStore

from .gridfs_blob_store import GridFSBlobStore
from .local_blob_store import LocalBlobStore
from .mongo_connection import MongoConnectionManager

logger = logging.getLogger(__name__)


class StorageFactory:
    """Factory for the configured IBlobStore implementation."""

    @staticmethod
    def create_blob_store(config: AppConfig) -> Tuple[IBlobStore, Optional[MongoConnectionManager]]:
        """
        Create the blob store named by config.storage_backend.

        Returns:
            Tuple of (store, connection manager); the manager is None for
            the local backend

        Raises:
            StoreUnavailableError: If the local directory cannot be created
        """
        if config.storage_backend == "local":
            return StorageFactory._create_local_store(config), None
        return StorageFactory._create_gridfs_store(config)

    @staticmethod
    def _create_local_store(config: AppConfig) -> LocalBlobStore:
        store = LocalBlobStore(config.local_storage_dir)
        logger.info(f"Storage factory: using local filesystem storage at {config.local_storage_dir}")
        return store

    @staticmethod
    def _create_gridfs_store(config: AppConfig) -> Tuple[GridFSBlobStore, MongoConnectionManager]:
        """
        Connect to MongoDB and build the GridFS store.

        The client connects lazily, so an unreachable server does not fail
        start-up; index creation is attempted and a failure is logged,
        leaving /health to report the store as degraded.
        """
        connection = MongoConnectionManager(
            config.mongo_uri,
            config.mongo_database,
            connect_timeout=config.connect_timeout,
            socket_timeout=config.operation_timeout,
        )
        store = GridFSBlobStore(
            connection.database,
            bucket_name=config.bucket_name,
            operation_timeout=config.operation_timeout,
        )
        logger.info(
            f"Storage factory: using GridFS bucket '{config.bucket_name}' in "
            f"{config.mongo_database} at {config.redacted_mongo_uri}"
        )

        try:
            store.ensure_indexes()
        except DomainError as e:
            logger.error(f"Could not create GridFS indexes: {e}")

        return store, connection
