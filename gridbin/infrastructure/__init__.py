"""Infrastructure layer for MongoDB GridFS and the local filesystem."""

from .gridfs_blob_store import GridFSBlobStore
from .local_blob_store import LocalBlobStore
from .mongo_connection import MongoConnectionManager
from .storage_factory import StorageFactory

__all__ = [
    "GridFSBlobStore",
    "LocalBlobStore",
    "MongoConnectionManager",
    "StorageFactory",
]
