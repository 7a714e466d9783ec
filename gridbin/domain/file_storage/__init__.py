"""
File Storage Domain

Handles identifier generation, blob storage contracts and the mapping from
public identifiers to stored files.
"""

from .blob_store import BlobReadHandle, BlobRecord, BlobWriteHandle, IBlobStore
from .entities import FileDescriptor, FileView
from .identifiers import IdentifierGenerator
from .services import FileRegistry
from .value_objects import DeleteToken, FileKind, ShortId

__all__ = [
    "BlobReadHandle",
    "BlobRecord",
    "BlobWriteHandle",
    "DeleteToken",
    "FileDescriptor",
    "FileKind",
    "FileRegistry",
    "FileView",
    "IBlobStore",
    "IdentifierGenerator",
    "ShortId",
]
