"""
Test fixtures package.

Provides the in-memory blob store and helpers for deterministic identifiers.
"""

from .identifier_fixtures import identifier_bytes, sequential_entropy, short_id_entropy
from .mock_blob_store import MockBlobStore, MockReadHandle, MockWriteHandle

__all__ = [
    "MockBlobStore",
    "MockReadHandle",
    "MockWriteHandle",
    "identifier_bytes",
    "sequential_entropy",
    "short_id_entropy",
]
