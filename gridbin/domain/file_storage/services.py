"""
File Storage Services

Domain services translating public identifiers into stored objects.
"""

import logging
from typing import Any, Tuple

from gridbin.domain.errors import MetadataDecodeError, NotFoundError

from .blob_store import (
    DELETE_TOKEN_FIELD,
    SHORT_ID_FIELD,
    BlobReadHandle,
    BlobRecord,
    IBlobStore,
)
from .entities import FileDescriptor
from .value_objects import DeleteToken, ShortId, normalize_content_type

logger = logging.getLogger(__name__)


class FileRegistry:
    """
    Domain service mapping short ids and delete tokens to stored objects.

    Each resolution performs exactly one metadata lookup against the blob
    store. There is no positive or negative cache. Identifiers with the
    wrong shape cannot exist in the store and resolve to NotFoundError
    without a round-trip.
    """

    def __init__(self, blob_store: IBlobStore):
        """
        Initialize FileRegistry with the blob store.

        Args:
            blob_store: Store holding file content and metadata
        """
        self.blob_store = blob_store

    def resolve_for_view(self, short_id: str) -> FileDescriptor:
        """
        Resolve a short id to the descriptor shown on the viewer page.

        Args:
            short_id: Public 5-character identifier

        Returns:
            FileDescriptor with filename, length, content type and internal id

        Raises:
            NotFoundError: If no live file has this short id
            MetadataDecodeError: If the stored metadata is malformed
        """
        if not ShortId.is_valid(short_id):
            raise NotFoundError(f"Malformed short id: {short_id!r}")

        record = self.blob_store.find_one_by_metadata(SHORT_ID_FIELD, short_id)
        return self._to_descriptor(record, short_id)

    def resolve_for_download(self, short_id: str) -> Tuple[FileDescriptor, BlobReadHandle]:
        """
        Resolve a short id and open its content for streaming.

        The caller owns the returned handle and must close it.

        Raises:
            NotFoundError: If no live file has this short id, or it was
                deleted between the lookup and the open
            MetadataDecodeError: If the stored metadata is malformed
        """
        descriptor = self.resolve_for_view(short_id)
        handle = self.blob_store.open_read(descriptor.internal_id)
        return descriptor, handle

    def resolve_for_deletion(self, delete_token: str) -> Any:
        """
        Resolve a delete token to the internal id of its file.

        Raises:
            NotFoundError: If no live file has this delete token
        """
        if not DeleteToken.is_valid(delete_token):
            raise NotFoundError("Malformed delete token")

        record = self.blob_store.find_one_by_metadata(DELETE_TOKEN_FIELD, delete_token)
        return record.internal_id

    def is_short_id_taken(self, short_id: str) -> bool:
        return self._exists(SHORT_ID_FIELD, short_id)

    def is_delete_token_taken(self, delete_token: str) -> bool:
        return self._exists(DELETE_TOKEN_FIELD, delete_token)

    def _exists(self, field_path: str, value: str) -> bool:
        try:
            self.blob_store.find_one_by_metadata(field_path, value)
        except NotFoundError:
            return False
        return True

    @staticmethod
    def _to_descriptor(record: BlobRecord, short_id: str) -> FileDescriptor:
        """Validate the shape of a stored record and build its descriptor."""
        metadata = record.metadata
        if metadata is None:
            metadata = {}
        if not isinstance(metadata, dict):
            raise MetadataDecodeError(f"Metadata of {record.internal_id} is not a document")

        filename = record.filename if record.filename is not None else ""
        if not isinstance(filename, str):
            raise MetadataDecodeError(f"Filename of {record.internal_id} is not a string")

        length = record.length
        if isinstance(length, bool) or not isinstance(length, int) or length < 0:
            raise MetadataDecodeError(f"Length of {record.internal_id} is not a byte count")

        content_type = metadata.get("content_type")
        if content_type is not None and not isinstance(content_type, str):
            raise MetadataDecodeError(
                f"Content type of {record.internal_id} is not a string"
            )

        return FileDescriptor(
            internal_id=record.internal_id,
            short_id=short_id,
            filename=filename,
            length=length,
            content_type=normalize_content_type(content_type),
        )
