"""
Transfer Service

Application service that orchestrates the client-facing file operations:
ingest (upload), view, raw retrieval and revoke (delete).
"""

import logging
from typing import BinaryIO, Optional, Tuple

from gridbin.domain.errors import (
    FileTooLargeError,
    IdentifierCollisionError,
    StoreWriteError,
)
from gridbin.domain.file_storage.blob_store import DEFAULT_CHUNK_SIZE, IBlobStore
from gridbin.domain.file_storage.entities import FileView
from gridbin.domain.file_storage.formatting import content_disposition
from gridbin.domain.file_storage.identifiers import IdentifierGenerator
from gridbin.domain.file_storage.services import FileRegistry
from gridbin.domain.file_storage.value_objects import normalize_content_type

from .transfer_result import DownloadResult, UploadResult

logger = logging.getLogger(__name__)

MAX_IDENTIFIER_ATTEMPTS = 5


class TransferService:
    """
    Application service for the upload / view / download / delete workflows.

    Coordinates the FileRegistry (identifier resolution) and the blob store
    (byte-level streaming and deletion). Holds no mutable state between
    calls: everything shared lives in the store, so concurrent requests are
    independent.

    State machine per file:
        absent -> live    on a successful ingest
        live   -> absent  on a successful revoke
    View and raw retrieval never change state.
    """

    def __init__(
        self,
        registry: FileRegistry,
        blob_store: IBlobStore,
        identifier_generator: IdentifierGenerator,
        max_upload_size: int,
        base_url: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Initialize Transfer Service with dependencies.

        Args:
            registry: Domain service resolving identifiers to stored files
            blob_store: Store receiving uploads and serving deletes
            identifier_generator: Source of short ids and delete tokens
            max_upload_size: Largest accepted upload in bytes
            base_url: Public base URL used to compose returned links
            chunk_size: Copy-loop buffer size in bytes
        """
        self.registry = registry
        self.blob_store = blob_store
        self.identifier_generator = identifier_generator
        self.max_upload_size = max_upload_size
        self.base_url = base_url.rstrip("/")
        self.chunk_size = chunk_size

    def ingest(
        self,
        stream: BinaryIO,
        declared_size: Optional[int],
        filename: str,
        content_type: Optional[str],
    ) -> UploadResult:
        """
        Store an uploaded file and issue its identifiers.

        Workflow:
        1. Reject if the declared size is over the limit (no store write)
        2. Default a blank content type to application/octet-stream
        3. Draw a short id and delete token, re-drawing on collision
        4. Stream the input into a new object and commit it
        5. Return both identifiers and the composed links

        Not idempotent: identical content uploaded twice yields two objects.

        Args:
            stream: Readable binary stream positioned at the file start
            declared_size: Size announced by the client, if known
            filename: Original client-supplied name, stored verbatim
            content_type: MIME type from the upload, may be blank

        Returns:
            UploadResult with short id, delete token and links

        Raises:
            FileTooLargeError: If declared or actual size exceeds the limit
            StoreUnavailableError: If the store cannot accept writes
            StoreWriteError: On an I/O fault while copying
            IdentifierGenerationError: If the entropy source fails
            IdentifierCollisionError: If no free identifier could be drawn
        """
        if declared_size is not None and declared_size > self.max_upload_size:
            raise FileTooLargeError(self.max_upload_size, declared_size)

        content_type = normalize_content_type(content_type)
        short_id, delete_token = self._issue_identifiers()

        metadata = {
            "short_id": short_id,
            "delete_token": delete_token,
            "content_type": content_type,
        }

        with self.blob_store.open_write(filename, metadata) as handle:
            written = self._copy_into(stream, handle)

        logger.info(
            f"Stored upload {short_id} ({written} bytes, {content_type})"
        )

        return UploadResult(
            short_id=short_id,
            delete_token=delete_token,
            link=f"{self.base_url}/{short_id}",
            deletion_link=f"{self.base_url}/delete/{delete_token}",
        )

    def view(self, short_id: str) -> FileView:
        """
        Resolve a short id to what the viewer page renders.

        Raises:
            NotFoundError: If no live file has this short id
            MetadataDecodeError: If the stored metadata is malformed
        """
        descriptor = self.registry.resolve_for_view(short_id)
        return FileView.from_descriptor(descriptor)

    def retrieve_raw(self, short_id: str) -> DownloadResult:
        """
        Open a file's content for a raw, attachment-style download.

        The returned result owns an open read handle; stream it with
        iter_content(), which closes the handle when done.

        Raises:
            NotFoundError: If no live file has this short id
            StoreUnavailableError: If the store cannot be reached
        """
        descriptor, handle = self.registry.resolve_for_download(short_id)
        return DownloadResult(
            descriptor=descriptor,
            handle=handle,
            content_disposition=content_disposition(descriptor.filename),
            chunk_size=self.chunk_size,
        )

    def revoke(self, delete_token: str) -> None:
        """
        Delete the file owning this delete token.

        A second revoke with the same token raises NotFoundError, which is
        the expected outcome, as is losing a race against a concurrent
        revoke.

        Raises:
            NotFoundError: If no live file has this delete token
            StoreUnavailableError: If the store cannot be reached
        """
        internal_id = self.registry.resolve_for_deletion(delete_token)
        self.blob_store.delete(internal_id)
        logger.info(f"Deleted file for token {delete_token[:3]}...")

    def _issue_identifiers(self) -> Tuple[str, str]:
        """Draw a free short id and a free delete token."""
        for attempt in range(1, MAX_IDENTIFIER_ATTEMPTS + 1):
            short_id = self.identifier_generator.new_short_id()
            delete_token = self.identifier_generator.new_delete_token()

            if self.registry.is_short_id_taken(short_id):
                logger.warning(f"Short id collision on attempt {attempt}: {short_id}")
                continue
            if self.registry.is_delete_token_taken(delete_token):
                logger.warning(f"Delete token collision on attempt {attempt}")
                continue
            return short_id, delete_token

        raise IdentifierCollisionError(
            f"No free identifier after {MAX_IDENTIFIER_ATTEMPTS} attempts"
        )

    def _copy_into(self, stream: BinaryIO, handle) -> int:
        """Copy stream into handle in bounded chunks, enforcing the size limit."""
        written = 0
        while True:
            try:
                chunk = stream.read(self.chunk_size)
            except OSError as e:
                raise StoreWriteError(f"Failed reading upload stream: {e}", e) from e
            if not chunk:
                return written

            written += len(chunk)
            if written > self.max_upload_size:
                raise FileTooLargeError(self.max_upload_size, written)
            handle.write(chunk)
