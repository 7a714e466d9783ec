"""
Transfer Result Value Objects

Outcomes of the upload and raw download operations.
"""

import logging
from dataclasses import dataclass
from typing import Iterator

from gridbin.domain.file_storage.blob_store import DEFAULT_CHUNK_SIZE, BlobReadHandle
from gridbin.domain.file_storage.entities import FileDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    """
    Identifiers issued for a successful upload.

    Attributes:
        short_id: Public identifier for viewing and downloading
        delete_token: Secret token for deletion
        link: Absolute viewer URL
        deletion_link: Absolute deletion URL
    """
    short_id: str
    delete_token: str
    link: str
    deletion_link: str

    def to_dict(self) -> dict:
        return {"link": self.link, "deletion_link": self.deletion_link}


@dataclass(frozen=True)
class DownloadResult:
    """
    An open raw download, ready to stream.

    The read handle is closed once iter_content() is exhausted or closed
    early (client disconnect), or by calling close() directly.
    """
    descriptor: FileDescriptor
    handle: BlobReadHandle
    content_disposition: str
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @property
    def content_type(self) -> str:
        return self.descriptor.content_type

    @property
    def length(self) -> int:
        return self.descriptor.length

    def iter_content(self) -> Iterator[bytes]:
        """Yield the file's bytes in bounded chunks, closing the handle at the end."""
        sent = 0
        try:
            for chunk in self.handle.iter_chunks(self.chunk_size):
                sent += len(chunk)
                yield chunk
        finally:
            self.handle.close()
            if sent < self.descriptor.length:
                logger.info(
                    f"Raw download of {self.descriptor.short_id} stopped after "
                    f"{sent}/{self.descriptor.length} bytes"
                )

    def close(self) -> None:
        self.handle.close()
