"""
GridFS Blob Store Implementation

Concrete implementation of IBlobStore on MongoDB GridFS using pymongo.
File content lives in the bucket's chunks collection; the files collection
holds filename, length, upload date and the metadata document that the
short id and delete token lookups query.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Type

import pymongo
from gridfs import GridFSBucket
from gridfs.errors import NoFile
from pymongo import ASCENDING
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError

from gridbin.domain.errors import (
    DomainError,
    NotFoundError,
    StoreDeleteError,
    StoreReadError,
    StoreUnavailableError,
    StoreWriteError,
)
from gridbin.domain.file_storage.blob_store import (
    INDEXED_METADATA_FIELDS,
    BlobReadHandle,
    BlobRecord,
    BlobWriteHandle,
    IBlobStore,
)

logger = logging.getLogger(__name__)


def _is_unavailable(error: PyMongoError) -> bool:
    return isinstance(error, ConnectionFailure) or getattr(error, "timeout", False)


@contextmanager
def store_call(
    action: str,
    fault: Type[DomainError] = StoreUnavailableError,
    timeout: Optional[float] = None,
) -> Iterator[None]:
    """
    Run a driver call under a deadline and translate its errors.

    NoFile becomes NotFoundError, connection failures and timeouts become
    StoreUnavailableError, any other driver fault becomes ``fault``.
    """
    try:
        if timeout is None:
            yield
        else:
            with pymongo.timeout(timeout):
                yield
    except NoFile as e:
        raise NotFoundError(f"{action}: no such file", e) from e
    except PyMongoError as e:
        if _is_unavailable(e):
            raise StoreUnavailableError(f"{action}: store unavailable: {e}", e) from e
        raise fault(f"{action} failed: {e}", e) from e


class GridFSWriteHandle(BlobWriteHandle):
    """Wraps a GridIn; abort removes any chunks already flushed."""

    def __init__(self, grid_in, timeout: float):
        super().__init__()
        self._grid_in = grid_in
        self._timeout = timeout
        self._length = 0

    @property
    def internal_id(self) -> Any:
        return self._grid_in._id

    @property
    def length(self) -> int:
        return self._length

    def write(self, data: bytes) -> None:
        with store_call("GridFS write", StoreWriteError):
            self._grid_in.write(data)
        self._length += len(data)

    def _commit(self) -> None:
        # close() inserts the files document, the visibility switch
        with store_call("GridFS finalize", StoreWriteError, self._timeout):
            self._grid_in.close()

    def _abort(self) -> None:
        try:
            with store_call("GridFS abort", StoreWriteError, self._timeout):
                self._grid_in.abort()
        except DomainError as e:
            # No files document was written, so nothing is resolvable; only
            # orphan chunks may remain.
            logger.warning(f"Could not remove chunks of aborted upload {self.internal_id}: {e}")


class GridFSReadHandle(BlobReadHandle):
    """Wraps a GridOut for sequential reads."""

    def __init__(self, grid_out):
        self._grid_out = grid_out
        self._closed = False

    @property
    def length(self) -> int:
        return self._grid_out.length

    def read(self, size: int = -1) -> bytes:
        with store_call("GridFS read", StoreReadError):
            return self._grid_out.read(size)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._grid_out.close()


class GridFSBlobStore(IBlobStore):
    """
    MongoDB GridFS implementation of IBlobStore.

    Lookups, stream opens and deletes each run under pymongo.timeout with
    the configured operation timeout, so a stalled server surfaces as
    StoreUnavailableError instead of blocking the request.

    Thread Safety:
        pymongo clients and GridFSBucket are safe to share across threads.

    Attributes:
        bucket_name: GridFS bucket prefix (files in <bucket>.files)
        operation_timeout: Deadline in seconds for each store call
    """

    def __init__(self, database: Database, bucket_name: str = "fs", operation_timeout: float = 30.0):
        """
        Initialize the GridFS blob store.

        Args:
            database: pymongo database holding the bucket
            bucket_name: GridFS bucket name
            operation_timeout: Seconds allowed per store interaction
        """
        self.database = database
        self.bucket_name = bucket_name
        self.operation_timeout = operation_timeout
        self._bucket = GridFSBucket(database, bucket_name=bucket_name)
        self._files = database[f"{bucket_name}.files"]

    def ensure_indexes(self) -> None:
        """
        Create the indexes the short id and delete token lookups rely on.

        Without them every lookup is a collection scan.

        Raises:
            StoreUnavailableError: If the server cannot be reached
        """
        with store_call("Index creation", timeout=self.operation_timeout):
            for field_path in INDEXED_METADATA_FIELDS:
                self._files.create_index([(field_path, ASCENDING)])
        logger.info(
            f"Ensured indexes on {self.bucket_name}.files: {', '.join(INDEXED_METADATA_FIELDS)}"
        )

    # IBlobStore interface methods

    def open_write(self, filename: str, metadata: Mapping[str, Any]) -> GridFSWriteHandle:
        with store_call("Open upload stream", timeout=self.operation_timeout):
            grid_in = self._bucket.open_upload_stream(filename, metadata=dict(metadata))
        return GridFSWriteHandle(grid_in, self.operation_timeout)

    def open_read(self, internal_id: Any) -> GridFSReadHandle:
        with store_call("Open download stream", StoreReadError, self.operation_timeout):
            grid_out = self._bucket.open_download_stream(internal_id)
        return GridFSReadHandle(grid_out)

    def find_one_by_metadata(self, field_path: str, value: Any) -> BlobRecord:
        with store_call(f"Lookup by {field_path}", StoreReadError, self.operation_timeout):
            cursor = self._bucket.find({field_path: value}, limit=1)
            try:
                for grid_out in cursor:
                    return BlobRecord(
                        internal_id=grid_out._id,
                        filename=grid_out.filename,
                        length=grid_out.length,
                        metadata=grid_out.metadata,
                        upload_date=grid_out.upload_date,
                    )
            finally:
                cursor.close()

        raise NotFoundError(f"No file with {field_path}={value!r}")

    def delete(self, internal_id: Any) -> None:
        with store_call("Delete", StoreDeleteError, self.operation_timeout):
            self._bucket.delete(internal_id)

    def health_check(self) -> bool:
        try:
            with store_call("Ping", timeout=self.operation_timeout):
                self.database.command("ping")
            return True
        except DomainError as e:
            logger.warning(f"GridFS health check failed: {e}")
            return False
