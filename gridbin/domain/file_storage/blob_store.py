"""
Blob Store Interface

Abstract interface for content-plus-metadata object storage.
This abstraction keeps the domain layer infrastructure-agnostic: GridFS,
the local filesystem or an in-memory test double all implement the same
contract.

Contract Guarantees:
- Writes are all-or-nothing. An object becomes visible to lookups only when
  its write handle is committed; an aborted or abandoned handle leaves no
  resolvable object behind.
- Reads are sequential and bounded; callers never receive the whole object
  in memory.
- Missing objects raise NotFoundError, never return None.
- Connection problems and timeouts raise StoreUnavailableError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator, Mapping, Optional

DEFAULT_CHUNK_SIZE = 8192  # 8KB chunks

SHORT_ID_FIELD = "metadata.short_id"
DELETE_TOKEN_FIELD = "metadata.delete_token"
INDEXED_METADATA_FIELDS = (SHORT_ID_FIELD, DELETE_TOKEN_FIELD)


@dataclass(frozen=True)
class BlobRecord:
    """
    Descriptor of a stored object as returned by a metadata lookup.

    Attributes:
        internal_id: Opaque identity assigned by the store on creation
        filename: Name given when the object was written
        length: Size in bytes, finalized at commit
        metadata: Free-form metadata document written with the object
        upload_date: When the object was committed, if the store records it
    """
    internal_id: Any
    filename: Any
    length: Any
    metadata: Any = field(default_factory=dict)
    upload_date: Optional[datetime] = None


class BlobWriteHandle(ABC):
    """
    Streaming write into a new object.

    Use as a context manager: a normal exit commits, an exception aborts.
    """

    def __init__(self):
        self._finished = False

    @property
    @abstractmethod
    def internal_id(self) -> Any:
        """Identity the object will have once committed."""

    @property
    @abstractmethod
    def length(self) -> int:
        """Bytes written so far (final length after commit)."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Append bytes to the object.

        Raises:
            StoreWriteError: On an I/O fault
        """

    @abstractmethod
    def _commit(self) -> None:
        """Make the object durable and visible."""

    @abstractmethod
    def _abort(self) -> None:
        """Discard everything written so far."""

    def commit(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._commit()

    def abort(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._abort()

    def __enter__(self) -> "BlobWriteHandle":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.abort()
        return False


class BlobReadHandle(ABC):
    """Sequential read of an existing object."""

    @property
    @abstractmethod
    def length(self) -> int:
        """Total size of the object in bytes."""

    @abstractmethod
    def read(self, size: int = -1) -> bytes:
        """
        Read up to size bytes; an empty result means end of stream.

        Raises:
            StoreReadError: On an I/O fault
        """

    @abstractmethod
    def close(self) -> None:
        """Release the underlying stream. Safe to call more than once."""

    def iter_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """Yield the object's bytes in chunks of at most chunk_size."""
        while True:
            chunk = self.read(chunk_size)
            if not chunk:
                break
            yield chunk

    def __enter__(self) -> "BlobReadHandle":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


class IBlobStore(ABC):
    """
    Interface for an object store offering streamed binary storage with
    queryable metadata.

    Every call touches durable external state; implementations must not
    add an in-process cache.
    """

    @abstractmethod
    def open_write(self, filename: str, metadata: Mapping[str, Any]) -> BlobWriteHandle:
        """
        Begin a new object.

        Args:
            filename: Name recorded with the object, stored verbatim
            metadata: Metadata document stored with the object

        Returns:
            Write handle; commit it (or leave its context normally) to make
            the object visible

        Raises:
            StoreUnavailableError: If the store cannot accept writes
        """
        pass  # pragma: no cover

    @abstractmethod
    def open_read(self, internal_id: Any) -> BlobReadHandle:
        """
        Open an existing object for sequential reading.

        Raises:
            NotFoundError: If internal_id does not resolve to a live object
            StoreUnavailableError: If the store cannot be reached
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_one_by_metadata(self, field_path: str, value: Any) -> BlobRecord:
        """
        Look up the first object whose metadata field matches value.

        Args:
            field_path: Dotted path such as 'metadata.short_id'
            value: Value to match exactly

        Returns:
            BlobRecord of the first match

        Raises:
            NotFoundError: If no object matches
            StoreUnavailableError: If the store cannot be reached
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, internal_id: Any) -> None:
        """
        Irreversibly remove an object and its metadata.

        Raises:
            NotFoundError: If the object does not exist (including when a
                concurrent delete won the race)
            StoreUnavailableError: If the store cannot be reached
        """
        pass  # pragma: no cover

    def health_check(self) -> bool:
        """Return True when the store is reachable."""
        return True


def get_field(document: Mapping[str, Any], field_path: str) -> Optional[Any]:
    """Resolve a dotted field path against a nested mapping."""
    current: Any = document
    for part in field_path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current
