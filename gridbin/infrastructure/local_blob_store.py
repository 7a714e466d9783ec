"""
Local Blob Store Implementation

Concrete implementation of IBlobStore on the local filesystem, for
development and single-host deployments without MongoDB.

Layout under base_path:
    objects/<id>.part   bytes of an upload still in progress
    objects/<id>.bin    committed content
    objects/<id>.json   sidecar with filename, length, upload date, metadata

A committed object is visible once its sidecar exists; the sidecar is
written atomically after the content file is in place.
"""

import json
import logging
import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional

from gridbin.domain.errors import (
    NotFoundError,
    StoreDeleteError,
    StoreReadError,
    StoreUnavailableError,
    StoreWriteError,
)
from gridbin.domain.file_storage.blob_store import (
    BlobReadHandle,
    BlobRecord,
    BlobWriteHandle,
    IBlobStore,
    get_field,
)

logger = logging.getLogger(__name__)

OBJECTS_DIR = "objects"


def _is_internal_id(value: Any) -> bool:
    if not isinstance(value, str) or len(value) != 32:
        return False
    try:
        int(value, 16)
    except ValueError:
        return False
    return True


class LocalWriteHandle(BlobWriteHandle):
    """Writes into a .part file and publishes it on commit."""

    def __init__(self, store: "LocalBlobStore", internal_id: str, filename: str, metadata: Dict[str, Any]):
        super().__init__()
        self._store = store
        self._internal_id = internal_id
        self._filename = filename
        self._metadata = metadata
        self._length = 0
        self._part_path = store._path(internal_id, ".part")
        try:
            self._file = open(self._part_path, "wb")
        except OSError as e:
            raise StoreUnavailableError(f"Cannot open {self._part_path}: {e}", e) from e

    @property
    def internal_id(self) -> str:
        return self._internal_id

    @property
    def length(self) -> int:
        return self._length

    def write(self, data: bytes) -> None:
        try:
            self._file.write(data)
        except OSError as e:
            raise StoreWriteError(f"Failed writing {self._part_path}: {e}", e) from e
        self._length += len(data)

    def _commit(self) -> None:
        try:
            self._file.flush()
            os.fsync(self._file.fileno())
            self._file.close()
            os.replace(self._part_path, self._store._path(self._internal_id, ".bin"))
            self._store._write_sidecar(
                self._internal_id,
                {
                    "filename": self._filename,
                    "length": self._length,
                    "upload_date": datetime.now(timezone.utc).isoformat(),
                    "metadata": self._metadata,
                },
            )
        except OSError as e:
            self._discard()
            raise StoreWriteError(f"Failed committing {self._internal_id}: {e}", e) from e

    def _abort(self) -> None:
        self._discard()

    def _discard(self) -> None:
        if not self._file.closed:
            self._file.close()
        for suffix in (".part", ".bin"):
            try:
                self._store._path(self._internal_id, suffix).unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove {self._internal_id}{suffix}: {e}")


class LocalReadHandle(BlobReadHandle):
    """Sequential reads from a committed .bin file."""

    def __init__(self, file_obj, length: int):
        self._file = file_obj
        self._length = length

    @property
    def length(self) -> int:
        return self._length

    def read(self, size: int = -1) -> bytes:
        try:
            return self._file.read(size)
        except OSError as e:
            raise StoreReadError(f"Failed reading {self._file.name}: {e}", e) from e

    def close(self) -> None:
        self._file.close()


class LocalBlobStore(IBlobStore):
    """
    Local filesystem implementation of IBlobStore.

    Lookups scan every sidecar, so this backend suits small stores only.
    Sidecars that cannot be parsed are skipped with a warning.

    Thread Safety:
        Each upload writes its own uniquely named files. Publication relies
        on os.replace, which is atomic on POSIX filesystems.

    Attributes:
        base_path: Root directory of the store
    """

    def __init__(self, base_path: str = "/tmp/gridbin"):
        """
        Initialize the local blob store.

        Args:
            base_path: Root directory, created if missing

        Raises:
            StoreUnavailableError: If the directory cannot be created
        """
        self.base_path = Path(base_path)
        self.objects_path = self.base_path / OBJECTS_DIR
        self._ensure_base_directory()

    def _ensure_base_directory(self) -> None:
        try:
            self.objects_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailableError(
                f"Failed to create storage directory: {self.objects_path}", e
            ) from e

    def _path(self, internal_id: str, suffix: str) -> Path:
        return self.objects_path / f"{internal_id}{suffix}"

    def _write_sidecar(self, internal_id: str, document: Dict[str, Any]) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self.objects_path, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f)
            os.replace(tmp_name, self._path(internal_id, ".json"))
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _read_sidecar(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            with open(path, encoding="utf-8") as f:
                document = json.load(f)
        except FileNotFoundError:
            # Deleted between listing and reading
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping unreadable sidecar {path.name}: {e}")
            return None
        if not isinstance(document, dict):
            logger.warning(f"Skipping malformed sidecar {path.name}")
            return None
        return document

    def _iter_sidecars(self) -> Iterator[tuple]:
        try:
            paths = sorted(self.objects_path.glob("*.json"))
        except OSError as e:
            raise StoreUnavailableError(f"Cannot list {self.objects_path}: {e}", e) from e
        for path in paths:
            document = self._read_sidecar(path)
            if document is not None:
                yield path.stem, document

    # IBlobStore interface methods

    def open_write(self, filename: str, metadata: Mapping[str, Any]) -> LocalWriteHandle:
        return LocalWriteHandle(self, uuid.uuid4().hex, filename, dict(metadata))

    def open_read(self, internal_id: Any) -> LocalReadHandle:
        if not _is_internal_id(internal_id):
            raise NotFoundError(f"No object {internal_id!r}")
        path = self._path(internal_id, ".bin")
        if not self._path(internal_id, ".json").exists():
            raise NotFoundError(f"No object {internal_id}")
        try:
            file_obj = open(path, "rb")
        except FileNotFoundError as e:
            raise NotFoundError(f"No object {internal_id}", e) from e
        except OSError as e:
            raise StoreReadError(f"Cannot open {path}: {e}", e) from e
        return LocalReadHandle(file_obj, os.fstat(file_obj.fileno()).st_size)

    def find_one_by_metadata(self, field_path: str, value: Any) -> BlobRecord:
        for internal_id, document in self._iter_sidecars():
            if get_field(document, field_path) != value:
                continue
            upload_date = document.get("upload_date")
            try:
                upload_date = datetime.fromisoformat(upload_date) if upload_date else None
            except (TypeError, ValueError):
                upload_date = None
            return BlobRecord(
                internal_id=internal_id,
                filename=document.get("filename"),
                length=document.get("length"),
                metadata=document.get("metadata"),
                upload_date=upload_date,
            )
        raise NotFoundError(f"No file with {field_path}={value!r}")

    def delete(self, internal_id: Any) -> None:
        if not _is_internal_id(internal_id):
            raise NotFoundError(f"No object {internal_id!r}")
        # The sidecar goes first so a concurrent lookup cannot resolve a
        # half-deleted object.
        try:
            self._path(internal_id, ".json").unlink()
        except FileNotFoundError as e:
            raise NotFoundError(f"No object {internal_id}", e) from e
        except OSError as e:
            raise StoreDeleteError(f"Failed to delete {internal_id}: {e}", e) from e

        try:
            self._path(internal_id, ".bin").unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Orphaned content for {internal_id}: {e}")

    def health_check(self) -> bool:
        return self.objects_path.is_dir() and os.access(self.objects_path, os.W_OK)
