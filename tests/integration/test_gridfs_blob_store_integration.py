"""
Integration tests for GridFSBlobStore against a real MongoDB server.

Skipped unless MONGODB_TEST_URI points at a reachable server, e.g.:

    MONGODB_TEST_URI=mongodb://localhost:27017 pytest -m mongodb
"""

import os
import uuid

import pytest
from pymongo.errors import PyMongoError

from gridbin.domain.errors import NotFoundError
from gridbin.domain.file_storage.blob_store import DELETE_TOKEN_FIELD, SHORT_ID_FIELD
from gridbin.infrastructure.gridfs_blob_store import GridFSBlobStore
from gridbin.infrastructure.mongo_connection import MongoConnectionManager

MONGODB_TEST_URI = os.environ.get("MONGODB_TEST_URI")

pytestmark = [
    pytest.mark.mongodb,
    pytest.mark.skipif(not MONGODB_TEST_URI, reason="MONGODB_TEST_URI not set"),
]


@pytest.fixture
def connection():
    manager = MongoConnectionManager(MONGODB_TEST_URI, f"gridbin_test_{uuid.uuid4().hex[:8]}", connect_timeout=2.0)
    try:
        manager.client.admin.command("ping")
    except PyMongoError:
        manager.close()
        pytest.skip("MongoDB not reachable")
    yield manager
    manager.client.drop_database(manager.database_name)
    manager.close()


@pytest.fixture
def store(connection):
    gridfs_store = GridFSBlobStore(connection.database, operation_timeout=10.0)
    gridfs_store.ensure_indexes()
    return gridfs_store


def _metadata(short_id="abcde", delete_token="fghijklmno"):
    return {"short_id": short_id, "delete_token": delete_token, "content_type": "application/octet-stream"}


def test_round_trip_across_chunks(store):
    # Larger than one 255 KiB GridFS chunk
    payload = os.urandom(600 * 1024)
    with store.open_write("big.bin", _metadata()) as handle:
        for offset in range(0, len(payload), 64 * 1024):
            handle.write(payload[offset:offset + 64 * 1024])

    record = store.find_one_by_metadata(SHORT_ID_FIELD, "abcde")
    assert record.length == len(payload)
    assert record.upload_date is not None

    with store.open_read(record.internal_id) as reader:
        assert b"".join(reader.iter_chunks()) == payload


def test_indexes_exist(store, connection):
    index_keys = [
        list(index["key"].keys())
        for index in connection.database["fs.files"].list_indexes()
    ]

    assert [SHORT_ID_FIELD] in index_keys
    assert [DELETE_TOKEN_FIELD] in index_keys


def test_abort_leaves_no_files_or_chunks(store, connection):
    with pytest.raises(RuntimeError):
        with store.open_write("a.bin", _metadata()) as handle:
            handle.write(os.urandom(300 * 1024))
            raise RuntimeError("client went away")

    with pytest.raises(NotFoundError):
        store.find_one_by_metadata(SHORT_ID_FIELD, "abcde")
    assert connection.database["fs.chunks"].count_documents({"files_id": handle.internal_id}) == 0


def test_delete_then_not_found(store):
    with store.open_write("a.bin", _metadata()) as handle:
        handle.write(b"abc")

    store.delete(handle.internal_id)

    with pytest.raises(NotFoundError):
        store.delete(handle.internal_id)
    with pytest.raises(NotFoundError):
        store.open_read(handle.internal_id)


def test_health_check(store):
    assert store.health_check() is True
