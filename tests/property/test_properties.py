"""
Property-based tests for identifiers, formatting and the transfer
round-trip.
"""

import io
import re

from hypothesis import given
from hypothesis import strategies as st

from gridbin.application.transfer_service import TransferService
from gridbin.domain.errors import NotFoundError
from gridbin.domain.file_storage.formatting import content_disposition, format_size
from gridbin.domain.file_storage.identifiers import IdentifierGenerator
from gridbin.domain.file_storage.services import FileRegistry
from gridbin.domain.file_storage.value_objects import DeleteToken, FileKind, ShortId
from tests.fixtures import MockBlobStore

from .strategies import (
    client_filenames,
    content_types,
    delete_tokens,
    entropy_bytes,
    malformed_identifiers,
    payloads,
    short_ids,
)

SIZE_LABEL = re.compile(r"^(\d+ B|\d+\.\d [KMGTPE]B)$")


def _service(max_upload_size=1024 * 1024):
    store = MockBlobStore()
    service = TransferService(
        FileRegistry(store),
        store,
        IdentifierGenerator(),
        max_upload_size=max_upload_size,
        base_url="http://files.test",
        chunk_size=512,
    )
    return service, store


class TestIdentifierProperties:
    @given(entropy_bytes())
    def test_any_draw_yields_a_valid_short_id(self, raw):
        short_id = IdentifierGenerator(lambda n: raw).new_short_id()

        assert ShortId.is_valid(short_id)

    @given(entropy_bytes(), entropy_bytes())
    def test_delete_token_is_two_draws(self, first, second):
        draws = iter([first, second])
        generator = IdentifierGenerator(lambda n: next(draws))

        token = generator.new_delete_token()

        assert DeleteToken.is_valid(token)
        assert token[:5] == IdentifierGenerator(lambda n: first).new_short_id()
        assert token[5:] == IdentifierGenerator(lambda n: second).new_short_id()

    @given(malformed_identifiers())
    def test_malformed_identifiers_are_rejected(self, value):
        assert not ShortId.is_valid(value)
        assert not DeleteToken.is_valid(value)

    @given(malformed_identifiers())
    def test_malformed_identifiers_never_reach_the_store(self, value):
        store = MockBlobStore()
        registry = FileRegistry(store)

        for resolve in (registry.resolve_for_view, registry.resolve_for_deletion):
            try:
                resolve(value)
            except NotFoundError:
                pass
            else:
                raise AssertionError(f"{value!r} resolved")

        assert store.get_call_history() == []


class TestFormattingProperties:
    @given(st.integers(min_value=0, max_value=2**70))
    def test_size_label_shape(self, num_bytes):
        assert SIZE_LABEL.match(format_size(num_bytes))

    @given(st.integers(min_value=0, max_value=1023))
    def test_small_sizes_are_exact(self, num_bytes):
        assert format_size(num_bytes) == f"{num_bytes} B"

    @given(client_filenames())
    def test_disposition_is_a_single_safe_header_line(self, filename):
        value = content_disposition(filename)

        assert value.startswith('attachment; filename="')
        assert "\r" not in value
        assert "\n" not in value
        value.encode("ascii")

    @given(content_types())
    def test_kind_follows_top_level_type(self, content_type):
        kind = FileKind.from_content_type(content_type)
        top = content_type.split("/", 1)[0]

        if top in ("image", "video", "audio"):
            assert kind.value == top
        else:
            assert kind is FileKind.FILE


class TestTransferProperties:
    @given(payloads(), client_filenames(), content_types())
    def test_upload_then_download_returns_the_same_bytes(self, payload, filename, content_type):
        service, _ = _service()

        result = service.ingest(io.BytesIO(payload), len(payload), filename, content_type)
        download = service.retrieve_raw(result.short_id)

        assert b"".join(download.iter_content()) == payload
        assert download.length == len(payload)
        assert download.content_type == content_type
        assert service.view(result.short_id).filename == filename

    @given(payloads(max_size=512))
    def test_tokens_resolve_only_through_their_own_route(self, payload):
        service, store = _service()
        result = service.ingest(io.BytesIO(payload), len(payload), "a.bin", None)

        assert result.short_id != result.delete_token
        try:
            service.revoke(result.short_id)
        except NotFoundError:
            pass
        else:
            raise AssertionError("short id revoked a file")
        assert len(store.get_all_objects()) == 1

        service.revoke(result.delete_token)
        assert store.get_all_objects() == {}

    @given(short_ids(), delete_tokens())
    def test_unknown_identifiers_are_not_found(self, short_id, delete_token):
        service, _ = _service()

        for call, value in ((service.view, short_id), (service.revoke, delete_token)):
            try:
                call(value)
            except NotFoundError:
                pass
            else:
                raise AssertionError(f"{value!r} resolved in an empty store")
