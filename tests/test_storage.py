"""Tests for resource payloads, data URIs and the directory store."""

import base64

import pytest

from image_resize.errors import (
    InvalidResourceIdError,
    PayloadError,
    ResourceNotFoundError,
    SparsePayloadError,
    UnrecognizedPayloadError,
)
from image_resize.storage import (
    BufferPayload,
    DirectoryResourceStore,
    IndexedPayload,
    coerce_payload,
    parse_data_uri,
    payload_to_bytes,
    resource_to_data_uri,
    to_data_uri,
    validate_resource_id,
)

RESOURCE_ID = "a" * 32
OTHER_ID = "0123456789abcdef0123456789abcdef"


class TestCoercePayload:
    """Tests for mapping host values onto the payload union."""

    def test_bytes(self):
        assert coerce_payload(b"abc") == BufferPayload(b"abc")

    def test_bytearray_and_list(self):
        assert coerce_payload(bytearray(b"ab")) == BufferPayload(b"ab")
        assert coerce_payload([1, 2, 3]) == BufferPayload(b"\x01\x02\x03")

    def test_index_mapping(self):
        payload = coerce_payload({"0": 65, "1": 66})
        assert isinstance(payload, IndexedPayload)
        assert payload_to_bytes(payload) == b"AB"

    def test_integer_keys_are_stringified(self):
        assert payload_to_bytes(coerce_payload({0: 1, 1: 2})) == b"\x01\x02"

    def test_body_wrapper(self):
        assert coerce_payload({"body": b"xyz"}) == BufferPayload(b"xyz")

    def test_unknown_shape(self):
        with pytest.raises(UnrecognizedPayloadError):
            coerce_payload("a string")

    def test_list_with_bad_values(self):
        with pytest.raises(UnrecognizedPayloadError):
            coerce_payload([1, 300])


class TestPayloadToBytes:
    """Tests for payload conversion."""

    def test_sparse_mapping(self):
        """A gap in the indices is reported with the missing index."""
        with pytest.raises(SparsePayloadError) as exc_info:
            payload_to_bytes(IndexedPayload({"0": 1, "2": 3}))
        assert exc_info.value.missing_index == 1
        assert "missing index 1" in str(exc_info.value)

    def test_not_zero_based(self):
        with pytest.raises(SparsePayloadError) as exc_info:
            payload_to_bytes(IndexedPayload({"1": 1, "2": 2}))
        assert exc_info.value.missing_index == 0

    def test_out_of_range_value(self):
        with pytest.raises(PayloadError):
            payload_to_bytes(IndexedPayload({"0": 256}))

    def test_mapping_without_indices(self):
        with pytest.raises(UnrecognizedPayloadError):
            payload_to_bytes(IndexedPayload({"foo": 1}))


class TestDataUri:
    """Tests for data URI encoding and decoding."""

    def test_to_data_uri(self):
        uri = to_data_uri(b"\x89PNG", "image/png")
        assert uri == "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()

    def test_missing_mime_uses_default(self):
        assert to_data_uri(b"x", "").startswith("data:application/octet-stream;base64,")

    def test_parse(self):
        assert parse_data_uri(to_data_uri(b"hello", "image/gif")) == ("image/gif", b"hello")

    def test_parse_percent_encoded(self):
        assert parse_data_uri("data:,a%20b") == ("text/plain", b"a b")

    def test_parse_invalid(self):
        with pytest.raises(PayloadError):
            parse_data_uri("https://example.com")
        with pytest.raises(PayloadError):
            parse_data_uri("data:image/png;base64,@@@")


class TestValidateResourceId:
    def test_valid(self):
        assert validate_resource_id(RESOURCE_ID) == RESOURCE_ID

    def test_invalid(self):
        with pytest.raises(InvalidResourceIdError) as exc_info:
            validate_resource_id("../etc/passwd")
        assert exc_info.value.resource_id == "../etc/passwd"


class TestDirectoryResourceStore:
    """Tests for DirectoryResourceStore."""

    def test_finds_file_with_extension(self, store, resources_dir):
        assert store.resource_path(RESOURCE_ID) == resources_dir / f"{RESOURCE_ID}.png"
        assert store.resource_mime(RESOURCE_ID) == "image/png"

    def test_finds_file_without_extension(self, tmp_path):
        (tmp_path / OTHER_ID).write_bytes(b"data")
        store = DirectoryResourceStore(tmp_path)
        assert store.resource_path(OTHER_ID) == tmp_path / OTHER_ID
        assert store.resource_mime(OTHER_ID) == "application/octet-stream"

    def test_missing_resource(self, store):
        with pytest.raises(ResourceNotFoundError):
            store.resource_path(OTHER_ID)

    def test_rejects_invalid_id(self, store):
        with pytest.raises(InvalidResourceIdError):
            store.resource_path("*")

    def test_payload(self, store, resources_dir):
        payload = store.resource_payload(RESOURCE_ID)
        assert payload.data == (resources_dir / f"{RESOURCE_ID}.png").read_bytes()

    def test_resource_to_data_uri(self, store):
        assert resource_to_data_uri(store, RESOURCE_ID).startswith("data:image/png;base64,")
