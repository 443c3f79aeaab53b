"""Resource storage interface, host byte payloads and data URI conversion.

Hosts report resource bytes in one of two shapes: a contiguous byte buffer,
or a mapping whose keys are the stringified indices "0".."n-1". Both are
represented by an explicit tagged union and validated before conversion.
"""

import base64
import binascii
import mimetypes
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote_to_bytes

from .errors import (
    InvalidResourceIdError,
    PayloadError,
    ResourceNotFoundError,
    SparsePayloadError,
    UnrecognizedPayloadError,
)
from .logging import debug
from .patterns import is_resource_id

DEFAULT_MIME = "application/octet-stream"

_DATA_URI = re.compile(r"data:(?P<mime>[^;,]*)(?P<base64>;base64)?,(?P<data>.*)", re.DOTALL)


@dataclass(frozen=True)
class BufferPayload:
    """Resource bytes as one contiguous buffer."""

    data: bytes


@dataclass(frozen=True)
class IndexedPayload:
    """Resource bytes as a mapping of "0".."n-1" to byte values."""

    items: Mapping[str, int]


Payload = BufferPayload | IndexedPayload


class ResourceStore(Protocol):
    """Host storage that owns resource files."""

    def resource_path(self, resource_id: str) -> Path: ...

    def resource_mime(self, resource_id: str) -> str: ...

    def resource_payload(self, resource_id: str) -> Payload: ...


def validate_resource_id(resource_id: str) -> str:
    """Return resource_id unchanged, or raise InvalidResourceIdError."""
    if not is_resource_id(resource_id):
        raise InvalidResourceIdError(resource_id)
    return resource_id


def coerce_payload(raw) -> Payload:
    """Map a raw host value onto the payload union.

    Accepts bytes-like objects, lists of byte values, index-keyed mappings
    and mappings that wrap one of those under a "body" key.

    Raises:
        UnrecognizedPayloadError: For any other shape
    """
    if isinstance(raw, (BufferPayload, IndexedPayload)):
        return raw
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return BufferPayload(bytes(raw))
    if isinstance(raw, (list, tuple)):
        try:
            return BufferPayload(bytes(raw))
        except (TypeError, ValueError) as e:
            raise UnrecognizedPayloadError(f"Byte list holds non-byte values: {e}")
    if isinstance(raw, Mapping):
        if "body" in raw:
            return coerce_payload(raw["body"])
        return IndexedPayload({str(key): value for key, value in raw.items()})
    raise UnrecognizedPayloadError(f"Unknown data format: {type(raw).__name__}")


def _indexed_to_bytes(items: Mapping[str, int]) -> bytes:
    indices = [key for key in items if key.isdigit()]
    if not indices:
        raise UnrecognizedPayloadError("Mapping payload has no index keys")

    debug(f"Converting {len(indices)} bytes from index-keyed payload")
    data = bytearray(len(indices))
    for i in range(len(indices)):
        key = str(i)
        if key not in items:
            raise SparsePayloadError(i)
        value = items[key]
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 255:
            raise PayloadError(f"Invalid byte value at index {i}: {value!r}")
        data[i] = value
    return bytes(data)


def payload_to_bytes(payload: Payload) -> bytes:
    """Convert a payload to bytes, validating index contiguity."""
    if isinstance(payload, BufferPayload):
        return payload.data
    if isinstance(payload, IndexedPayload):
        return _indexed_to_bytes(payload.items)
    raise UnrecognizedPayloadError(f"Unknown data format: {type(payload).__name__}")


def to_data_uri(data: bytes, mime: str) -> str:
    """Encode bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime or DEFAULT_MIME};base64,{encoded}"


def parse_data_uri(uri: str) -> tuple[str, bytes]:
    """Decode a data URI into its MIME type and bytes.

    Raises:
        PayloadError: If the URI is malformed
    """
    match = _DATA_URI.fullmatch(uri)
    if not match:
        raise PayloadError("Not a data URI")
    mime = match.group("mime") or "text/plain"
    if match.group("base64"):
        try:
            data = base64.b64decode(match.group("data"), validate=True)
        except (binascii.Error, ValueError) as e:
            raise PayloadError(f"Invalid base64 data: {e}")
    else:
        data = unquote_to_bytes(match.group("data"))
    return mime, data


def resource_to_data_uri(store: ResourceStore, resource_id: str) -> str:
    """Read a resource from the store and encode it as a data URI.

    Raises:
        InvalidResourceIdError: If resource_id is malformed
        ResourceNotFoundError: If the store has no data for it
        PayloadError: If the store returned an unusable payload
    """
    validate_resource_id(resource_id)
    mime = store.resource_mime(resource_id)
    payload = coerce_payload(store.resource_payload(resource_id))
    data = payload_to_bytes(payload)
    if not data:
        raise ResourceNotFoundError(f"Resource {resource_id} is empty")
    return to_data_uri(data, mime)


class DirectoryResourceStore:
    """Resources stored as <id>.<ext> files in one directory."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def resource_path(self, resource_id: str) -> Path:
        validate_resource_id(resource_id)
        exact = self.root / resource_id
        if exact.is_file():
            return exact
        matches = sorted(p for p in self.root.glob(f"{resource_id}.*") if p.is_file())
        if not matches:
            raise ResourceNotFoundError(
                f"Resource {resource_id} not found in {self.root}"
            )
        return matches[0]

    def resource_mime(self, resource_id: str) -> str:
        mime, _ = mimetypes.guess_type(self.resource_path(resource_id).name)
        return mime or DEFAULT_MIME

    def resource_payload(self, resource_id: str) -> Payload:
        return BufferPayload(self.resource_path(resource_id).read_bytes())
