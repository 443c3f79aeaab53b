"""Copy an image to the clipboard as PNG."""

import io
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

import requests
from PIL import Image

from .dimensions import anonymous_session, is_valid_http_url
from .errors import ExternalImageError, ImageResizeError, ResourceNotFoundError
from .logging import debug
from .models import SourceKind
from .notify import Notifier, Severity, send_notice
from .storage import (
    ResourceStore,
    coerce_payload,
    parse_data_uri,
    payload_to_bytes,
    to_data_uri,
    validate_resource_id,
)

PNG_MIME = "image/png"


class Clipboard(Protocol):
    def write_image(self, data_uri: str) -> None: ...


class FileClipboard:
    """A clipboard that writes the copied image to a file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def write_image(self, data_uri: str) -> None:
        _, data = parse_data_uri(data_uri)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(data)
        debug(f"Wrote {len(data)} bytes to {self.path}")


def fetch_image_bytes(
    source: str,
    source_kind: SourceKind,
    store: ResourceStore,
    timeout: float = 10.0,
    session_factory: Callable[[], requests.Session] = anonymous_session,
) -> bytes:
    """Load the raw bytes of a resource or external image.

    Raises:
        InvalidResourceIdError: For a malformed resource ID
        ResourceNotFoundError: If the resource has no data
        ExternalImageError: If an external image cannot be downloaded
    """
    if source_kind is SourceKind.RESOURCE:
        validate_resource_id(source)
        data = payload_to_bytes(coerce_payload(store.resource_payload(source)))
        if not data:
            raise ResourceNotFoundError(f"Resource {source} is empty")
        return data

    if not is_valid_http_url(source):
        raise ExternalImageError("Invalid external image URL")
    try:
        with session_factory() as session:
            with session.get(source, timeout=timeout, headers={"Accept": "image/*"}) as response:
                response.raise_for_status()
                return response.content
    except requests.RequestException as e:
        raise ExternalImageError(f"Failed to load external image: {e}") from e


def to_png(data: bytes) -> bytes:
    """Re-encode image bytes as PNG."""
    out = io.BytesIO()
    try:
        with Image.open(io.BytesIO(data)) as image:
            if image.mode not in ("1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"):
                image = image.convert("RGBA")
            image.save(out, format="PNG")
    except Image.DecompressionBombError as e:
        raise ImageResizeError(f"Image is too large to copy: {e}") from e
    return out.getvalue()


def copy_image(
    source: str,
    source_kind: SourceKind,
    store: ResourceStore,
    clipboard: Clipboard,
    notifier: Notifier | None = None,
    timeout: float = 10.0,
    notices_enabled: bool = True,
    session_factory: Callable[[], requests.Session] = anonymous_session,
) -> str:
    """Copy an image to the clipboard as a PNG data URI.

    Returns:
        The data URI handed to the clipboard

    Raises:
        ImageResizeError: If the image cannot be loaded
        OSError: If the image cannot be decoded or the clipboard write fails
    """
    try:
        data = fetch_image_bytes(source, source_kind, store, timeout, session_factory)
        data_uri = to_data_uri(to_png(data), PNG_MIME)
        clipboard.write_image(data_uri)
    except (ImageResizeError, OSError) as e:
        send_notice(notifier, f"Failed to copy image: {e}", Severity.ERROR, notices_enabled)
        raise

    send_notice(notifier, "Image copied to clipboard.", Severity.SUCCESS, notices_enabled)
    return data_uri
