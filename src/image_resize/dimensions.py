"""Natural pixel size of an image, via an ordered chain of probes.

Resource images try each strategy in turn and fall back to a fixed default
size when all of them fail; that path never raises. External images either
measure successfully or raise ExternalImageError, and the caller decides
what to do about it.

Every probe streams bytes into Pillow's incremental parser, stops as soon as
the header reveals the size, and gives up once its own deadline passes.
"""

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from http.cookiejar import DefaultCookiePolicy
from pathlib import Path
from typing import Protocol
from urllib.parse import urlsplit

import requests
from PIL import Image, ImageFile

from .config import DimensionsConfig
from .errors import ExternalImageError, ImageResizeError, InvalidDimensionsError
from .logging import debug
from .models import PixelDimensions, SourceKind
from .notify import Notifier, Severity, send_notice
from .storage import ResourceStore, parse_data_uri, resource_to_data_uri, validate_resource_id

CHUNK_SIZE = 64 * 1024

# Errors a single probe may hit; anything else is a bug and propagates.
PROBE_ERRORS = (
    ImageResizeError,
    OSError,
    ValueError,
    Image.DecompressionBombError,
)


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one measurement strategy."""

    dimensions: PixelDimensions | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.dimensions is not None

    @classmethod
    def success(cls, dimensions: PixelDimensions) -> "ProbeResult":
        return cls(dimensions=dimensions)

    @classmethod
    def failure(cls, reason: str) -> "ProbeResult":
        return cls(reason=reason)


def measure_chunks(chunks: Iterable[bytes], deadline: float) -> PixelDimensions:
    """Feed chunks to Pillow until the image size is known.

    Args:
        chunks: Image bytes, in order
        deadline: time.monotonic() value after which to give up

    Raises:
        TimeoutError: If the deadline passes first
        OSError: If the data never forms a recognizable image
        InvalidDimensionsError: If the reported size is not positive
    """
    parser = ImageFile.Parser()
    for chunk in chunks:
        if time.monotonic() > deadline:
            raise TimeoutError("Timed out while loading image to determine dimensions")
        parser.feed(chunk)
        if parser.image is not None:
            width, height = parser.image.size
            return PixelDimensions(width, height)
    raise OSError("Could not identify image data")


def measure_file(path: Path, timeout: float) -> PixelDimensions:
    """Measure a local image file."""
    deadline = time.monotonic() + timeout
    with open(path, "rb") as f:
        return measure_chunks(iter(lambda: f.read(CHUNK_SIZE), b""), deadline)


def measure_data_uri(uri: str, timeout: float) -> PixelDimensions:
    """Measure an image encoded as a data URI."""
    deadline = time.monotonic() + timeout
    mime, data = parse_data_uri(uri)
    if not mime.startswith("image/"):
        raise ValueError(f"Data URI is not an image ({mime})")
    chunks = (data[i : i + CHUNK_SIZE] for i in range(0, len(data), CHUNK_SIZE))
    return measure_chunks(chunks, deadline)


class DimensionStrategy(Protocol):
    name: str

    def probe(self, resource_id: str) -> ProbeResult: ...


class FilePathProbe:
    """Strategy A: resolve the resource to a local file and read its header."""

    name = "file path"

    def __init__(self, store: ResourceStore, timeout: float = 5.0):
        self.store = store
        self.timeout = timeout

    def probe(self, resource_id: str) -> ProbeResult:
        try:
            path = self.store.resource_path(resource_id)
            debug(f"Measuring resource via path: {path}")
            return ProbeResult.success(measure_file(path, self.timeout))
        except PROBE_ERRORS as e:
            return ProbeResult.failure(str(e))


class DataUriProbe:
    """Strategy B: encode the resource bytes as a data URI and measure that."""

    name = "data URI"

    def __init__(self, store: ResourceStore, timeout: float = 5.0):
        self.store = store
        self.timeout = timeout

    def probe(self, resource_id: str) -> ProbeResult:
        try:
            uri = resource_to_data_uri(self.store, resource_id)
            if not uri.startswith("data:image"):
                return ProbeResult.failure(f"Resource is not an image ({uri[5:].split(';')[0]})")
            return ProbeResult.success(measure_data_uri(uri, self.timeout))
        except PROBE_ERRORS as e:
            return ProbeResult.failure(str(e))


def is_valid_http_url(url: str) -> bool:
    """Check that url is an absolute http(s) URL."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme.lower() in ("http", "https") and bool(parts.netloc)


def anonymous_session() -> requests.Session:
    """A session that sends no cookies, credentials or referrer."""
    session = requests.Session()
    session.trust_env = False  # ignore .netrc credentials and proxy auth
    session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
    return session


class ExternalImageProbe:
    """Measures an http(s) image without leaking cookies or referrer."""

    def __init__(
        self,
        timeout: float = 10.0,
        session_factory: Callable[[], requests.Session] = anonymous_session,
    ):
        self.timeout = timeout
        self.session_factory = session_factory

    def measure(self, url: str) -> PixelDimensions:
        """Fetch just enough of url to read the image size.

        Raises:
            ExternalImageError: On an invalid URL or any load failure
        """
        if not is_valid_http_url(url):
            raise ExternalImageError("Invalid external image URL")

        deadline = time.monotonic() + self.timeout
        try:
            with self.session_factory() as session:
                with session.get(
                    url,
                    stream=True,
                    timeout=self.timeout,
                    headers={"Accept": "image/*"},
                ) as response:
                    response.raise_for_status()
                    return measure_chunks(response.iter_content(CHUNK_SIZE), deadline)
        except requests.Timeout as e:
            raise ExternalImageError(
                f"Timeout: could not load external image within {self.timeout:g}s"
            ) from e
        except requests.RequestException as e:
            raise ExternalImageError(f"Failed to load external image: {e}") from e
        except InvalidDimensionsError as e:
            raise ExternalImageError(f"Invalid external image dimensions: {e}") from e
        except PROBE_ERRORS as e:
            raise ExternalImageError(f"Failed to load external image: {e}") from e


class DimensionResolver:
    """Returns the natural size of a resource or external image."""

    def __init__(
        self,
        store: ResourceStore,
        config: DimensionsConfig | None = None,
        notifier: Notifier | None = None,
        strategies: list[DimensionStrategy] | None = None,
        external_probe: ExternalImageProbe | None = None,
        notices_enabled: bool = True,
    ):
        self.config = config or DimensionsConfig()
        self.notifier = notifier
        self.notices_enabled = notices_enabled
        self.strategies = strategies or [
            FilePathProbe(store, self.config.resource_timeout),
            DataUriProbe(store, self.config.resource_timeout),
        ]
        self.external_probe = external_probe or ExternalImageProbe(
            self.config.external_timeout
        )

    @property
    def fallback(self) -> PixelDimensions:
        return PixelDimensions(self.config.fallback_width, self.config.fallback_height)

    def resolve(self, source: str, source_kind: SourceKind) -> PixelDimensions:
        """Measure an image.

        Raises:
            InvalidResourceIdError: For a malformed resource ID
            ExternalImageError: If an external image cannot be measured
        """
        if source_kind is SourceKind.RESOURCE:
            return self.resolve_resource(source)
        return self.resolve_external(source)

    def resolve_resource(self, resource_id: str) -> PixelDimensions:
        """Try each strategy in order; fall back to the default size."""
        validate_resource_id(resource_id)

        for strategy in self.strategies:
            result = strategy.probe(resource_id)
            if result.ok:
                debug(f"{strategy.name} probe returned {result.dimensions}")
                return result.dimensions
            debug(f"{strategy.name} probe failed for {resource_id}: {result.reason}")

        fallback = self.fallback
        debug(f"All dimension strategies failed for resource {resource_id}, using defaults")
        send_notice(
            self.notifier,
            f"Could not determine image size; using default dimensions ({fallback.width}×{fallback.height}).",
            Severity.WARNING,
            enabled=self.notices_enabled,
        )
        return fallback

    def resolve_external(self, url: str) -> PixelDimensions:
        try:
            dimensions = self.external_probe.measure(url)
        except ExternalImageError as e:
            debug(f"External probe failed for {url}: {e}")
            raise ExternalImageError(
                f"Could not determine external image dimensions: {e}"
            ) from e
        debug(f"External probe returned {dimensions}")
        return dimensions
