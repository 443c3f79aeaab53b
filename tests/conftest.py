"""Shared fixtures for image-resize tests."""

import io
import logging

import pytest
import requests
from PIL import Image

from image_resize import logging as ir_logging
from image_resize.storage import DirectoryResourceStore

RESOURCE_ID = "a" * 32


def png_bytes(width: int, height: int, mode: str = "RGB") -> bytes:
    """Encode a blank image of the given size as PNG."""
    out = io.BytesIO()
    Image.new(mode, (width, height)).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture(autouse=True)
def reset_logger():
    """Reset the logger state between tests."""
    ir_logging._logger = None
    logging.getLogger(ir_logging.LOGGER_NAME).handlers.clear()
    yield
    ir_logging._logger = None
    logging.getLogger(ir_logging.LOGGER_NAME).handlers.clear()


@pytest.fixture
def make_png():
    """Factory for PNG bytes of a given size."""
    return png_bytes


@pytest.fixture
def resources_dir(tmp_path):
    """A resources directory holding a 1000x500 PNG as RESOURCE_ID."""
    path = tmp_path / "resources"
    path.mkdir()
    (path / f"{RESOURCE_ID}.png").write_bytes(png_bytes(1000, 500))
    return path


@pytest.fixture
def store(resources_dir):
    return DirectoryResourceStore(resources_dir)


class FakeResponse:
    """Stands in for a streamed requests.Response."""

    def __init__(self, body: bytes = b"", status_code: int = 200):
        self.body = body
        self.status_code = status_code
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i : i + chunk_size]

    @property
    def content(self) -> bytes:
        return self.body


class FakeSession:
    """Records GET requests and answers with a canned response or error."""

    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None):
        self.response = response or FakeResponse()
        self.error = error
        self.requests = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        pass

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_session():
    """Factory for FakeSession objects answering with body or raising error."""

    def factory(body: bytes = b"", status_code: int = 200, error: Exception | None = None):
        return FakeSession(FakeResponse(body, status_code), error)

    return factory
