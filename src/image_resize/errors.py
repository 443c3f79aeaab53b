"""Exception types raised by image-resize.

"Not found" outcomes (no image at the cursor, no pattern match) are returned
as None and never raised. Everything here is a hard failure the immediate
caller cannot recover from on its own.
"""


class ImageResizeError(Exception):
    """Base class for image-resize failures."""


class InvalidResourceIdError(ImageResizeError):
    """A resource identifier is not exactly 32 lowercase hex characters."""

    def __init__(self, resource_id: str):
        super().__init__(f"Invalid resource ID: {resource_id!r}")
        self.resource_id = resource_id


class ResourceNotFoundError(ImageResizeError):
    """The resource store has no file or data for a resource identifier."""


class ExternalImageError(ImageResizeError):
    """An external image could not be measured or fetched."""


class PayloadError(ImageResizeError):
    """Resource bytes reported by the host could not be converted."""


class SparsePayloadError(PayloadError):
    """An index-keyed payload is missing an index between 0 and n-1."""

    def __init__(self, missing_index: int):
        super().__init__(
            f"Sparse resource data at missing index {missing_index} "
            "(non-contiguous or non-zero-based)"
        )
        self.missing_index = missing_index


class UnrecognizedPayloadError(PayloadError):
    """A payload is neither a byte buffer nor an index-keyed mapping."""


class InvalidDimensionsError(ValueError):
    """A width/height pair is not two positive, finite integers."""
