"""Data model shared by the detection, measurement and rewriting steps."""

from dataclasses import dataclass
from enum import Enum

from .errors import InvalidDimensionsError


class SyntaxKind(str, Enum):
    """Syntax an image embed is written in."""

    MARKDOWN = "markdown"
    HTML = "html"


class SourceKind(str, Enum):
    """Where the image bytes live."""

    RESOURCE = "resource"
    EXTERNAL = "external"


class ResizeMode(str, Enum):
    """How a resize choice expresses the target size."""

    PERCENTAGE = "percentage"
    ABSOLUTE = "absolute"


class HtmlStyle(str, Enum):
    """Which size attributes an emitted <img> tag carries."""

    WIDTH_AND_HEIGHT = "width_and_height"
    WIDTH_ONLY = "width_only"


def _is_pixel_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class PixelDimensions:
    """Natural size of an image. Both values are positive integers."""

    width: int
    height: int

    def __post_init__(self):
        if not (_is_pixel_count(self.width) and _is_pixel_count(self.height)):
            raise InvalidDimensionsError(
                f"Invalid image dimensions: {self.width!r}x{self.height!r}"
            )

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class ImageReference:
    """An image embed found in a document."""

    kind: SyntaxKind
    raw_syntax: str
    source: str
    source_kind: SourceKind
    alt_text: str = ""
    title: str = ""


@dataclass(frozen=True, order=True)
class Position:
    """A 0-indexed line and a column offset within that line."""

    line: int
    ch: int


@dataclass(frozen=True)
class TextRange:
    """Half-open span [start, end) in a document."""

    start: Position
    end: Position


@dataclass(frozen=True)
class Detection:
    """An image reference plus the range and text it occupied when detected."""

    reference: ImageReference
    range: TextRange
    text: str


@dataclass(frozen=True)
class ImageContext:
    """What the dialog is shown and the syntax builder consumes."""

    reference: ImageReference
    original: PixelDimensions


@dataclass
class ResizeChoice:
    """A user's answer to the resize dialog.

    For ABSOLUTE mode either of width/height may be left out; the missing one
    is derived from the original aspect ratio.
    """

    target: SyntaxKind
    alt_text: str = ""
    title: str | None = None
    mode: ResizeMode = ResizeMode.PERCENTAGE
    percentage: float | None = None
    width: int | None = None
    height: int | None = None
