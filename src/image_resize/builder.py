"""Build replacement image syntax from an image context and a resize choice."""

import math

from .models import (
    HtmlStyle,
    ImageContext,
    ImageReference,
    PixelDimensions,
    ResizeChoice,
    ResizeMode,
    SourceKind,
    SyntaxKind,
)
from .strings import escape_html_attribute, escape_markdown_title, sanitize_markdown_alt


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3)."""
    return math.floor(value + 0.5)


def source_path(reference: ImageReference) -> str:
    """Render the src of an image: `:/<id>` for resources, the URL otherwise."""
    if reference.source_kind is SourceKind.RESOURCE:
        return f":/{reference.source}"
    return reference.source


def compute_dimensions(original: PixelDimensions, choice: ResizeChoice) -> tuple[int, int]:
    """Work out the target width and height for an HTML image.

    Percentage mode scales both sides. Absolute mode uses whatever sides the
    user gave and derives a missing side from the original aspect ratio.

    Returns:
        Tuple of (width, height), each at least 1
    """
    orig_w, orig_h = original.width, original.height

    if choice.mode is ResizeMode.PERCENTAGE:
        percent = choice.percentage or 100
        width = round_half_up(orig_w * (percent / 100))
        height = round_half_up(orig_h * (percent / 100))
    elif choice.width and choice.height:
        width, height = choice.width, choice.height
    elif choice.width:
        width = choice.width
        height = round_half_up(choice.width * (orig_h / orig_w)) if orig_w else orig_h
    elif choice.height:
        height = choice.height
        width = round_half_up(choice.height * (orig_w / orig_h)) if orig_h else orig_w
    else:
        width, height = orig_w, orig_h

    return max(1, int(width)), max(1, int(height))


def build_markdown(reference: ImageReference, alt_text: str, title: str = "") -> str:
    """![alt](src "title"). Markdown cannot carry a size."""
    alt = sanitize_markdown_alt(alt_text)
    title_part = f' "{escape_markdown_title(title)}"' if title else ""
    return f"![{alt}]({source_path(reference)}{title_part})"


def build_html(
    reference: ImageReference,
    alt_text: str,
    width: int,
    height: int,
    title: str = "",
    style: HtmlStyle = HtmlStyle.WIDTH_AND_HEIGHT,
) -> str:
    """<img src="..." alt="..." width="W" height="H" title="..." />"""
    parts = [
        f'src="{source_path(reference)}"',
        f'alt="{escape_html_attribute(alt_text)}"',
        f'width="{width}"',
    ]
    if style is HtmlStyle.WIDTH_AND_HEIGHT:
        parts.append(f'height="{height}"')
    if title:
        parts.append(f'title="{escape_html_attribute(title)}"')
    return f"<img {' '.join(parts)} />"


def build_new_syntax(
    context: ImageContext,
    choice: ResizeChoice,
    style: HtmlStyle = HtmlStyle.WIDTH_AND_HEIGHT,
) -> str:
    """Build the syntax that replaces the detected image.

    Args:
        context: Detected image and its original size
        choice: The user's resize choice
        style: Whether HTML output carries a height attribute

    Returns:
        New Markdown or HTML image syntax
    """
    title = choice.title if choice.title is not None else context.reference.title

    if choice.target is SyntaxKind.MARKDOWN:
        return build_markdown(context.reference, choice.alt_text, title)

    width, height = compute_dimensions(context.original, choice)
    return build_html(context.reference, choice.alt_text, width, height, title, style)
