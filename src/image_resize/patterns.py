"""Regex extraction of image metadata from a single image embed.

The text handed to extract_image_details() is expected to hold exactly one
image construct, already isolated by the cursor locator or by a selection.
"""

import re

from .models import ImageReference, SourceKind, SyntaxKind
from .strings import decode_html_entities

# ![alt](src) with an optional "title" or 'title'. An escaped \) may appear
# inside src.
MARKDOWN_IMAGE = re.compile(
    r"!\[(?P<alt>[^\]]*)\]"
    r"\(\s*(?P<src>(?:\\\)|[^\s)])+)"
    r"(?:\s+(?:\"(?P<title_double>[^\"]*)\"|'(?P<title_single>[^']*)'))?"
    r"\s*\)"
)

HTML_IMG_TAG = re.compile(r"<img\s[^>]*>", re.IGNORECASE)

# Quoted attribute values; the closing quote must match the opening one.
HTML_SRC = re.compile(r"""(?<![\w-])src\s*=\s*(["'])(.*?)\1""", re.IGNORECASE | re.DOTALL)
HTML_ALT = re.compile(r"""(?<![\w-])alt\s*=\s*(["'])(.*?)\1""", re.IGNORECASE | re.DOTALL)
HTML_TITLE = re.compile(r"""(?<![\w-])title\s*=\s*(["'])(.*?)\1""", re.IGNORECASE | re.DOTALL)

RESOURCE_SOURCE = re.compile(r":/([a-f0-9]{32})")
RESOURCE_ID = re.compile(r"[a-f0-9]{32}")
EXTERNAL_URL = re.compile(r"(https?://\S+)", re.IGNORECASE)


def is_resource_id(value: str) -> bool:
    """Check whether value is a 32-character lowercase hex resource ID."""
    return isinstance(value, str) and RESOURCE_ID.fullmatch(value) is not None


def classify_source(src: str) -> tuple[str, SourceKind]:
    """Split an image src into its source and source kind.

    `:/<32 hex>` is a resource; an http(s) URL is external. Anything else is
    kept verbatim and treated as external so the caller always gets an
    answer.

    Returns:
        Tuple of (source, source_kind)
    """
    resource = RESOURCE_SOURCE.fullmatch(src)
    if resource:
        return resource.group(1), SourceKind.RESOURCE

    url = EXTERNAL_URL.fullmatch(src)
    if url:
        return url.group(1), SourceKind.EXTERNAL

    return src, SourceKind.EXTERNAL


def extract_markdown_details(text: str) -> ImageReference | None:
    """Extract a Markdown image. Alt and title are kept as written."""
    match = MARKDOWN_IMAGE.search(text)
    if not match:
        return None

    source, source_kind = classify_source(match.group("src"))
    title = match.group("title_double")
    if title is None:
        title = match.group("title_single")

    return ImageReference(
        kind=SyntaxKind.MARKDOWN,
        raw_syntax=match.group(0),
        source=source,
        source_kind=source_kind,
        alt_text=match.group("alt") or "",
        title=title or "",
    )


def extract_html_details(text: str) -> ImageReference | None:
    """Extract an <img> tag. Alt and title are entity-decoded."""
    tag_match = HTML_IMG_TAG.search(text)
    if not tag_match:
        return None
    tag = tag_match.group(0)

    src_match = HTML_SRC.search(tag)
    if not src_match:
        return None

    source, source_kind = classify_source(src_match.group(2))
    alt_match = HTML_ALT.search(tag)
    title_match = HTML_TITLE.search(tag)

    return ImageReference(
        kind=SyntaxKind.HTML,
        raw_syntax=tag,
        source=source,
        source_kind=source_kind,
        alt_text=decode_html_entities(alt_match.group(2)) if alt_match else "",
        title=decode_html_entities(title_match.group(2)) if title_match else "",
    )


def extract_image_details(text: str) -> ImageReference | None:
    """Extract image metadata, trying Markdown first and then HTML.

    Args:
        text: A fragment holding one image embed

    Returns:
        The extracted ImageReference, or None if the text is not an image
    """
    if not text:
        return None
    return extract_markdown_details(text) or extract_html_details(text)


def _image_spans(text: str) -> list[tuple[int, int]]:
    spans = [m.span() for m in MARKDOWN_IMAGE.finditer(text)]
    spans.extend(
        m.span() for m in HTML_IMG_TAG.finditer(text) if HTML_SRC.search(m.group(0))
    )
    return spans


def count_images(text: str) -> int:
    """Count Markdown and HTML images in text."""
    return len(_image_spans(text or ""))


def contains_any_image(text: str) -> bool:
    """Check whether text contains at least one image."""
    return count_images(text) > 0


def is_single_image(text: str) -> bool:
    """Check whether text, once trimmed, is exactly one image embed."""
    trimmed = (text or "").strip()
    if not trimmed:
        return False
    return _image_spans(trimmed) == [(0, len(trimmed))]
