"""String escaping helpers for HTML attributes and Markdown image syntax."""

import re

_DECIMAL_REF = re.compile(r"&#(\d+);")
_HEX_REF = re.compile(r"&#x([0-9a-fA-F]+);")

_NAMED_ENTITIES = (
    ("&quot;", '"'),
    ("&apos;", "'"),
    ("&lt;", "<"),
    ("&gt;", ">"),
)


def escape_html_attribute(value: str | None) -> str:
    """Escape a string for use inside a double-quoted HTML attribute.

    Ampersands are replaced first so already-escaped text is not
    double-unescaped later.

    Args:
        value: Raw string, or None

    Returns:
        Escaped string ('' for None)
    """
    if value is None:
        return ""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def escape_markdown_title(value: str | None) -> str:
    """Escape a title emitted inside double quotes: ![alt](src "title")."""
    if not value:
        return ""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def _char_from_ref(match: re.Match, base: int) -> str:
    codepoint = int(match.group(1), base)
    try:
        return chr(codepoint)
    except (ValueError, OverflowError):
        return match.group(0)


def decode_html_entities(value: str | None) -> str:
    """Decode the entities commonly found in <img> attributes.

    `&amp;` is decoded first, then numeric references, then the named
    entities &quot; &apos; &lt; &gt;.

    Args:
        value: HTML-encoded string

    Returns:
        Decoded plain text
    """
    if not value:
        return ""
    text = str(value).replace("&amp;", "&")
    text = _DECIMAL_REF.sub(lambda m: _char_from_ref(m, 10), text)
    text = _HEX_REF.sub(lambda m: _char_from_ref(m, 16), text)
    for entity, char in _NAMED_ENTITIES:
        text = text.replace(entity, char)
    return text


def sanitize_markdown_alt(value: str | None) -> str:
    """Remove square brackets, which would break ![alt](src) syntax."""
    return re.sub(r"[\[\]]", "", str(value or ""))
