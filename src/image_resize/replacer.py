"""Guarded text replacement at a previously detected range.

The range was computed before a possibly long pause (dimension lookup, the
resize dialog), so the document may have changed underneath it. The edit is
only applied when the text in the range still equals what was there at
detection time.
"""

from .document import Document
from .logging import debug
from .models import Position


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _valid_position(position) -> bool:
    return (
        isinstance(position, Position) and _is_int(position.line) and _is_int(position.ch)
    )


def position_to_offset(document: Document, position: Position) -> int:
    """Convert a position to an offset, clamping line and column to the document."""
    line = max(0, min(position.line, document.line_count - 1))
    ch = max(0, min(position.ch, len(document.line(line))))
    return document.line_start(line) + ch


def replace_range(
    document: Document,
    text: str,
    start: Position,
    end: Position,
    expected_text: str,
) -> bool:
    """Replace [start, end) with text if the range still holds expected_text.

    Args:
        document: Document to edit
        text: Replacement text
        start: Range start
        end: Range end (exclusive)
        expected_text: Text the range held when it was computed

    Returns:
        True if the edit was applied, False if it was rejected. A rejected
        edit leaves the document untouched.
    """
    if not (_valid_position(start) and _valid_position(end)):
        debug(f"Rejected replacement with malformed range {start!r}..{end!r}")
        return False

    if (start.line, start.ch) > (end.line, end.ch):
        debug(f"Rejected replacement with reversed range {start}..{end}")
        return False

    start_offset = position_to_offset(document, start)
    end_offset = position_to_offset(document, end)

    current = document.text_between(start_offset, end_offset)
    if current != expected_text:
        debug("Image text changed since it was detected; replacement skipped")
        debug(f"Expected {expected_text!r}, found {current!r}")
        return False

    document.replace(start_offset, end_offset, text)
    return True
