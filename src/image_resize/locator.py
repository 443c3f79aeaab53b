"""Find the image embed under the cursor.

Detection works on the structure of the cursor's line instead of running a
regex over the whole document. The scanner knows three constructs:

1. Markdown images: ![alt](src)
2. Inline HTML tags on the line: <img ...>
3. HTML blocks (e.g. a <div> wrapping an <img>), where the block may span
   several lines but only <img> tags touching the cursor line count

Lines inside fenced code blocks and text inside inline code spans never
produce images.
"""

import re
from dataclasses import dataclass

from .document import Document
from .logging import debug
from .models import Detection, Position, SyntaxKind, TextRange
from .patterns import (
    MARKDOWN_IMAGE,
    contains_any_image,
    count_images,
    extract_html_details,
    extract_image_details,
    extract_markdown_details,
    is_single_image,
)
from .replacer import position_to_offset

_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_CODE_SPAN = re.compile(r"(`+)(?!`).*?(?<!`)\1(?!`)")
_INLINE_IMG_TAG = re.compile(r"<img\s[^>]*>", re.IGNORECASE)
# Tags may not cross a line break, so an <img> never spans lines.
_BLOCK_IMG_TAG = re.compile(r"<img\s[^>\n]*>", re.IGNORECASE)

# Block-level tag names that open an HTML block (CommonMark type 6).
_HTML_BLOCK_TAGS = (
    "address|article|aside|blockquote|center|details|dialog|dd|div|dl|dt|"
    "fieldset|figcaption|figure|footer|form|h1|h2|h3|h4|h5|h6|header|hr|li|"
    "main|nav|ol|p|section|summary|table|tbody|td|tfoot|th|thead|tr|ul"
)
_HTML_BLOCK_START = re.compile(
    rf"^ {{0,3}}</?(?:{_HTML_BLOCK_TAGS})(?=[\s/>]|$)", re.IGNORECASE
)


@dataclass(frozen=True)
class ImageSpan:
    """A candidate image construct, in absolute document offsets."""

    kind: SyntaxKind
    start: int
    end: int


def _is_blank(text: str) -> bool:
    return not text.strip()


def _fenced_lines(document: Document, last_line: int) -> set[int]:
    """Lines up to last_line that open, close or sit inside a fenced code block."""
    lines: set[int] = set()
    fence: str | None = None
    for number in range(last_line + 1):
        line = document.line(number)
        match = _FENCE.match(line)
        if fence is None:
            if match:
                fence = match.group(1)
                lines.add(number)
            continue

        lines.add(number)
        # A closing fence is at least as long as the opening one and carries
        # nothing but whitespace after it.
        if (
            match
            and match.group(1)[0] == fence[0]
            and len(match.group(1)) >= len(fence)
            and _is_blank(line[match.end() :])
        ):
            fence = None
    return lines


def _html_block_bounds(
    document: Document, line_number: int, fenced: set[int]
) -> tuple[int, int] | None:
    """Find the first and last line of the HTML block holding a line.

    The search upwards stops at blank lines and at fenced code.
    """
    if _is_blank(document.line(line_number)):
        return None

    first = None
    number = line_number
    while number >= 0 and number not in fenced and not _is_blank(document.line(number)):
        if _HTML_BLOCK_START.match(document.line(number)):
            first = number
            break
        number -= 1
    if first is None:
        return None

    last = line_number
    while last + 1 < document.line_count and not _is_blank(document.line(last + 1)):
        last += 1
    return first, last


def _code_spans(line: str) -> list[tuple[int, int]]:
    return [m.span() for m in _CODE_SPAN.finditer(line)]


def _closing_paren(line: str, start: int) -> int:
    """Index of the first unescaped ')' at or after start, or -1."""
    index = start
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char == ")":
            return index
        index += 1
    return -1


def _markdown_image_spans(line: str) -> list[tuple[int, int]]:
    """Spans of ![...](...) constructs on a single line."""
    spans = []
    index = line.find("![")
    while index != -1:
        if index > 0 and line[index - 1] == "\\":
            index = line.find("![", index + 2)
            continue

        # A well-formed image may carry a quoted title holding ")"
        match = MARKDOWN_IMAGE.match(line, index)
        if match:
            spans.append(match.span())
            index = line.find("![", match.end())
            continue

        close_bracket = line.find("]", index + 2)
        if close_bracket == -1:
            break

        if close_bracket + 1 < len(line) and line[close_bracket + 1] == "(":
            close_paren = _closing_paren(line, close_bracket + 2)
            if close_paren != -1:
                spans.append((index, close_paren + 1))
                index = line.find("![", close_paren + 1)
                continue

        index = line.find("![", index + 2)
    return spans


def _overlaps(span: tuple[int, int], others: list[tuple[int, int]]) -> bool:
    return any(span[0] < end and start < span[1] for start, end in others)


def scan_line(document: Document, line_number: int) -> list[ImageSpan]:
    """Classify the image constructs touching a line.

    Args:
        document: Document to inspect
        line_number: 0-indexed line

    Returns:
        Candidate spans, in order of appearance
    """
    fenced = _fenced_lines(document, line_number)
    if line_number in fenced:
        return []

    line_start = document.line_start(line_number)
    line_text = document.line(line_number)
    line_end = line_start + len(line_text)

    block = _html_block_bounds(document, line_number, fenced)
    if block is not None:
        first, last = block
        block_start = document.line_start(first)
        block_end = document.line_start(last) + len(document.line(last))
        block_text = document.text_between(block_start, block_end)

        spans = []
        for match in _BLOCK_IMG_TAG.finditer(block_text):
            start = block_start + match.start()
            end = block_start + match.end()
            if start <= line_end and end >= line_start:
                spans.append(ImageSpan(SyntaxKind.HTML, start, end))
        return spans

    code = _code_spans(line_text)
    candidates = [
        (start, end, SyntaxKind.MARKDOWN)
        for start, end in _markdown_image_spans(line_text)
        if not _overlaps((start, end), code)
    ]
    candidates.extend(
        (m.start(), m.end(), SyntaxKind.HTML)
        for m in _INLINE_IMG_TAG.finditer(line_text)
        if not _overlaps(m.span(), code)
    )
    candidates.sort()
    return [
        ImageSpan(kind, line_start + start, line_start + end)
        for start, end, kind in candidates
    ]


def offset_to_position(document: Document, offset: int) -> Position:
    """Convert an absolute offset to a line/column position."""
    line = document.line_at(offset)
    return Position(line, offset - document.line_start(line))


def locate_image(document: Document, offset: int | None = None) -> Detection | None:
    """Find the image whose span contains the cursor offset.

    Both span ends are inclusive, so a cursor right before "!" or right after
    ")" still counts as inside.

    Args:
        document: Document to inspect
        offset: Absolute cursor offset. Defaults to document.cursor_offset.

    Returns:
        The detection, or None when the cursor is not on an image
    """
    if offset is None:
        offset = document.cursor_offset

    line_number = document.line_at(offset)
    for span in scan_line(document, line_number):
        if not span.start <= offset <= span.end:
            continue

        text = document.text_between(span.start, span.end)
        if span.kind is SyntaxKind.MARKDOWN:
            reference = extract_markdown_details(text)
        else:
            reference = extract_html_details(text)

        if reference is None:
            debug(f"Image-like text at cursor could not be parsed: {text!r}")
            return None

        return Detection(
            reference=reference,
            range=TextRange(
                start=offset_to_position(document, span.start),
                end=offset_to_position(document, span.end),
            ),
            text=text,
        )

    return None


def locate_image_at(document: Document, position: Position) -> Detection | None:
    """Like locate_image(), with the cursor given as a line/column position."""
    if not 0 <= position.line < document.line_count:
        return None
    ch = max(0, min(position.ch, len(document.line(position.line))))
    return locate_image(document, document.line_start(position.line) + ch)


def locate_selection(document: Document, start: Position, end: Position) -> Detection | None:
    """Treat a selected range as an image, if it holds exactly one.

    Whitespace around the image is allowed and left out of the detected
    range.

    Returns:
        The detection, or None when the selection is not a single image
    """
    start_offset = position_to_offset(document, start)
    end_offset = position_to_offset(document, end)
    if start_offset >= end_offset:
        return None

    selected = document.text_between(start_offset, end_offset)
    if not is_single_image(selected):
        if contains_any_image(selected):
            debug(f"Selection is not a lone image ({count_images(selected)} found)")
        else:
            debug(f"Selection holds no image: {selected!r}")
        return None

    text = selected.strip()
    reference = extract_image_details(text)
    if reference is None:
        return None

    image_start = start_offset + len(selected) - len(selected.lstrip())
    return Detection(
        reference=reference,
        range=TextRange(
            start=offset_to_position(document, image_start),
            end=offset_to_position(document, image_start + len(text)),
        ),
        text=text,
    )
