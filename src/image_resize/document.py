"""Host document interface and an in-memory implementation.

Offsets are absolute indexes into the document text. Lines are 0-indexed and
columns count code points within a line.
"""

from bisect import bisect_right
from pathlib import Path
from typing import Protocol, runtime_checkable

from .models import Position


@runtime_checkable
class Document(Protocol):
    """What the locator and the range replacer need from an editor."""

    cursor_offset: int

    @property
    def line_count(self) -> int: ...

    def line(self, number: int) -> str: ...

    def line_start(self, number: int) -> int: ...

    def line_at(self, offset: int) -> int: ...

    def text_between(self, start: int, end: int) -> str: ...

    def replace(self, start: int, end: int, text: str) -> None: ...


class TextDocument:
    """A document held in memory, optionally loaded from and saved to a file."""

    def __init__(self, text: str = "", cursor_offset: int = 0, newline: str = "\n"):
        self._text = text
        self._line_starts = self._compute_line_starts(text)
        self.newline = newline
        self.cursor_offset = cursor_offset
        self.path: Path | None = None

    @staticmethod
    def _compute_line_starts(text: str) -> list[int]:
        starts = [0]
        index = text.find("\n")
        while index != -1:
            starts.append(index + 1)
            index = text.find("\n", index + 1)
        return starts

    @classmethod
    def from_path(cls, path: Path) -> "TextDocument":
        """Load a UTF-8 text file, remembering its line ending style."""
        with open(path, encoding="utf-8", newline="") as f:
            raw = f.read()
        newline = "\r\n" if "\r\n" in raw else "\n"
        document = cls(raw.replace("\r\n", "\n"), newline=newline)
        document.path = path
        return document

    def save(self, path: Path | None = None) -> Path:
        """Write the document back to disk with its original line endings."""
        target = path or self.path
        if target is None:
            raise ValueError("Document has no path to save to")
        with open(target, "w", encoding="utf-8", newline="") as f:
            f.write(self._text.replace("\n", self.newline))
        return target

    @property
    def text(self) -> str:
        return self._text

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line(self, number: int) -> str:
        start = self._line_starts[number]
        if number + 1 < len(self._line_starts):
            return self._text[start : self._line_starts[number + 1] - 1]
        return self._text[start:]

    def line_start(self, number: int) -> int:
        return self._line_starts[number]

    def line_at(self, offset: int) -> int:
        offset = max(0, min(offset, len(self._text)))
        return bisect_right(self._line_starts, offset) - 1

    def set_cursor(self, position: Position) -> None:
        """Move the cursor, clamping to the document bounds."""
        line = max(0, min(position.line, self.line_count - 1))
        ch = max(0, min(position.ch, len(self.line(line))))
        self.cursor_offset = self._line_starts[line] + ch

    def text_between(self, start: int, end: int) -> str:
        return self._text[start:end]

    def replace(self, start: int, end: int, text: str) -> None:
        """Replace [start, end) with text in a single edit."""
        if not 0 <= start <= end <= len(self._text):
            raise ValueError(f"Replacement range {start}..{end} is out of bounds")
        self._text = self._text[:start] + text + self._text[end:]
        self._line_starts = self._compute_line_starts(self._text)
        if self.cursor_offset > end:
            self.cursor_offset += len(text) - (end - start)
        elif self.cursor_offset > start:
            self.cursor_offset = start + len(text)
