"""Tests for guarded range replacement."""

from image_resize.document import TextDocument
from image_resize.models import Position
from image_resize.replacer import position_to_offset, replace_range

TEXT = "Hello ![a](x.png) world\nsecond line"


class TestReplaceRange:
    """Tests for replace_range."""

    def test_replaces_matching_range(self):
        document = TextDocument(TEXT)
        applied = replace_range(
            document, "<img />", Position(0, 6), Position(0, 17), "![a](x.png)"
        )
        assert applied
        assert document.text == "Hello <img /> world\nsecond line"

    def test_rejects_stale_range(self):
        """The edit is skipped when the range no longer holds the expected text."""
        document = TextDocument(TEXT)
        document.replace(0, 0, "Oh, ")

        applied = replace_range(
            document, "<img />", Position(0, 6), Position(0, 17), "![a](x.png)"
        )
        assert not applied
        assert document.text == "Oh, " + TEXT

    def test_rejects_reversed_range(self):
        document = TextDocument(TEXT)
        assert not replace_range(document, "x", Position(0, 17), Position(0, 6), "")
        assert document.text == TEXT

    def test_rejects_malformed_positions(self):
        document = TextDocument(TEXT)
        assert not replace_range(document, "x", Position(0, 1.5), Position(0, 6), "")
        assert not replace_range(document, "x", Position(True, 0), Position(0, 6), "")
        assert not replace_range(document, "x", None, Position(0, 6), "")
        assert document.text == TEXT

    def test_multiline_range(self):
        document = TextDocument(TEXT)
        applied = replace_range(document, "|", Position(0, 18), Position(1, 6), "world\nsecond")
        assert applied
        assert document.text == "Hello ![a](x.png) | line"


class TestPositionToOffset:
    def test_clamps_to_document(self):
        document = TextDocument("ab\ncd")
        assert position_to_offset(document, Position(1, 1)) == 4
        assert position_to_offset(document, Position(9, 9)) == 5
        assert position_to_offset(document, Position(0, 9)) == 2
