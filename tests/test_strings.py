"""Tests for string escaping helpers."""

from image_resize.strings import (
    decode_html_entities,
    escape_html_attribute,
    escape_markdown_title,
    sanitize_markdown_alt,
)


class TestEscapeHtmlAttribute:
    """Tests for escape_html_attribute."""

    def test_escapes_special_characters(self):
        """Escapes & " ' < >."""
        result = escape_html_attribute("""a & b "c" 'd' <e>""")
        assert result == "a &amp; b &quot;c&quot; &#39;d&#39; &lt;e&gt;"

    def test_output_has_no_raw_specials(self):
        """Escaped output never holds a raw quote or angle bracket."""
        result = escape_html_attribute('<script>alert("x")</script>')
        for char in "\"'<>":
            assert char not in result

    def test_escapes_ampersand_first(self):
        """Existing entities are escaped again, not left alone."""
        assert escape_html_attribute("&lt;") == "&amp;lt;"

    def test_none_is_empty(self):
        assert escape_html_attribute(None) == ""


class TestEscapeMarkdownTitle:
    """Tests for escape_markdown_title."""

    def test_escapes_quotes_and_brackets(self):
        assert escape_markdown_title('Say "hi" <b>') == "Say &quot;hi&quot; &lt;b&gt;"

    def test_keeps_single_quotes(self):
        """Single quotes are safe inside a double-quoted title."""
        assert escape_markdown_title("it's") == "it's"

    def test_empty_values(self):
        assert escape_markdown_title("") == ""
        assert escape_markdown_title(None) == ""


class TestDecodeHtmlEntities:
    """Tests for decode_html_entities."""

    def test_decodes_named_entities(self):
        assert decode_html_entities("&quot;a&quot; &lt;b&gt; &apos;c&apos;") == "\"a\" <b> 'c'"

    def test_decodes_numeric_references(self):
        assert decode_html_entities("&#39;x&#39; &#x41;") == "'x' A"

    def test_keeps_invalid_codepoint(self):
        """A reference outside the Unicode range is left as written."""
        assert decode_html_entities("&#99999999;") == "&#99999999;"

    def test_round_trips_escaped_text(self):
        """Decoding an escaped string gives back the original."""
        for value in ['Fish & "Chips"', "<tag attr='v'>", "plain", "a&b<c>d"]:
            assert decode_html_entities(escape_html_attribute(value)) == value

    def test_empty_values(self):
        assert decode_html_entities("") == ""
        assert decode_html_entities(None) == ""


class TestSanitizeMarkdownAlt:
    """Tests for sanitize_markdown_alt."""

    def test_strips_brackets(self):
        assert sanitize_markdown_alt("a [b] c") == "a b c"

    def test_none_is_empty(self):
        assert sanitize_markdown_alt(None) == ""
