"""Tests for image syntax extraction."""

from image_resize.models import SourceKind, SyntaxKind
from image_resize.patterns import (
    classify_source,
    contains_any_image,
    count_images,
    extract_html_details,
    extract_image_details,
    extract_markdown_details,
    is_resource_id,
    is_single_image,
)

RESOURCE_ID = "a" * 32


class TestClassifySource:
    """Tests for classify_source."""

    def test_resource(self):
        assert classify_source(f":/{RESOURCE_ID}") == (RESOURCE_ID, SourceKind.RESOURCE)

    def test_external_url(self):
        url = "https://example.com/pic.png"
        assert classify_source(url) == (url, SourceKind.EXTERNAL)

    def test_uppercase_hex_is_not_a_resource(self):
        """Resource IDs are lowercase only."""
        src = ":/" + "A" * 32
        assert classify_source(src) == (src, SourceKind.EXTERNAL)

    def test_other_sources_fall_back_to_external(self):
        assert classify_source("images/pic.png") == ("images/pic.png", SourceKind.EXTERNAL)


class TestIsResourceId:
    def test_valid(self):
        assert is_resource_id("0123456789abcdef0123456789abcdef")

    def test_invalid(self):
        assert not is_resource_id("abc")
        assert not is_resource_id("g" * 32)
        assert not is_resource_id(None)


class TestExtractMarkdownDetails:
    """Tests for Markdown image extraction."""

    def test_resource_image(self):
        """Extracts alt and resource id from ![alt](:/id)."""
        ref = extract_markdown_details(f"![My Image](:/{RESOURCE_ID})")
        assert ref.kind is SyntaxKind.MARKDOWN
        assert ref.source == RESOURCE_ID
        assert ref.source_kind is SourceKind.RESOURCE
        assert ref.alt_text == "My Image"
        assert ref.title == ""

    def test_double_quoted_title(self):
        ref = extract_markdown_details('![a](https://x.io/p.png "A title")')
        assert ref.title == "A title"
        assert ref.source == "https://x.io/p.png"

    def test_single_quoted_title(self):
        ref = extract_markdown_details("![a](https://x.io/p.png 'Other')")
        assert ref.title == "Other"

    def test_empty_alt(self):
        ref = extract_markdown_details(f"![](:/{RESOURCE_ID})")
        assert ref.alt_text == ""

    def test_escaped_paren_in_source(self):
        ref = extract_markdown_details(r"![a](https://x.io/p\).png)")
        assert ref.source == r"https://x.io/p\).png"

    def test_not_an_image(self):
        assert extract_markdown_details("[link](https://x.io)") is None


class TestExtractHtmlDetails:
    """Tests for <img> extraction."""

    def test_external_image(self):
        """Extracts src and decoded alt from an <img> tag."""
        ref = extract_html_details(
            '<img src="https://example.com/a.png" alt="Fish &amp; Chips" width="10">'
        )
        assert ref.kind is SyntaxKind.HTML
        assert ref.source == "https://example.com/a.png"
        assert ref.source_kind is SourceKind.EXTERNAL
        assert ref.alt_text == "Fish & Chips"

    def test_single_quotes_and_title(self):
        ref = extract_html_details(f"<img src=':/{RESOURCE_ID}' title='Say &quot;hi&quot;'>")
        assert ref.source_kind is SourceKind.RESOURCE
        assert ref.title == 'Say "hi"'

    def test_quote_inside_other_quote(self):
        """A ' inside a double-quoted value does not end it."""
        ref = extract_html_details("""<img src="x.png" alt="it's here">""")
        assert ref.alt_text == "it's here"

    def test_data_src_is_not_src(self):
        """data-src must not be mistaken for src."""
        ref = extract_html_details('<img data-src="wrong.png" src="right.png">')
        assert ref.source == "right.png"

    def test_missing_src(self):
        assert extract_html_details('<img alt="no source">') is None

    def test_raw_syntax_is_the_tag(self):
        tag = '<img src="a.png" />'
        assert extract_html_details(f"<p>{tag}</p>").raw_syntax == tag


class TestExtractImageDetails:
    """Tests for extract_image_details."""

    def test_prefers_markdown(self):
        ref = extract_image_details(f'![md](:/{RESOURCE_ID}) <img src="b.png">')
        assert ref.kind is SyntaxKind.MARKDOWN

    def test_falls_back_to_html(self):
        ref = extract_image_details('<img src="b.png">')
        assert ref.kind is SyntaxKind.HTML

    def test_empty_text(self):
        assert extract_image_details("") is None

    def test_plain_text(self):
        assert extract_image_details("just words") is None


class TestSelectionValidation:
    """Tests for image counting helpers."""

    def test_count_images(self):
        text = f'![a](:/{RESOURCE_ID}) and <img src="b.png"> and <img alt="x">'
        assert count_images(text) == 2

    def test_contains_any_image(self):
        assert contains_any_image("see ![a](b.png)")
        assert not contains_any_image("nothing here")

    def test_is_single_image(self):
        assert is_single_image(f"  ![a](:/{RESOURCE_ID})\n")
        assert is_single_image('<img src="b.png" />')

    def test_is_not_single_image(self):
        assert not is_single_image("text ![a](b.png)")
        assert not is_single_image("![a](b.png)![c](d.png)")
        assert not is_single_image("")
