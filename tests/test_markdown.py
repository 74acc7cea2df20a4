"""Tests for hugo_protector.markdown module."""

import pytest

from hugo_protector.markdown import (
    escape_attribute,
    escape_html,
    markdown_to_html,
    render_content,
    render_inline,
)


class TestEscaping:
    """Tests for the two escaping rule sets."""

    def test_escape_html(self):
        assert escape_html("<a href=\"x\">'&'</a>") == (
            "&lt;a href=&quot;x&quot;&gt;&#39;&amp;&#39;&lt;/a&gt;"
        )

    def test_escape_attribute_keeps_apostrophe(self):
        assert escape_attribute("a'b\"c<d>&") == "a'b&quot;c&lt;d&gt;&amp;"

    def test_none(self):
        assert escape_html(None) == ""
        assert escape_attribute(None) == ""


class TestRenderInline:
    """Tests for inline formatting."""

    def test_empty(self):
        assert render_inline("") == ""

    def test_plain_text_escaped(self):
        assert render_inline("a < b & c") == "a &lt; b &amp; c"

    def test_bold(self):
        assert render_inline("**bold** text") == "<strong>bold</strong> text"

    def test_italic(self):
        assert render_inline("an *em* word") == "an <em>em</em> word"

    def test_bold_before_italic(self):
        """Bold delimiters are not mistaken for two italics."""
        assert render_inline("**a** and *b*") == "<strong>a</strong> and <em>b</em>"

    def test_code(self):
        assert render_inline("run `ls -l`") == "run <code>ls -l</code>"

    def test_code_content_escaped(self):
        assert render_inline("`<b>`") == "<code>&lt;b&gt;</code>"

    def test_link(self):
        assert render_inline("see [docs](https://example.com/?a=1&b=2)") == (
            'see <a href="https://example.com/?a=1&amp;b=2" '
            'rel="noopener noreferrer">docs</a>'
        )

    def test_link_attribute_breakout(self):
        """Quotes in a link target cannot close the href attribute."""
        html = render_inline('[x](" onmouseover="alert(1))')
        assert 'href="&quot; onmouseover=&quot;alert(1"' in html

    def test_escaped_exactly_once(self):
        """Text inside tags and around tags is escaped only once."""
        assert render_inline("a&b **c&d** e&f") == (
            "a&amp;b <strong>c&amp;d</strong> e&amp;f"
        )

    def test_unmatched_delimiters_are_text(self):
        assert render_inline("2 * 3 = 6") == "2 * 3 = 6"

    def test_script_escaped(self):
        assert render_inline("<script>x</script>") == "&lt;script&gt;x&lt;/script&gt;"


class TestMarkdownToHtml:
    """Tests for the block-level renderer."""

    def test_empty(self):
        assert markdown_to_html("") == ""

    def test_heading_and_paragraph(self):
        html = markdown_to_html("# Title\n\nBody *em*")
        assert html == "<h1>Title</h1><p>Body <em>em</em></p>"

    @pytest.mark.parametrize("level", range(1, 7))
    def test_heading_levels(self, level):
        html = markdown_to_html("#" * level + " Head")
        assert html == f"<h{level}>Head</h{level}>"

    def test_seven_hashes_is_paragraph(self):
        assert markdown_to_html("####### Nope") == "<p>####### Nope</p>"

    def test_hash_without_space_is_paragraph(self):
        assert markdown_to_html("#tag") == "<p>#tag</p>"

    def test_paragraph_lines_joined(self):
        html = markdown_to_html("first line\n   second line  \nthird")
        assert html == "<p>first line second line third</p>"

    def test_blank_line_separates_paragraphs(self):
        assert markdown_to_html("one\n\ntwo") == "<p>one</p><p>two</p>"

    def test_crlf_normalized(self):
        assert markdown_to_html("# T\r\n\r\nbody") == "<h1>T</h1><p>body</p>"

    def test_code_block(self):
        html = markdown_to_html("```\ncode\n```")
        assert html == "<pre><code>code</code></pre>"

    def test_code_block_no_inline_formatting(self):
        html = markdown_to_html("```python\n**not bold** <tag>\n  # not heading\n```")
        assert html == (
            "<pre><code>**not bold** &lt;tag&gt;\n  # not heading</code></pre>"
        )

    def test_unterminated_fence_flushed(self):
        html = markdown_to_html("intro\n```\nline one\nline two")
        assert html == "<p>intro</p><pre><code>line one\nline two</code></pre>"

    def test_fence_flushes_paragraph_and_list(self):
        html = markdown_to_html("para\n- item\n```\nx\n```")
        assert html == "<p>para</p><ul><li>item</li></ul><pre><code>x</code></pre>"

    def test_empty_code_block_emits_nothing(self):
        assert markdown_to_html("```\n```") == ""

    def test_list(self):
        html = markdown_to_html("- one\n* two\n+ **three**")
        assert html == (
            "<ul><li>one</li><li>two</li><li><strong>three</strong></li></ul>"
        )

    def test_list_after_paragraph(self):
        html = markdown_to_html("Intro\n- a\n- b\n\nOutro")
        assert html == "<p>Intro</p><ul><li>a</li><li>b</li></ul><p>Outro</p>"

    def test_blank_line_splits_lists(self):
        html = markdown_to_html("- a\n\n- b")
        assert html == "<ul><li>a</li></ul><ul><li>b</li></ul>"

    def test_blockquote_per_line(self):
        """Consecutive quote lines stay separate elements."""
        html = markdown_to_html("> first\n> second")
        assert html == "<blockquote>first</blockquote><blockquote>second</blockquote>"

    def test_blockquote_closes_list(self):
        html = markdown_to_html("- item\n> quote")
        assert html == "<ul><li>item</li></ul><blockquote>quote</blockquote>"

    def test_heading_closes_paragraph(self):
        html = markdown_to_html("text\n## Next")
        assert html == "<p>text</p><h2>Next</h2>"

    def test_script_injection_escaped(self):
        html = markdown_to_html("<script>alert(1)</script>")
        assert "<script>" not in html
        assert html == "<p>&lt;script&gt;alert(1)&lt;/script&gt;</p>"

    def test_injection_in_every_block(self):
        source = "# <img>\n- <img>\n> <img>\n<img>\n```\n<img>\n```"
        assert "<img>" not in markdown_to_html(source)

    def test_no_state_between_calls(self):
        markdown_to_html("```\nunterminated")
        assert markdown_to_html("plain") == "<p>plain</p>"


class TestRenderContent:
    """Tests for format dispatch."""

    def test_html_unchanged(self):
        assert render_content("<p>*x*</p>", "html") == "<p>*x*</p>"

    def test_markdown_rendered(self):
        assert render_content("*x*", "markdown") == "<p><em>x</em></p>"

    def test_case_insensitive(self):
        assert render_content("*x*", "Markdown") == "<p><em>x</em></p>"

    def test_unknown_format_is_html(self):
        assert render_content("*x*", "rst") == "*x*"
        assert render_content("*x*", None) == "*x*"
