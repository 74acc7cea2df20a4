"""Markdown rendering for decrypted content.

A deliberately small renderer: headings, paragraphs, unordered lists,
one-line blockquotes, fenced code and inline bold/italic/code/links.
Every character of user text is HTML-escaped exactly once, so the
output is safe to insert into a page as-is.
"""

import re

CONTENT_FORMATS = ("html", "markdown")

_FENCE = "```"
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")
_LIST_RE = re.compile(r"^\s*[-*+]\s+(.*)$")
_QUOTE_RE = re.compile(r"^\s*>\s?(.*)$")

# Alternation order is precedence order: bold must be tried before italic,
# since "**x**" also contains an italic-shaped run.
_INLINE_RE = re.compile(
    r"\*\*(?P<bold>[^*]+)\*\*"
    r"|\*(?P<italic>[^*]+)\*"
    r"|`(?P<code>[^`]+)`"
    r"|\[(?P<label>[^\]]+)\]\((?P<url>[^)]+)\)"
)


def escape_html(text: str | None) -> str:
    """Escape text content (also escapes the apostrophe)."""
    if text is None:
        return ""
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def escape_attribute(value: str | None) -> str:
    """Escape a value for a double-quoted HTML attribute."""
    if value is None:
        return ""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def _render_token(match: re.Match) -> str:
    if match.group("bold") is not None:
        return f"<strong>{escape_html(match.group('bold'))}</strong>"
    if match.group("italic") is not None:
        return f"<em>{escape_html(match.group('italic'))}</em>"
    if match.group("code") is not None:
        return f"<code>{escape_html(match.group('code'))}</code>"
    return (
        f'<a href="{escape_attribute(match.group("url"))}" '
        f'rel="noopener noreferrer">{escape_html(match.group("label"))}</a>'
    )


def render_inline(text: str) -> str:
    """Render inline markup within a single line of text.

    Recognized runs are wrapped in their tags with escaped content; the
    plain text between them is escaped afterwards. Generated markup is
    never scanned again, so nothing is escaped twice.
    """
    if not text:
        return ""

    parts = []
    pos = 0
    for match in _INLINE_RE.finditer(text):
        parts.append(escape_html(text[pos : match.start()]))
        parts.append(_render_token(match))
        pos = match.end()
    parts.append(escape_html(text[pos:]))
    return "".join(parts)


class _BlockRenderer:
    """Line-oriented state machine for one document."""

    def __init__(self) -> None:
        self.html: list[str] = []
        self.in_code = False
        self.code: list[str] = []
        self.in_list = False
        self.items: list[str] = []
        self.paragraph: list[str] = []

    def flush_paragraph(self) -> None:
        if self.paragraph:
            self.html.append(f"<p>{render_inline(' '.join(self.paragraph))}</p>")
            self.paragraph = []

    def flush_list(self) -> None:
        if self.in_list:
            self.html.append(f"<ul>{''.join(self.items)}</ul>")
            self.items = []
            self.in_list = False

    def flush_code(self) -> None:
        if self.code:
            code = escape_html("\n".join(self.code))
            self.html.append(f"<pre><code>{code}</code></pre>")
            self.code = []

    def feed(self, line: str) -> None:
        if line.strip().startswith(_FENCE):
            if self.in_code:
                self.in_code = False
                self.flush_code()
            else:
                self.flush_paragraph()
                self.flush_list()
                self.in_code = True
            return

        if self.in_code:
            self.code.append(line)
            return

        if not line.strip():
            self.flush_paragraph()
            self.flush_list()
            return

        heading = _HEADING_RE.match(line)
        if heading:
            self.flush_paragraph()
            self.flush_list()
            level = len(heading.group(1))
            self.html.append(f"<h{level}>{render_inline(heading.group(2))}</h{level}>")
            return

        item = _LIST_RE.match(line)
        if item:
            self.flush_paragraph()
            self.in_list = True
            self.items.append(f"<li>{render_inline(item.group(1))}</li>")
            return

        # One blockquote per line; consecutive quote lines are not merged
        quote = _QUOTE_RE.match(line)
        if quote:
            self.flush_paragraph()
            self.flush_list()
            content = render_inline(quote.group(1))
            self.html.append(f"<blockquote>{content}</blockquote>")
            return

        self.paragraph.append(line.strip())

    def finish(self) -> str:
        # An unterminated fence is closed by the end of the document
        if self.in_code:
            self.flush_code()
        else:
            self.flush_paragraph()
            self.flush_list()
        return "".join(self.html)


def markdown_to_html(markdown: str) -> str:
    """Render a markdown document to HTML.

    Args:
        markdown: Markdown source; CRLF line endings are accepted.

    Returns:
        Concatenated block elements in document order.
    """
    if not markdown:
        return ""

    renderer = _BlockRenderer()
    for line in markdown.replace("\r\n", "\n").split("\n"):
        renderer.feed(line)
    return renderer.finish()


def render_content(text: str, content_format: str | None = "html") -> str:
    """Render decrypted text for insertion into a page.

    Args:
        text: Decrypted plaintext.
        content_format: "markdown" for full rendering; "html" (or anything
            unrecognized) inserts the text unchanged.

    Returns:
        HTML string.
    """
    if (content_format or "html").lower() == "markdown":
        return markdown_to_html(text)
    return text
