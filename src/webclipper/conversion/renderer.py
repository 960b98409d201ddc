"""Markdown to HTML conversion for editable surfaces."""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^(#{1,6}) (.*)$")
_RULE_RE = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})$")
_ORDERED_ITEM_RE = re.compile(r"^\d+\.\s")

# Inline patterns, applied in this order
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_RE = re.compile(r"(?<!\*)\*([^*]+)\*(?!\*)")
_UNDERLINE_RE = re.compile(r"__(.+?)__")
_STRIKETHROUGH_RE = re.compile(r"~~(.+?)~~")
_CODE_RE = re.compile(r"`([^`]+)`")
# One level of parentheses may nest inside the URL
_LINK_RE = re.compile(r"\[([^\]]+)\]\(((?:[^()]|\([^()]*\))+)\)")
_SCHEME_RE = re.compile(r"([a-zA-Z][a-zA-Z0-9+.-]*):")
# Browsers ignore control characters and spaces inside a scheme
_URL_NOISE_RE = re.compile(r"[\x00-\x20]")

SAFE_LINK_SCHEMES = {"http", "https", "mailto"}


class Block(str, Enum):
    """Open block while scanning lines."""

    NONE = "none"
    UNORDERED_LIST = "unordered_list"
    ORDERED_LIST = "ordered_list"
    BLOCKQUOTE = "blockquote"
    CODE_FENCE = "code_fence"


@dataclass
class _ScanState:
    """Output and open-block state for one conversion."""

    out: list[str] = field(default_factory=list)
    block: Block = Block.NONE
    quote_lines: list[str] = field(default_factory=list)
    code_lines: list[str] = field(default_factory=list)
    code_language: str = ""

    def open(self, block: Block) -> None:
        """Make ``block`` the open block, closing any other first."""
        if self.block is block:
            return
        self.close()
        if block is Block.UNORDERED_LIST:
            self.out.append("<ul>")
        elif block is Block.ORDERED_LIST:
            self.out.append("<ol>")
        self.block = block

    def close(self) -> None:
        if self.block is Block.UNORDERED_LIST:
            self.out.append("</ul>")
        elif self.block is Block.ORDERED_LIST:
            self.out.append("</ol>")
        elif self.block is Block.BLOCKQUOTE:
            self.out.append("<blockquote>" + "<br>".join(self.quote_lines) + "</blockquote>")
            self.quote_lines = []
        elif self.block is Block.CODE_FENCE:
            css = f' class="language-{html.escape(self.code_language)}"' if self.code_language else ""
            code = html.escape("\n".join(self.code_lines), quote=False)
            self.out.append(f"<pre><code{css}>{code}</code></pre>")
            self.code_lines = []
            self.code_language = ""
        self.block = Block.NONE


class MarkdownToHtml:
    """
    Rebuilds HTML from Markdown, one line at a time.

    Handles headings, bullet and numbered lists, blockquotes, fenced
    code, horizontal rules and paragraphs, plus inline bold, italic,
    underline, strikethrough, code and links. Only one list is open at a
    time; a line of the other list type closes it and starts a new one.

    Example:
        converter = MarkdownToHtml()
        converter.convert("# Title\\n- a\\n1. b")
        # '<h1>Title</h1><ul><li>a</li></ul><ol><li>b</li></ol>'
    """

    def __init__(
        self,
        empty_result: str = "",
        blank_line: str = "<p><br></p>",
        bold_tag: str = "strong",
        italic_tag: str = "em",
        strikethrough: bool = True,
        passthrough_html: bool = False,
    ):
        """
        Initialize the HTML converter.

        Args:
            empty_result: Returned for empty input ("" or "<p></p>")
            blank_line: Placeholder emitted for blank lines ("<p><br></p>" or "<br>")
            bold_tag: Tag for **bold** ("strong" or "b")
            italic_tag: Tag for *italic* ("em" or "i")
            strikethrough: Convert ~~text~~ to <del>
            passthrough_html: Return input unchanged when it already looks like HTML
        """
        self._empty_result = empty_result
        self._blank_line = blank_line
        self._bold_tag = bold_tag
        self._italic_tag = italic_tag
        self._strikethrough = strikethrough
        self._passthrough_html = passthrough_html

    def format_inline(self, text: str) -> str:
        """Escape text and apply inline formatting."""
        text = html.escape(text, quote=False)
        text = _BOLD_RE.sub(rf"<{self._bold_tag}>\1</{self._bold_tag}>", text)
        text = _ITALIC_RE.sub(rf"<{self._italic_tag}>\1</{self._italic_tag}>", text)
        text = _UNDERLINE_RE.sub(r"<u>\1</u>", text)
        if self._strikethrough:
            text = _STRIKETHROUGH_RE.sub(r"<del>\1</del>", text)
        text = _CODE_RE.sub(r"<code>\1</code>", text)
        return _LINK_RE.sub(_render_link, text)

    def _convert_line(self, state: _ScanState, raw_line: str) -> None:
        if state.block is Block.CODE_FENCE:
            if raw_line.strip() == "```":
                state.close()
            else:
                state.code_lines.append(raw_line)
            return

        line = raw_line.strip()

        if line.startswith("```"):
            state.close()
            state.open(Block.CODE_FENCE)
            state.code_language = line[3:].strip()
            return

        heading = _HEADING_RE.match(line)
        if heading:
            state.close()
            level = len(heading.group(1))
            state.out.append(f"<h{level}>{self.format_inline(heading.group(2))}</h{level}>")
            return

        if _RULE_RE.match(line):
            state.close()
            state.out.append("<hr>")
            return

        if _ORDERED_ITEM_RE.match(line):
            state.open(Block.ORDERED_LIST)
            item = _ORDERED_ITEM_RE.sub("", line, count=1)
            state.out.append(f"<li>{self.format_inline(item)}</li>")
            return

        if line.startswith(("- ", "* ")):
            state.open(Block.UNORDERED_LIST)
            state.out.append(f"<li>{self.format_inline(line[2:])}</li>")
            return

        if line.startswith(">"):
            state.open(Block.BLOCKQUOTE)
            state.quote_lines.append(self.format_inline(line[1:].strip()))
            return

        state.close()
        if not line:
            state.out.append(self._blank_line)
        else:
            state.out.append(f"<p>{self.format_inline(line)}</p>")

    def convert(self, markdown: Optional[str]) -> str:
        """
        Convert Markdown to HTML.

        Args:
            markdown: Markdown text (None or "" yields the configured empty result)

        Returns:
            HTML string
        """
        if not markdown:
            return self._empty_result

        if self._passthrough_html and markdown.strip().startswith("<"):
            return markdown

        state = _ScanState()
        for raw_line in markdown.split("\n"):
            self._convert_line(state, raw_line)
        state.close()

        result = "".join(state.out)
        logger.debug(f"Converted Markdown to {len(result)} chars of HTML")
        return result


def _render_link(match: re.Match[str]) -> str:
    href = match.group(2).strip()
    scheme = _SCHEME_RE.match(_URL_NOISE_RE.sub("", href))
    if scheme and scheme.group(1).lower() not in SAFE_LINK_SCHEMES:
        # javascript:, data: and friends keep only their text
        return match.group(1)
    href = href.replace('"', "&quot;")
    return f'<a href="{href}">{match.group(1)}</a>'


_default_converter = MarkdownToHtml()

# Rich-text editor flavour: empty documents still need a paragraph, and
# content that is already HTML is loaded as-is
EDITOR_CONVERTER = MarkdownToHtml(empty_result="<p></p>", passthrough_html=True)


def to_html(markdown: Optional[str], empty_result: str = "") -> str:
    """Convert Markdown to HTML, returning ``empty_result`` for empty input."""
    if not markdown:
        return empty_result
    return _default_converter.convert(markdown)
