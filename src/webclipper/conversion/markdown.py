"""HTML to Markdown conversion."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Iterator, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

from ..dates import format_ko_datetime
from ..models.page import PageMetadata

logger = logging.getLogger(__name__)

HEADING_LEVELS = {f"h{level}": level for level in range(1, 7)}

# Elements whose content never reaches the output
SKIPPED_TAGS = {"script", "style", "noscript", "iframe", "embed", "template"}

_IGNORED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)
_LANGUAGE_CLASS_RE = re.compile(r"language-(\w+)")
_WHITESPACE_RE = re.compile(r"\s+")
_LINE_BREAK_RE = re.compile(r"\s*\n\s*")

# Whitespace-only text next to these (or at their edges) is layout, not content
BLOCK_TAGS = {
    *HEADING_LEVELS,
    "address",
    "article",
    "aside",
    "blockquote",
    "body",
    "br",
    "dd",
    "div",
    "dl",
    "dt",
    "figcaption",
    "figure",
    "footer",
    "form",
    "head",
    "header",
    "hr",
    "html",
    "li",
    "main",
    "nav",
    "ol",
    "p",
    "pre",
    "section",
    "table",
    "tbody",
    "td",
    "tfoot",
    "th",
    "thead",
    "tr",
    "ul",
}


def _is_block_boundary(string: NavigableString, parent: Tag, forward: bool) -> bool:
    """True when the text node's neighbour on one side starts or ends a block."""
    sibling = string.next_sibling if forward else string.previous_sibling
    while isinstance(sibling, _IGNORED_STRINGS):
        sibling = sibling.next_sibling if forward else sibling.previous_sibling
    if sibling is None:
        return isinstance(parent, BeautifulSoup) or parent.name in BLOCK_TAGS
    return isinstance(sibling, Tag) and sibling.name in BLOCK_TAGS


class HtmlToMarkdown:
    """
    Converts HTML content to Markdown.

    Walks the tree depth first with an explicit stack, so documents of
    any nesting depth convert without hitting the recursion limit.
    Unknown tags contribute only their children's output.

    Example:
        converter = HtmlToMarkdown()
        markdown = converter.convert("<h1>Title</h1><p>Some <b>bold</b> text</p>")
        # '# Title\\n\\nSome **bold** text\\n\\n'
    """

    def __init__(self, preserve_images: bool = True, preserve_links: bool = True):
        """
        Initialize the Markdown converter.

        Args:
            preserve_images: Emit ![alt](src) for images (dropped otherwise)
            preserve_links: Emit [text](href) for links (text only otherwise)
        """
        self._preserve_images = preserve_images
        self._preserve_links = preserve_links

    def _children(self, element: Tag) -> Iterator[object]:
        if element.name in ("ul", "ol"):
            return iter(element.find_all("li", recursive=False))
        return iter(list(element.children))

    def _render_leaf(self, element: Tag) -> str | None:
        """Output for elements that do not walk their children, else None."""
        name = element.name

        if name in SKIPPED_TAGS:
            return ""

        if name == "pre":
            code = element.get_text()
            # Parsers keep the newline right after <pre>, browsers drop it
            if code.startswith("\n"):
                code = code[1:]
            if not code.strip():
                return ""
            return f"```{self._code_language(element)}\n{code}\n```\n\n"

        if name == "code":
            text = element.get_text()
            parent = element.parent
            if parent is not None and parent.name == "pre":
                return text
            return f"`{text}`"

        if name == "hr":
            return "---\n\n"

        if name == "br":
            return "\n"

        if name == "img":
            src = element.get("src")
            if not self._preserve_images or not src:
                return ""
            return f"![{element.get('alt') or ''}]({src})"

        return None

    def _code_language(self, pre: Tag) -> str:
        code = pre.find("code")
        if not isinstance(code, Tag):
            return ""
        for class_name in code.get("class") or []:
            match = _LANGUAGE_CLASS_RE.match(class_name)
            if match:
                return match.group(1)
        return ""

    def _finish(self, element: Tag, parts: list[str]) -> str:
        """Combine an element's rendered children into its own output."""
        name = element.name
        content = "".join(parts)

        if name in HEADING_LEVELS:
            heading = _LINE_BREAK_RE.sub(" ", content.strip())
            return f"{'#' * HEADING_LEVELS[name]} {heading}\n\n"

        if name == "p":
            return f"{content}\n\n" if content.strip() else ""

        if name in ("ul", "ol"):
            items = [part.strip() for part in parts if part.strip()]
            if name == "ul":
                lines = [f"- {item}" for item in items]
            else:
                lines = [f"{number}. {item}" for number, item in enumerate(items, 1)]
            # A list nested in an item is flattened into the item text
            parent = element.parent
            if parent is not None and parent.name == "li":
                return " " + " ".join(lines) if lines else ""
            return "".join(f"{line}\n" for line in lines) + "\n"

        if name == "blockquote":
            quote = content.strip()
            if not quote:
                return ""
            return "> " + quote.replace("\n", "\n> ") + "\n\n"

        if name in ("strong", "b"):
            return f"**{content}**"

        if name in ("em", "i"):
            return f"*{content}*"

        if name == "u":
            return f"__{content}__"

        if name in ("del", "s", "strike"):
            return f"~~{content}~~"

        if name == "a":
            href = element.get("href")
            text = _LINE_BREAK_RE.sub(" ", content.strip())
            if self._preserve_links and href and text:
                return f"[{text}]({href})"
            return content

        return content

    def _render_text(self, string: NavigableString, parent: Tag) -> str:
        """Collapse whitespace like a browser and drop it at block boundaries."""
        text = _WHITESPACE_RE.sub(" ", str(string))
        if text.startswith(" ") and _is_block_boundary(string, parent, forward=False):
            text = text[1:]
        if text.endswith(" ") and _is_block_boundary(string, parent, forward=True):
            text = text[:-1]
        return text

    def _render(self, root: Tag) -> str:
        leaf = self._render_leaf(root)
        if leaf is not None:
            return leaf

        # Each frame: element, iterator over its children, rendered children
        stack: list[tuple[Tag, Iterator[object], list[str]]] = [(root, self._children(root), [])]
        while True:
            element, children, parts = stack[-1]
            child = next(children, None)

            if child is None:
                stack.pop()
                output = self._finish(element, parts)
                if not stack:
                    return output
                stack[-1][2].append(output)
                continue

            if isinstance(child, NavigableString):
                if not isinstance(child, _IGNORED_STRINGS):
                    text = self._render_text(child, element)
                    if text:
                        parts.append(text)
                continue

            if not isinstance(child, Tag):
                continue

            leaf = self._render_leaf(child)
            if leaf is not None:
                parts.append(leaf)
            else:
                stack.append((child, self._children(child), []))

    def convert(self, html: Union[str, Tag]) -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML string, or a parsed element/document

        Returns:
            Markdown string (empty for empty input)
        """
        if isinstance(html, Tag):
            root = html
        else:
            if not html:
                return ""
            root = BeautifulSoup(html, "html.parser")

        markdown = self._render(root)
        logger.debug(f"Converted HTML to {len(markdown)} chars of Markdown")
        return markdown


def normalize_whitespace(markdown: str) -> str:
    """Trim lines and collapse runs of blank lines; code fence bodies keep their indentation."""
    markdown = markdown.replace("\r\n", "\n").replace("\r", "\n")

    lines = []
    in_fence = False
    for line in markdown.split("\n"):
        if line.strip().startswith("```"):
            in_fence = not in_fence
            lines.append(line.strip())
        elif in_fence:
            lines.append(line.rstrip())
        else:
            lines.append(line.strip())

    markdown = re.sub(r"\n{3,}", "\n\n", "\n".join(lines))
    return markdown.strip()


class MetadataHeaderBuilder:
    """
    Builds the Markdown preamble prepended to clipped content.

    Example:
        builder = MetadataHeaderBuilder()
        header = builder.build(metadata, clipped_at=datetime.now(timezone.utc))
        # '# Example\\n\\n**작성자**: Jane\\n**출처**: [example.com](https://...)\\n...'
    """

    AUTHOR_LABEL = "작성자"
    PUBLISHED_LABEL = "게시일"
    DESCRIPTION_LABEL = "요약"
    SOURCE_LABEL = "출처"
    CLIPPED_AT_LABEL = "스크랩 일시"

    def build(self, metadata: PageMetadata, clipped_at: datetime) -> str:
        """
        Build the metadata header.

        Args:
            metadata: Page metadata
            clipped_at: When the clip was taken

        Returns:
            Markdown header ending with a newline
        """
        lines = [f"# {metadata.title}", ""]

        if metadata.author:
            lines.append(f"**{self.AUTHOR_LABEL}**: {metadata.author}")

        if metadata.published_date:
            lines.append(f"**{self.PUBLISHED_LABEL}**: {metadata.published_date}")

        if metadata.description:
            lines.append(f"**{self.DESCRIPTION_LABEL}**: {metadata.description}")

        lines.append(f"**{self.SOURCE_LABEL}**: [{metadata.site_name or ''}]({metadata.url})")
        lines.append(f"**{self.CLIPPED_AT_LABEL}**: {format_ko_datetime(clipped_at)}")

        return "\n".join(lines) + "\n"


_default_converter = HtmlToMarkdown()


def to_markdown(html: Union[str, Tag]) -> str:
    """Convert HTML (string or parsed element) to Markdown."""
    return _default_converter.convert(html)
