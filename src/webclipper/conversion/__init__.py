"""Content conversion for webclipper (detection, cleanup, HTML <-> Markdown)."""

from .detector import ContentRule, MainContentDetector, detect_main_content
from .markdown import HtmlToMarkdown, MetadataHeaderBuilder, normalize_whitespace, to_markdown
from .plaintext import markdown_to_plain_text, markdown_to_plain_text_preview
from .protocols import ContentDetector, MarkdownConverter
from .renderer import EDITOR_CONVERTER, MarkdownToHtml, to_html
from .sanitizer import HtmlSanitizer, clean_html

__all__ = [
    # Protocols
    "ContentDetector",
    "MarkdownConverter",
    # Implementations
    "ContentRule",
    "MainContentDetector",
    "HtmlSanitizer",
    "HtmlToMarkdown",
    "MarkdownToHtml",
    "MetadataHeaderBuilder",
    "EDITOR_CONVERTER",
    # Functions
    "clean_html",
    "detect_main_content",
    "markdown_to_plain_text",
    "markdown_to_plain_text_preview",
    "normalize_whitespace",
    "to_html",
    "to_markdown",
]
