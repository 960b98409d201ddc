"""
webclipper - Clip web pages into Markdown scraps and render them back to HTML.

Usage:
    from webclipper import PageSnapshot, clip_page, to_html

    page = PageSnapshot(html=html, url="https://example.com/post")
    result = clip_page(page, preserve_images=False)
    print(result.content)

    editable = to_html(result.content)
"""

__version__ = "1.0.0"

from .clipper import WebClipper, check_selection, clip_minimal, clip_page, clip_selection, quick_clip
from .conversion import (
    EDITOR_CONVERTER,
    HtmlSanitizer,
    HtmlToMarkdown,
    MainContentDetector,
    MarkdownToHtml,
    clean_html,
    detect_main_content,
    markdown_to_plain_text_preview,
    to_html,
    to_markdown,
)
from .errors import ClipperError, FetchError, NoSelectionError
from .metadata_extractor import MetadataExtractor, extract_metadata
from .models import (
    ClipperOptions,
    ClipProfile,
    PageMetadata,
    PageSnapshot,
    ScrapResult,
    SelectionInfo,
)

__all__ = [
    "__version__",
    # Clipping
    "WebClipper",
    "clip_page",
    "quick_clip",
    "clip_selection",
    "clip_minimal",
    "check_selection",
    # Conversion
    "HtmlSanitizer",
    "HtmlToMarkdown",
    "MainContentDetector",
    "MarkdownToHtml",
    "EDITOR_CONVERTER",
    "clean_html",
    "detect_main_content",
    "markdown_to_plain_text_preview",
    "to_html",
    "to_markdown",
    # Metadata
    "MetadataExtractor",
    "extract_metadata",
    # Models
    "ClipperOptions",
    "ClipProfile",
    "PageMetadata",
    "PageSnapshot",
    "ScrapResult",
    "SelectionInfo",
    # Errors
    "ClipperError",
    "FetchError",
    "NoSelectionError",
]
