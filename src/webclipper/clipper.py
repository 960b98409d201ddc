"""Clip orchestration: page snapshot in, scrap result out."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from bs4 import BeautifulSoup

from .conversion.detector import MainContentDetector
from .conversion.markdown import HtmlToMarkdown, MetadataHeaderBuilder, normalize_whitespace
from .conversion.protocols import ContentDetector, MarkdownConverter
from .conversion.sanitizer import HtmlSanitizer
from .errors import NoSelectionError
from .metadata_extractor import MetadataExtractor
from .models.config import ClipperOptions, ClipProfile
from .models.page import PageSnapshot, ScrapResult, SelectionInfo
from .models.profiles import apply_profile

logger = logging.getLogger(__name__)

HEADER_SEPARATOR = "\n\n---\n\n"


def _iso_timestamp(value: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class WebClipper:
    """
    Clips a page into a Markdown scrap.

    Uses the selection when a selection-only clip is requested and one
    exists; otherwise the detected main content, falling back to a
    cleaned copy of <body>. Missing main content is never an error.

    Example:
        clipper = WebClipper(preserve_images=False)
        result = clipper.clip_page(PageSnapshot(html=html, url=url))
        print(result.content)
    """

    def __init__(
        self,
        options: Optional[ClipperOptions] = None,
        detector: Optional[ContentDetector] = None,
        sanitizer: Optional[HtmlSanitizer] = None,
        metadata_extractor: Optional[MetadataExtractor] = None,
        header_builder: Optional[MetadataHeaderBuilder] = None,
        converter: Optional[MarkdownConverter] = None,
        **overrides: Any,
    ):
        """
        Initialize the clipper.

        Args:
            options: Default clip options (ClipperOptions() if None)
            detector: Main content detector (uses default if None)
            sanitizer: HTML sanitizer (uses default if None)
            metadata_extractor: Metadata extractor (uses default if None)
            header_builder: Metadata header builder (uses default if None)
            converter: HTML to Markdown converter (None builds an HtmlToMarkdown per clip
                from the preserve_images and preserve_links options)
            **overrides: Individual option overrides, e.g. include_metadata=False
        """
        self._options = (options or ClipperOptions()).merge(**overrides)
        self._detector = detector or MainContentDetector()
        self._sanitizer = sanitizer or HtmlSanitizer()
        self._metadata_extractor = metadata_extractor or MetadataExtractor()
        self._header_builder = header_builder or MetadataHeaderBuilder()
        self._converter = converter

    @property
    def options(self) -> ClipperOptions:
        return self._options

    def _convert(self, html: str, options: ClipperOptions) -> str:
        if options.clean_html:
            html = self._sanitizer.clean(html)
        converter = self._converter or HtmlToMarkdown(
            preserve_images=options.preserve_images,
            preserve_links=options.preserve_links,
        )
        return normalize_whitespace(converter.convert(html))

    def _clip_main_content(self, soup: BeautifulSoup, options: ClipperOptions) -> str:
        element = self._detector.detect(soup)
        if element is None:
            logger.debug("No main content found, converting cleaned <body>")
            element = self._sanitizer.cleaned_body(soup)
        return self._convert(element.decode_contents(), options)

    def clip_page(
        self,
        page: PageSnapshot,
        options: Optional[ClipperOptions] = None,
        **overrides: Any,
    ) -> ScrapResult:
        """
        Clip a page.

        Args:
            page: Page snapshot to clip
            options: Options for this clip (the clipper's defaults if None)
            **overrides: Individual option overrides for this clip

        Returns:
            The scrap result
        """
        final_options = (options or self._options).merge(**overrides)
        clipped_at = datetime.now(timezone.utc)
        soup = BeautifulSoup(page.html, "html.parser")

        if final_options.selection_only and page.has_selection:
            logger.debug(f"Clipping selection of {page.url or '<no url>'}")
            content = self._convert(page.selection_html or "", final_options)
            selection_only = True
        else:
            content = self._clip_main_content(soup, final_options)
            selection_only = False

        metadata = self._metadata_extractor.extract(soup, page)

        if final_options.include_metadata:
            content = self._header_builder.build(metadata, clipped_at) + HEADER_SEPARATOR + content

        logger.info(f"Clipped {page.url or '<no url>'}: {len(content)} chars of Markdown")
        return ScrapResult(
            content=content,
            metadata=metadata,
            selection_only=selection_only,
            timestamp=_iso_timestamp(clipped_at),
        )

    def clip_selection(self, page: PageSnapshot, **overrides: Any) -> ScrapResult:
        """
        Clip only the selection, with no fallback to the main content.

        Raises:
            NoSelectionError: If the page has no selected text
        """
        if not page.has_selection:
            raise NoSelectionError()
        return self.clip_page(page, apply_profile(self._options, ClipProfile.SELECTION), **overrides)


default_clipper = WebClipper()


def clip_page(page: PageSnapshot, options: Optional[ClipperOptions] = None, **overrides: Any) -> ScrapResult:
    """Clip a page with the default clipper."""
    return default_clipper.clip_page(page, options, **overrides)


def quick_clip(page: PageSnapshot) -> ScrapResult:
    """Clip a page with default settings."""
    return default_clipper.clip_page(page)


def clip_selection(page: PageSnapshot) -> ScrapResult:
    """Clip only the selected part of a page; raises NoSelectionError without one."""
    return default_clipper.clip_selection(page)


def clip_minimal(page: PageSnapshot) -> ScrapResult:
    """Clip without the metadata header and without images."""
    return default_clipper.clip_page(page, apply_profile(default_clipper.options, ClipProfile.MINIMAL))


def check_selection(page: PageSnapshot) -> SelectionInfo:
    """Report whether the page has a selection and what it says."""
    return SelectionInfo(has_selection=page.has_selection, selected_text=page.selected_text)
