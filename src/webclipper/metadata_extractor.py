"""Page metadata extraction from meta tags and DOM heuristics."""

import logging
from typing import Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .dates import format_ko_date, parse_date
from .models.page import PageMetadata, PageSnapshot

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"

AUTHOR_SELECTOR = '[rel="author"], .author, .byline, [itemprop="author"]'
PUBLISHED_SELECTOR = 'time[datetime], [itemprop="datePublished"]'
FAVICON_SELECTOR = 'link[rel~="icon"]'


def _clean_text(value: Optional[str]) -> Optional[str]:
    """Collapse whitespace; empty strings become None."""
    if value is None:
        return None
    text = " ".join(str(value).split())
    return text or None


class MetadataExtractor:
    """
    Extracts title, author, date, description, site name and favicon.

    Each field is looked up independently, from Open Graph tags first,
    then generic meta tags, then DOM heuristics. A missing field never
    blocks the others, and the title always falls back to "Untitled".

    Example:
        extractor = MetadataExtractor()
        metadata = extractor.extract(soup, "https://example.com/post")
    """

    def _meta_content(self, soup: Union[BeautifulSoup, Tag], **attrs: str) -> Optional[str]:
        """Content of the first <meta> matching the given attributes."""
        meta = soup.find("meta", attrs=attrs)
        if isinstance(meta, Tag):
            return _clean_text(meta.get("content"))
        return None

    def _extract_title(self, soup: Union[BeautifulSoup, Tag]) -> str:
        og_title = self._meta_content(soup, property="og:title")
        if og_title:
            return og_title

        title_tag = soup.find("title")
        if isinstance(title_tag, Tag):
            title = _clean_text(title_tag.get_text())
            if title:
                return title

        h1 = soup.find("h1")
        if isinstance(h1, Tag):
            heading = _clean_text(h1.get_text())
            if heading:
                return heading

        return UNTITLED

    def _extract_author(self, soup: Union[BeautifulSoup, Tag]) -> Optional[str]:
        author = self._meta_content(soup, property="article:author") or self._meta_content(soup, name="author")
        if author:
            return author

        element = soup.select_one(AUTHOR_SELECTOR)
        if element is None:
            return None
        return _clean_text(element.get("content")) or _clean_text(element.get_text())

    def _extract_published_date(self, soup: Union[BeautifulSoup, Tag]) -> Optional[str]:
        raw = self._meta_content(soup, property="article:published_time")

        if not raw:
            element = soup.select_one(PUBLISHED_SELECTOR)
            if element is not None:
                raw = (
                    _clean_text(element.get("datetime"))
                    or _clean_text(element.get("content"))
                    or _clean_text(element.get_text())
                )

        if not raw:
            return None

        published = parse_date(raw)
        if published is None:
            logger.debug(f"Ignoring unparsable published date {raw!r}")
            return None
        return format_ko_date(published)

    def _extract_description(self, soup: Union[BeautifulSoup, Tag]) -> Optional[str]:
        return self._meta_content(soup, property="og:description") or self._meta_content(soup, name="description")

    def _extract_favicon(self, soup: Union[BeautifulSoup, Tag], base_url: str) -> Optional[str]:
        link = soup.select_one(FAVICON_SELECTOR)
        if link is None:
            return None
        href = _clean_text(link.get("href"))
        if not href:
            return None
        return urljoin(base_url, href) if base_url else href

    def extract(self, soup: Union[BeautifulSoup, Tag], page: PageSnapshot) -> PageMetadata:
        """
        Extract metadata from a parsed page.

        Args:
            soup: Parsed page HTML
            page: Snapshot the soup was parsed from (for URL-derived fields)

        Returns:
            Page metadata; title, url and site_name are always set
        """
        metadata = PageMetadata(
            title=self._extract_title(soup),
            url=page.url,
            author=self._extract_author(soup),
            published_date=self._extract_published_date(soup),
            description=self._extract_description(soup),
            site_name=self._meta_content(soup, property="og:site_name") or page.hostname,
            favicon=self._extract_favicon(soup, page.origin or page.url),
        )
        logger.debug(f"Extracted metadata for {page.url or '<no url>'}: title={metadata.title!r}")
        return metadata


_default_extractor = MetadataExtractor()


def extract_metadata(page: PageSnapshot, soup: Optional[BeautifulSoup] = None) -> PageMetadata:
    """
    Extract metadata from a page snapshot.

    Args:
        page: Page snapshot
        soup: Already-parsed page HTML (parsed from page.html if omitted)

    Returns:
        Page metadata
    """
    if soup is None:
        soup = BeautifulSoup(page.html, "html.parser")
    return _default_extractor.extract(soup, page)
