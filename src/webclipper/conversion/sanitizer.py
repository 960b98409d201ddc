"""HTML cleanup before Markdown conversion."""

import copy
import logging
import re
from typing import Optional, Union

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
# An opening tag; quoted values may contain ">"
_TAG_RE = re.compile(r"""<[a-zA-Z](?:"[^"]*"|'[^']*'|[^'">])*>""")
# Attributes may follow a closing quote directly and values may be unquoted
_ATTRIBUTE_RE = re.compile(
    r"""(?:\s+|(?<=["']))(?:class|id|style|onclick|onload)\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'>]+)""",
    re.IGNORECASE,
)
_EMPTY_ELEMENT_RE = re.compile(r"<(\w+)[^>]*>\s*</\1>", re.IGNORECASE)

# Elements removed from a cloned <body> when no main content was found
UNWANTED_SELECTORS = [
    "script",
    "style",
    "noscript",
    "nav",
    "header",
    "footer",
    "aside",
    ".navigation",
    ".menu",
    ".sidebar",
    ".ads",
    ".advertisement",
    ".social-share",
    ".comments",
    ".related-posts",
]


class HtmlSanitizer:
    """
    Removes executable content and presentation-only markup.

    Two strategies are provided. ``clean`` is a string-to-string regex
    pass used right before conversion. ``remove_unwanted`` works on a
    parsed tree and strips whole page-chrome elements (navigation, ads,
    comments sections) from a cloned ``<body>``.

    Example:
        sanitizer = HtmlSanitizer()
        html = sanitizer.clean('<p class="x" onclick="y()">Hi</p><script>z()</script>')
        # '<p>Hi</p>'
    """

    def __init__(self, unwanted_selectors: Optional[list[str]] = None):
        """
        Initialize the sanitizer.

        Args:
            unwanted_selectors: CSS selectors for remove_unwanted (extends defaults)
        """
        self._unwanted_selectors = list(UNWANTED_SELECTORS)
        if unwanted_selectors:
            self._unwanted_selectors.extend(unwanted_selectors)

    def _clean_once(self, html: str) -> str:
        html = _SCRIPT_RE.sub("", html)
        html = _STYLE_RE.sub("", html)
        html = _COMMENT_RE.sub("", html)
        html = _TAG_RE.sub(lambda match: _ATTRIBUTE_RE.sub("", match.group(0)), html)
        return _EMPTY_ELEMENT_RE.sub("", html)

    def clean(self, html: str) -> str:
        """
        Strip scripts, styles, comments, presentation attributes and empty elements.

        Passes repeat until the output is stable, so the result is a fixed
        point: cleaning it again returns it unchanged.

        Args:
            html: Raw HTML string

        Returns:
            Sanitized HTML string
        """
        if not html:
            return ""

        passes = 0
        while True:
            cleaned = self._clean_once(html)
            passes += 1
            # Every pass only deletes text, so this terminates
            if cleaned == html:
                break
            html = cleaned

        logger.debug(f"Sanitized HTML in {passes} pass(es), {len(html)} chars left")
        return html

    def remove_unwanted(self, element: Tag) -> None:
        """Remove navigation, ads, and other unwanted elements in place."""
        for selector in self._unwanted_selectors:
            for el in element.select(selector):
                # Already gone with a removed ancestor
                if el.decomposed:
                    continue
                el.decompose()

    def cleaned_body(self, soup: Union[BeautifulSoup, Tag]) -> Tag:
        """
        Return a cleaned copy of the document body.

        The source tree is never modified. Documents without a ``<body>``
        are copied whole.
        """
        body = soup.find("body")
        source = body if isinstance(body, Tag) else soup
        clone = copy.copy(source)
        self.remove_unwanted(clone)
        return clone


_default_sanitizer = HtmlSanitizer()


def clean_html(html: str) -> str:
    """Sanitize an HTML string with the default sanitizer."""
    return _default_sanitizer.clean(html)
