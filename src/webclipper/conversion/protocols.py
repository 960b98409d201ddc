"""Protocol definitions for content conversion."""

from typing import Optional, Protocol, Union

from bs4 import BeautifulSoup, Tag


class ContentDetector(Protocol):
    """
    Protocol for locating the main content of a parsed page.

    Implementations should prefer the article body over navigation,
    headers, footers, ads, etc.
    """

    def detect(self, root: Union[BeautifulSoup, Tag]) -> Optional[Tag]:
        """
        Locate the main content element.

        Args:
            root: Parsed document

        Returns:
            The main content element, or None if nothing qualifies
        """
        ...


class MarkdownConverter(Protocol):
    """
    Protocol for converting HTML to Markdown.

    Implementations must not raise on malformed or unknown markup.
    """

    def convert(self, html: Union[str, Tag]) -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML string or parsed element

        Returns:
            Markdown string
        """
        ...
