"""Loading page snapshots from URLs and local files."""

import logging
import re
from pathlib import Path
from typing import Optional

import requests

from . import __version__
from .errors import FetchError
from .models.page import PageSnapshot

logger = logging.getLogger(__name__)

_CHARSET_RE = re.compile(rb"""charset=["']?([^"'\s>;]+)""", re.IGNORECASE)


def detect_encoding(html: bytes, default: str = "utf-8") -> str:
    """Detect character encoding from a meta charset near the top of the document."""
    match = _CHARSET_RE.search(html[:2048])
    if match:
        return match.group(1).decode("ascii", errors="ignore").strip() or default
    return default


def decode_html(html: bytes, encoding: Optional[str] = None) -> str:
    """Decode HTML bytes, sniffing the charset when none is given."""
    encoding = encoding or detect_encoding(html)
    try:
        return html.decode(encoding, errors="replace")
    except LookupError:
        return html.decode("utf-8", errors="replace")


class PageLoader:
    """
    Builds page snapshots from http(s) URLs or local HTML files.

    Example:
        loader = PageLoader(timeout=5)
        page = loader.load("https://example.com/post")
        page = loader.load("saved.html", url="https://example.com/post")
    """

    def __init__(
        self,
        user_agent: str = f"webclipper/{__version__}",
        timeout: float = 15.0,
    ):
        """
        Initialize the loader.

        Args:
            user_agent: User-Agent header for URL requests
            timeout: Request timeout in seconds
        """
        self.user_agent = user_agent
        self.timeout = timeout

    def _fetch_url(self, url: str) -> str:
        try:
            response = requests.get(
                url,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e

        if response.status_code >= 400:
            raise FetchError(url, f"HTTP {response.status_code}", status_code=response.status_code)

        # requests guesses ISO-8859-1 for text/* without a charset header
        header_charset = "charset=" in response.headers.get("Content-Type", "").lower()
        logger.debug(f"Fetched {url} ({len(response.content)} bytes)")
        return decode_html(response.content, response.encoding if header_charset else None)

    def _read_file(self, path: Path) -> str:
        try:
            data = path.read_bytes()
        except OSError as e:
            raise FetchError(str(path), e.strerror or str(e)) from e
        logger.debug(f"Read {path} ({len(data)} bytes)")
        return decode_html(data)

    def load(
        self,
        source: str,
        url: Optional[str] = None,
        selection_html: Optional[str] = None,
    ) -> PageSnapshot:
        """
        Load a page snapshot.

        Args:
            source: http(s) URL or path to a local HTML file
            url: Address to record for the page (defaults to the URL, or the file URI)
            selection_html: HTML of the selection to attach

        Returns:
            Page snapshot

        Raises:
            FetchError: If the URL or file cannot be read
        """
        if source.startswith(("http://", "https://")):
            html = self._fetch_url(source)
            page_url = url or source
        else:
            path = Path(source)
            html = self._read_file(path)
            page_url = url or path.resolve().as_uri()

        return PageSnapshot(html=html, url=page_url, selection_html=selection_html)
