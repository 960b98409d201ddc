"""Page snapshot and scrap result models."""

from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from pydantic import BaseModel, Field


class PageSnapshot(BaseModel):
    """
    A loaded page as seen by the clipper.

    Stands in for a live browser document: the page source, the address it
    was loaded from, and the HTML of the user's current selection (the
    cloned range contents), if any.

    Example:
        page = PageSnapshot(html=html, url="https://example.com/post")
        page.hostname  # "example.com"
    """

    html: str = Field(..., description="Full HTML source of the page")
    url: str = Field("", description="Address the page was loaded from")
    selection_html: Optional[str] = Field(
        None,
        description="HTML fragment of the current selection (None = nothing selected)",
    )

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def hostname(self) -> str:
        return urlparse(self.url).hostname or ""

    @property
    def origin(self) -> str:
        parsed = urlparse(self.url)
        if parsed.scheme and parsed.netloc:
            return f"{parsed.scheme}://{parsed.netloc}"
        return ""

    @property
    def selected_text(self) -> str:
        """Plain text of the selection, stripped."""
        if not self.selection_html:
            return ""
        return BeautifulSoup(self.selection_html, "html.parser").get_text().strip()

    @property
    def has_selection(self) -> bool:
        """True when a non-collapsed selection with visible text exists."""
        return bool(self.selected_text)


class PageMetadata(BaseModel):
    """
    Metadata describing a clipped page.

    Serializes with camelCase aliases (``publishedDate``, ``siteName``)
    when dumped with ``by_alias=True``.
    """

    title: str = "Untitled"
    url: str = ""
    author: Optional[str] = None
    published_date: Optional[str] = Field(None, alias="publishedDate")
    description: Optional[str] = None
    site_name: Optional[str] = Field(None, alias="siteName")
    favicon: Optional[str] = None

    model_config = {"extra": "forbid", "frozen": True, "populate_by_name": True}


class ScrapResult(BaseModel):
    """
    Outcome of a clip, ready to hand to a storage or transport layer.

    Example:
        result = clip_page(page)
        payload = result.model_dump(mode="json", by_alias=True)
    """

    content: str = Field(..., description="Markdown content, metadata header optionally prepended")
    metadata: PageMetadata
    selection_only: bool = Field(False, alias="selectionOnly")
    timestamp: str = Field(..., description="ISO-8601 creation time (UTC)")

    model_config = {"extra": "forbid", "frozen": True, "populate_by_name": True}

    def to_payload(self) -> dict:
        """JSON-compatible dict with the camelCase wire keys."""
        return self.model_dump(mode="json", by_alias=True)


class SelectionInfo(BaseModel):
    """Whether a page has a selection, and its text."""

    has_selection: bool = Field(False, alias="hasSelection")
    selected_text: str = Field("", alias="selectedText")

    model_config = {"extra": "forbid", "frozen": True, "populate_by_name": True}
