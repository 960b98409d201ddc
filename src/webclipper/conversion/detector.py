"""Main content detection for clipped pages."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from bs4 import BeautifulSoup, CData, NavigableString, Tag

logger = logging.getLogger(__name__)

# Containers that typically hold the article body, in priority order
CONTENT_SELECTORS = [
    "article",
    '[role="main"]',
    "main",
    ".article-content",
    ".post-content",
    ".entry-content",
    ".content",
    "#content",
    ".main-content",
    ".post-body",
    ".article-body",
    ".markdown-body",  # GitHub and friends
    ".post",  # blogs
    ".story-body",  # news sites
]

NAVIGATION_KEYWORDS = ("nav", "menu", "sidebar", "header", "footer", "aside")

FALLBACK_CANDIDATES = ["div", "section", "article", "main"]
HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

MIN_WORDS = 50
MIN_FALLBACK_SCORE = 100
NAVIGATION_PENALTY = 0.1

# String types get_text() reads; comments, scripts and styles are skipped
_TEXT_TYPES = (NavigableString, CData)

# Word total and whether the text starts and ends inside a word; None when there is no text
_TextSummary = Optional[tuple[int, bool, bool]]


def word_count(element: Tag) -> int:
    """Count whitespace-separated words in the element's text."""
    return len(element.get_text().split())


def is_navigation_element(element: Tag) -> bool:
    """Check whether an element looks like navigation or page chrome."""
    class_attr = element.get("class") or []
    if isinstance(class_attr, str):
        class_attr = [class_attr]
    class_name = " ".join(class_attr).lower()
    tag_name = (element.name or "").lower()
    role = str(element.get("role") or "").lower()

    return any(
        keyword in class_name or tag_name == keyword or role == keyword for keyword in NAVIGATION_KEYWORDS
    )


def has_substantial_content(element: Tag) -> bool:
    """More than MIN_WORDS words and not navigation."""
    return word_count(element) > MIN_WORDS and not is_navigation_element(element)


@dataclass(frozen=True)
class ContentStats:
    """Word, paragraph and heading counts for one element's subtree."""

    words: int = 0
    paragraphs: int = 0
    headings: int = 0


def _summarize(text: str) -> _TextSummary:
    if not text:
        return None
    return len(text.split()), not text[0].isspace(), not text[-1].isspace()


def _join(left: _TextSummary, right: _TextSummary) -> _TextSummary:
    if left is None:
        return right
    if right is None:
        return left
    # A word split across the seam was counted on both sides
    words = left[0] + right[0] - (1 if left[2] and right[1] else 0)
    return words, left[1], right[2]


def collect_content_stats(root: Union[BeautifulSoup, Tag]) -> dict[int, ContentStats]:
    """
    Compute ContentStats for every element under ``root`` in one pass.

    Children are finished before their parent, so each element's counts
    are built from its children's instead of rescanning the subtree.
    Word counts match ``len(element.get_text().split())``.

    Returns:
        Stats keyed by ``id(element)``, root included
    """
    stats: dict[int, ContentStats] = {}
    summaries: dict[int, _TextSummary] = {}

    stack: list[tuple[Tag, bool]] = [(root, False)]
    while stack:
        element, children_done = stack.pop()
        if not children_done:
            stack.append((element, True))
            stack.extend((child, False) for child in element.contents if isinstance(child, Tag))
            continue

        text: _TextSummary = None
        paragraphs = headings = 0
        for child in element.contents:
            if isinstance(child, Tag):
                text = _join(text, summaries.pop(id(child)))
                child_stats = stats[id(child)]
                paragraphs += child_stats.paragraphs + (child.name == "p")
                headings += child_stats.headings + (child.name in HEADING_TAGS)
            elif type(child) in _TEXT_TYPES:
                text = _join(text, _summarize(str(child)))

        summaries[id(element)] = text
        stats[id(element)] = ContentStats(text[0] if text else 0, paragraphs, headings)

    return stats


def content_score(element: Tag, stats: Optional[ContentStats] = None) -> float:
    """
    Score an element by how much article-like content it holds.

    words + 10 per paragraph + 5 per heading, scaled down for
    navigation-like elements. Pass precomputed ``stats`` when scoring
    many elements of one document.
    """
    if stats is None:
        stats = collect_content_stats(element)[id(element)]
    score: float = stats.words + stats.paragraphs * 10 + stats.headings * 5

    if is_navigation_element(element):
        score *= NAVIGATION_PENALTY

    return score


@dataclass(frozen=True)
class ContentRule:
    """A selector and the test its matches must pass to be accepted."""

    selector: str
    accept: Callable[[Tag], bool] = has_substantial_content


DEFAULT_RULES = tuple(ContentRule(selector) for selector in CONTENT_SELECTORS)


class MainContentDetector:
    """
    Finds the element holding a page's main content.

    Rules are tried in order and the first accepted match wins, so a
    semantically named container beats a larger generic one. When no rule
    matches, every div/section/article/main is scored and the best one
    above the threshold is returned.

    Example:
        detector = MainContentDetector()
        element = detector.detect(BeautifulSoup(html, "html.parser"))
    """

    def __init__(
        self,
        rules: Optional[Sequence[ContentRule]] = None,
        min_score: float = MIN_FALLBACK_SCORE,
    ):
        """
        Initialize the detector.

        Args:
            rules: Ordered content rules (overrides defaults)
            min_score: Minimum fallback score an element must exceed
        """
        self._rules = tuple(rules) if rules is not None else DEFAULT_RULES
        self._min_score = min_score

    def _match_rules(self, root: Union[BeautifulSoup, Tag]) -> Optional[Tag]:
        for rule in self._rules:
            for element in root.select(rule.selector):
                if rule.accept(element):
                    logger.debug(f"Main content matched selector {rule.selector!r}")
                    return element
        return None

    def _find_largest_text_container(self, root: Union[BeautifulSoup, Tag]) -> Optional[Tag]:
        best_element: Optional[Tag] = None
        best_score: float = 0
        stats = collect_content_stats(root)

        for element in root.find_all(FALLBACK_CANDIDATES):
            score = content_score(element, stats[id(element)])
            if score > best_score and score > self._min_score:
                best_score = score
                best_element = element

        if best_element is not None:
            logger.debug(f"Main content chosen by score {best_score:.1f} (<{best_element.name}>)")
        return best_element

    def detect(self, root: Union[BeautifulSoup, Tag]) -> Optional[Tag]:
        """
        Locate the main content element.

        Args:
            root: Parsed document (or subtree) to search

        Returns:
            The main content element, or None if nothing qualifies
        """
        element = self._match_rules(root)
        if element is not None:
            return element
        return self._find_largest_text_container(root)


_default_detector = MainContentDetector()


def detect_main_content(root: Union[BeautifulSoup, Tag]) -> Optional[Tag]:
    """Locate the main content element with the default rules."""
    return _default_detector.detect(root)
