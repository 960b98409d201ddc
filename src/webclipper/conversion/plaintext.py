"""Plain-text previews of Markdown content."""

import re

# (pattern, replacement, flags) applied in order
_STRIP_RULES = [
    (r"^#{1,6}\s+(.*)$", r"\1", re.MULTILINE),  # headings
    (r"\*\*(.*?)\*\*", r"\1", 0),  # bold
    (r"__(.*?)__", r"\1", 0),  # underline / bold
    (r"\*(.*?)\*", r"\1", 0),  # italic
    (r"_(.*?)_", r"\1", 0),
    (r"~~(.*?)~~", r"\1", 0),  # strikethrough
    (r"!\[[^\]]*\]\([^)]+\)", "", 0),  # images
    (r"\[([^\]]+)\]\([^)]+\)", r"\1", 0),  # links
    (r"```[\s\S]*?```", "", 0),  # fenced code
    (r"`([^`]+)`", r"\1", 0),  # inline code
    (r"^>\s+(.*)$", r"\1", re.MULTILINE),  # quotes
    (r"^[-*+]\s+(.*)$", r"\1", re.MULTILINE),  # bullets
    (r"^\d+\.\s+(.*)$", r"\1", re.MULTILINE),  # numbered items
    (r"^[-*]{3,}$", "", re.MULTILINE),  # rules
    (r"\s+", " ", 0),
]

_COMPILED_RULES = [(re.compile(pattern, flags), replacement) for pattern, replacement, flags in _STRIP_RULES]


def markdown_to_plain_text(markdown: str) -> str:
    """Strip Markdown syntax and collapse whitespace."""
    if not markdown:
        return ""
    text = markdown
    for pattern, replacement in _COMPILED_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def markdown_to_plain_text_preview(markdown: str, max_length: int = 150) -> str:
    """
    Plain-text preview of Markdown, truncated for list views.

    Truncation prefers a word boundary when one falls in the last 20% of
    the allowed length.

    Args:
        markdown: Markdown content
        max_length: Maximum preview length before the ellipsis

    Returns:
        Preview text, with "..." appended when truncated
    """
    text = markdown_to_plain_text(markdown)
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.8:
        return truncated[:last_space] + "..."
    return truncated + "..."
