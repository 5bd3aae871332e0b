"""Helpers for measuring rich-text (HTML) content."""

import re

_TAG_PATTERN = re.compile(r"<[^>]*>")


def strip_markup(content: str) -> str:
    """Drop HTML tags and surrounding whitespace, leaving the visible text."""
    return _TAG_PATTERN.sub("", content).strip()
