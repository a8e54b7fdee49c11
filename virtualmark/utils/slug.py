"""Slug generation utilities."""
from __future__ import annotations

import re

_NON_ALNUM = re.compile(r'[^a-z0-9]+')


def slugify(text: str) -> str:
    """
    Convert a string to a URL-friendly slug.

    The text is lowercased, every run of characters outside ``a-z0-9``
    becomes a single hyphen, and leading/trailing hyphens are stripped.
    Non-ASCII letters are not transliterated ("São Paulo" -> "s-o-paulo").
    Idempotent: slugifying a slug returns it unchanged.

    Args:
        text: The text to convert to a slug

    Returns:
        A URL-friendly slug string (possibly empty)
    """
    if not text:
        return ""

    text = text.lower()

    # Collapse runs of anything else into one hyphen
    text = _NON_ALNUM.sub('-', text)

    return text.strip('-')
