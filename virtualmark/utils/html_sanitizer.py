"""
HTML sanitization for rich-text fields using bleach.

Post bodies and case study sections are authored in a WYSIWYG editor and
rendered as-is on the public site, so they are cleaned before every write.
"""
from __future__ import annotations

import bleach


# Allowed HTML tags for editor output
ALLOWED_TAGS = [
    # Text formatting
    'strong', 'b', 'em', 'i', 'u', 's', 'mark', 'small', 'sup', 'sub',
    # Headings
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    # Links and images
    'a', 'img',
    # Lists
    'ul', 'ol', 'li',
    # Line breaks and paragraphs
    'br', 'p', 'hr', 'div',
    # Code
    'code', 'pre',
    # Quotes
    'blockquote', 'cite',
    # Tables
    'table', 'thead', 'tbody', 'tr', 'th', 'td',
    'span',
]

# No style attributes: the public site's CSP blocks inline CSS anyway
ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title', 'target', 'rel'],
    'img': ['src', 'alt', 'title', 'width', 'height'],
    'blockquote': ['cite'],
    'td': ['colspan', 'rowspan'],
    'th': ['colspan', 'rowspan'],
    '*': ['id', 'class'],
}

ALLOWED_PROTOCOLS = ['http', 'https', 'mailto']


def sanitize_html(html_content: str | None) -> str:
    """
    Strip scripts, event handlers and disallowed tags from editor HTML.

    Args:
        html_content: Raw HTML content to sanitize

    Returns:
        Sanitized HTML content safe for rendering
    """
    if not html_content:
        return ""

    return bleach.clean(
        html_content,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,  # Strip disallowed tags instead of escaping
        strip_comments=True,
    )
