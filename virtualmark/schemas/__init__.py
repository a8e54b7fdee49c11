from __future__ import annotations

# Re-export common schema classes for convenient imports
from .auth import LoginRequest  # noqa: F401
from .content import (  # noqa: F401
    BLOG_CATEGORIES,
    CLIENT_INDUSTRIES,
    CLIENT_SIZES,
    STATUSES,
    BlogPost,
    CaseStudy,
    CaseWire,
    Metric,
    PostWire,
)

__all__ = [
    # auth
    "LoginRequest",
    # content
    "BLOG_CATEGORIES",
    "CLIENT_INDUSTRIES",
    "CLIENT_SIZES",
    "STATUSES",
    "BlogPost",
    "CaseStudy",
    "CaseWire",
    "Metric",
    "PostWire",
]
