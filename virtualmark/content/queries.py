"""
Read-side helpers for the public site.

All functions take a repository snapshot (a sequence of domain records) and
return new sequences; nothing here touches the store. Only published records
are ever returned by the search and filter helpers.
"""
from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from virtualmark.schemas.content import BlogPost, CaseStudy

ALL = "all"


@dataclass(frozen=True)
class Page:
    items: tuple
    page: int
    per_page: int
    total: int
    pages: int

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages


def published(records: Sequence) -> tuple:
    return tuple(r for r in records if r.is_published)


def _matches(query: str, *fields: str) -> bool:
    needle = query.strip().casefold()
    if not needle:
        return True
    return any(needle in (f or "").casefold() for f in fields)


def paginate(items: Sequence, page: int = 1, per_page: int = 6) -> Page:
    """Slice *items* into pages; out-of-range page numbers are clamped."""
    per_page = max(1, per_page)
    total = len(items)
    pages = max(1, math.ceil(total / per_page))
    page = min(max(1, page), pages)
    start = (page - 1) * per_page
    return Page(tuple(items[start:start + per_page]), page, per_page, total, pages)


# Posts


def search_posts(posts: Sequence[BlogPost], query: str = "", category: str = ALL) -> tuple[BlogPost, ...]:
    return tuple(
        p for p in published(posts)
        if (category == ALL or p.category == category) and _matches(query, p.title, p.excerpt)
    )


def featured_post(posts: Sequence[BlogPost]) -> Optional[BlogPost]:
    return next((p for p in posts if p.featured), None)


def _post_date(post: BlogPost) -> dt.date:
    return post.date or dt.date.min


def recent_posts(posts: Sequence[BlogPost], limit: int = 5) -> tuple[BlogPost, ...]:
    return tuple(sorted(published(posts), key=_post_date, reverse=True)[:limit])


def related_posts(posts: Sequence[BlogPost], post: BlogPost, limit: int = 3) -> tuple[BlogPost, ...]:
    """Other published posts in the same category."""
    related = [p for p in published(posts) if p.category == post.category and p.id != post.id]
    return tuple(related[:limit])


# Case studies


def find_case_by_slug(cases: Sequence[CaseStudy], slug: str) -> Optional[CaseStudy]:
    return next((c for c in cases if c.slug == slug), None)


def featured_cases(cases: Sequence[CaseStudy]) -> tuple[CaseStudy, ...]:
    return tuple(c for c in published(cases) if c.featured)


def filter_cases(cases: Sequence[CaseStudy], industry: str = ALL, query: str = "") -> tuple[CaseStudy, ...]:
    return tuple(
        c for c in published(cases)
        if (industry == ALL or c.client_industry == industry) and _matches(query, c.title, c.description)
    )


def industries(cases: Sequence[CaseStudy]) -> list[str]:
    seen: list[str] = []
    for case in cases:
        if case.client_industry and case.client_industry not in seen:
            seen.append(case.client_industry)
    return [ALL, *seen]
