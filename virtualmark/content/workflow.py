"""
Status and slug workflow.

Pure transforms applied to a record right before it is validated and
written: slug normalization, image URL prefixing, rich-text cleanup, and the
draft <-> published flip.
"""
from __future__ import annotations

import re

from virtualmark.schemas.content import BlogPost, CaseStudy
from virtualmark.utils.html_sanitizer import sanitize_html
from virtualmark.utils.slug import slugify

BLOG_IMAGE_PREFIX = "/blog/"

IMAGE_URL_PATTERN = re.compile(r"^(/blog/|https?://).+")

_BARE_FILENAME = re.compile(r"^[^/:]+$")


def normalize_slug(slug: str) -> str:
    return slugify(slug)


def slug_from_title(title: str) -> str:
    return slugify(title)


def normalize_image_url(url: str) -> str:
    """Trim, and prefix bare filenames (``hero.jpg``) with ``/blog/``.

    Anything that already looks like a path or URL is returned trimmed and
    left for the validation gate to accept or reject.
    """
    url = (url or "").strip()
    if url and _BARE_FILENAME.match(url):
        return BLOG_IMAGE_PREFIX + url
    return url


def flip_status(status: str) -> str:
    return "draft" if status == "published" else "published"


def toggle_status(record):
    """Return a copy of *record* with its status flipped. No transition guard."""
    return record.model_copy(update={"status": flip_status(record.status)})


def prepare_post(post: BlogPost) -> BlogPost:
    return post.model_copy(
        update={
            "title": post.title.strip(),
            "excerpt": post.excerpt.strip(),
            "author": post.author.strip(),
            "content": sanitize_html(post.content.strip()),
            "image_url": normalize_image_url(post.image_url),
        }
    )


def prepare_case(case: CaseStudy) -> CaseStudy:
    # Slug is re-normalized on every write, hand-edited or not
    slug = normalize_slug(case.slug) if case.slug.strip() else slug_from_title(case.title)
    return case.model_copy(
        update={
            "title": case.title.strip(),
            "slug": slug,
            "description": sanitize_html(case.description.strip()),
            "challenge": sanitize_html(case.challenge.strip()),
            "solution": sanitize_html(case.solution.strip()),
            "results": sanitize_html(case.results.strip()),
            "client_name": case.client_name.strip(),
            "duration": case.duration.strip(),
            "image_url": case.image_url.strip(),
            "tools": tuple(t.strip() for t in case.tools if t.strip()),
        }
    )
