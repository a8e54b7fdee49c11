"""
Validation gate for posts and case studies.

Runs before any write. Every violated rule contributes one message; nothing
short-circuits, so a single call reports every problem with the form at once.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from virtualmark.content.workflow import IMAGE_URL_PATTERN
from virtualmark.schemas.content import (
    BLOG_CATEGORIES,
    CLIENT_INDUSTRIES,
    CLIENT_SIZES,
    STATUSES,
    BlogPost,
    CaseStudy,
)


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return "\n".join(self.errors)

    def to_dict(self) -> dict:
        return {"isValid": self.is_valid, "errors": list(self.errors)}


def _blank(value) -> bool:
    return not (value or "").strip()


def _require(errors: list[str], record, fields: list[tuple[str, str]]) -> None:
    for attr, label in fields:
        if _blank(getattr(record, attr, "")):
            errors.append(f"{label} is required")


def _one_of(errors: list[str], value: str, allowed: tuple[str, ...], label: str) -> None:
    if value not in allowed:
        errors.append(f"{label} must be one of: {', '.join(allowed)}")


def _check_status(errors: list[str], status: str) -> None:
    if status not in STATUSES:
        errors.append('Status must be "draft" or "published"')


def validate_post(post: BlogPost) -> ValidationResult:
    errors: list[str] = []
    _require(errors, post, [
        ("title", "Title"),
        ("excerpt", "Excerpt"),
        ("content", "Content"),
        ("author", "Author"),
        ("image_url", "Image URL"),
    ])
    image_url = (post.image_url or "").strip()
    if image_url and not IMAGE_URL_PATTERN.match(image_url):
        errors.append('Image URL must start with "/blog/" or be a valid HTTP(S) URL')
    _one_of(errors, post.category, BLOG_CATEGORIES, "Category")
    _check_status(errors, post.status)
    return ValidationResult(is_valid=not errors, errors=errors)


def validate_case(case: CaseStudy) -> ValidationResult:
    errors: list[str] = []
    _require(errors, case, [
        ("title", "Title"),
        ("slug", "Slug"),
        ("description", "Description"),
        ("challenge", "Challenge"),
        ("solution", "Solution"),
        ("results", "Results"),
        ("client_name", "Client name"),
        ("duration", "Duration"),
        ("image_url", "Image URL"),
    ])
    _one_of(errors, case.client_industry, CLIENT_INDUSTRIES, "Client industry")
    _one_of(errors, case.client_size, CLIENT_SIZES, "Client size")
    _check_status(errors, case.status)
    return ValidationResult(is_valid=not errors, errors=errors)
