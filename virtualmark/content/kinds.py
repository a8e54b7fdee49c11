"""
Content kind descriptors.

A descriptor bundles everything that differs between posts and case
studies, so a single ``ContentRepository`` implementation serves both.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal

from virtualmark.content import mapper, workflow
from virtualmark.content.validation import ValidationResult, validate_case, validate_post
from virtualmark.schemas.content import BlogPost, CaseStudy

WriteMode = Literal["insert_update", "upsert"]


@dataclass(frozen=True)
class ContentKind:
    name: str
    table: str
    record_type: type
    to_domain: Callable[[dict[str, Any]], Any]
    to_wire: Callable[[Any], dict[str, Any]]
    validate: Callable[[Any], ValidationResult]
    prepare: Callable[[Any], Any]
    # (column, descending) for the initial list query
    order: tuple[str, bool]
    write_mode: WriteMode = "insert_update"

    def parse(self, payload: dict[str, Any]):
        """Build a domain record from a JSON request body."""
        return self.record_type.model_validate(payload)


POST_KIND = ContentKind(
    name="post",
    table="posts",
    record_type=BlogPost,
    to_domain=mapper.post_to_domain,
    to_wire=mapper.post_to_wire,
    validate=validate_post,
    prepare=workflow.prepare_post,
    order=("date", True),
)

CASE_KIND = ContentKind(
    name="case",
    table="cases",
    record_type=CaseStudy,
    to_domain=mapper.case_to_domain,
    to_wire=mapper.case_to_wire,
    validate=validate_case,
    prepare=workflow.prepare_case,
    order=("created_at", True),
    write_mode="upsert",
)

KINDS = {kind.table: kind for kind in (POST_KIND, CASE_KIND)}
