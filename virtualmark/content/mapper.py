"""
Record mapper: store rows (wire records) <-> domain records.

Pure translation, no I/O. Reads are shape-checked through the wire schemas so
a row with an incompatible type never lands in a repository's collection;
missing or null columns fall back to the domain defaults (``status`` becomes
``"draft"``). Writes drop an empty ``id`` so the store assigns one, and never
carry ``created_at``, which the store manages.
"""
from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from virtualmark.content.errors import RecordShapeError
from virtualmark.schemas.content import BlogPost, CaseStudy, CaseWire, PostWire

WireRecord = dict[str, Any]


def _text(value: str | None) -> str:
    return value if value is not None else ""


def post_to_domain(row: WireRecord) -> BlogPost:
    try:
        wire = PostWire.model_validate(row)
    except ValidationError as e:
        raise RecordShapeError("posts", row.get("id") if isinstance(row, dict) else None, e) from e
    return BlogPost(
        id=wire.id,
        title=_text(wire.title),
        excerpt=_text(wire.excerpt),
        content=_text(wire.content),
        category=_text(wire.category),
        author=_text(wire.author),
        date=wire.date,
        read_time=_text(wire.read_time),
        image_url=_text(wire.image_url),
        featured=bool(wire.featured),
        status=wire.status,
        created_at=wire.created_at,
    )


def post_to_wire(post: BlogPost) -> WireRecord:
    record: WireRecord = {
        "title": post.title,
        "excerpt": post.excerpt,
        "content": post.content,
        "category": post.category,
        "author": post.author,
        "read_time": post.read_time,
        "image_url": post.image_url,
        "featured": post.featured,
        "status": post.status,
    }
    # No date: the store stamps today's date on insert
    if post.date:
        record["date"] = post.date.isoformat()
    if post.id:
        record["id"] = post.id
    return record


def case_to_domain(row: WireRecord) -> CaseStudy:
    try:
        wire = CaseWire.model_validate(row)
    except ValidationError as e:
        raise RecordShapeError("cases", row.get("id") if isinstance(row, dict) else None, e) from e
    return CaseStudy(
        id=wire.id,
        title=_text(wire.title),
        slug=_text(wire.slug),
        description=_text(wire.description),
        challenge=_text(wire.challenge),
        solution=_text(wire.solution),
        results=_text(wire.results),
        client_name=_text(wire.client_name),
        client_industry=_text(wire.client_industry),
        client_size=_text(wire.client_size),
        client_testimonial=wire.client_testimonial,
        client_role=wire.client_role,
        duration=_text(wire.duration),
        image_url=_text(wire.image_url),
        featured=bool(wire.featured),
        tools=wire.tools,
        metrics=wire.metrics,
        gallery=wire.gallery,
        status=wire.status,
        created_at=wire.created_at,
    )


def case_to_wire(case: CaseStudy) -> WireRecord:
    record: WireRecord = {
        "title": case.title,
        "slug": case.slug,
        "description": case.description,
        "challenge": case.challenge,
        "solution": case.solution,
        "results": case.results,
        "client_name": case.client_name,
        "client_industry": case.client_industry,
        "client_size": case.client_size,
        "client_testimonial": case.client_testimonial,
        "client_role": case.client_role,
        "duration": case.duration,
        "image_url": case.image_url,
        "featured": case.featured,
        "tools": list(case.tools),
        "metrics": [metric.model_dump() for metric in case.metrics],
        "gallery": list(case.gallery),
        "status": case.status,
    }
    if case.id:
        record["id"] = case.id
    return record
