from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ContentStatus = Literal["draft", "published"]
STATUSES: tuple[str, ...] = ("draft", "published")

BLOG_CATEGORIES: tuple[str, ...] = ("marketing", "social media", "seo", "analytics")
CLIENT_INDUSTRIES: tuple[str, ...] = ("technology", "healthcare", "finance", "retail", "education", "other")
CLIENT_SIZES: tuple[str, ...] = ("small", "medium", "large", "enterprise")


def _status_or_draft(v):
    # Rows written before the status column existed carry no status
    if v is None or (isinstance(v, str) and not v.strip()):
        return "draft"
    return v


class Metric(BaseModel):
    """A headline result shown on a case study, e.g. ``+10%`` / ``ROI``."""

    model_config = ConfigDict(frozen=True)

    value: str = ""
    label: str = ""


class BlogPost(BaseModel):
    """Blog post domain record.

    Attributes are snake_case; the JSON surface uses camelCase aliases
    (``readTime``, ``imageUrl``) and accepts either spelling on input.
    ``id == ""`` means the post has not been persisted yet.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str = ""
    title: str = ""
    excerpt: str = ""
    content: str = ""
    category: str = BLOG_CATEGORIES[0]
    author: str = ""
    date: Optional[dt.date] = Field(default_factory=dt.date.today)
    read_time: str = "5 min"
    image_url: str = ""
    featured: bool = False
    status: str = "draft"
    created_at: Optional[dt.datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        return _status_or_draft(v)

    @property
    def is_published(self) -> bool:
        return self.status == "published"


class CaseStudy(BaseModel):
    """Client case study domain record. ``tools``, ``metrics`` and ``gallery`` keep edit order."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    title: str = ""
    slug: str = ""
    description: str = ""
    challenge: str = ""
    solution: str = ""
    results: str = ""
    client_name: str = ""
    client_industry: str = CLIENT_INDUSTRIES[0]
    client_size: str = CLIENT_SIZES[0]
    client_testimonial: Optional[str] = None
    client_role: Optional[str] = None
    duration: str = ""
    image_url: str = ""
    featured: bool = False
    tools: tuple[str, ...] = ()
    metrics: tuple[Metric, ...] = ()
    gallery: tuple[str, ...] = ()
    status: str = "draft"
    created_at: Optional[dt.datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        return _status_or_draft(v)

    @field_validator("tools", "metrics", "gallery", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return () if v is None else v

    @property
    def is_published(self) -> bool:
        return self.status == "published"


# Wire shapes: what the store hands back. Every column is nullable here so a
# sparse row still maps; type-incompatible values are rejected.


class PostWire(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str = ""
    created_at: Optional[dt.datetime] = None
    title: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    author: Optional[str] = None
    date: Optional[dt.date] = None
    read_time: Optional[str] = None
    image_url: Optional[str] = None
    featured: Optional[bool] = None
    status: Optional[str] = None


class CaseWire(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str = ""
    created_at: Optional[dt.datetime] = None
    title: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    challenge: Optional[str] = None
    solution: Optional[str] = None
    results: Optional[str] = None
    client_name: Optional[str] = None
    client_industry: Optional[str] = None
    client_size: Optional[str] = None
    client_testimonial: Optional[str] = None
    client_role: Optional[str] = None
    duration: Optional[str] = None
    image_url: Optional[str] = None
    featured: Optional[bool] = None
    tools: Optional[list[str]] = None
    metrics: Optional[list[Metric]] = None
    gallery: Optional[list[str]] = None
    status: Optional[str] = None
