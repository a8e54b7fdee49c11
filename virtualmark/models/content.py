from __future__ import annotations

import uuid
import datetime as dt

from sqlalchemy import func
from sqlalchemy.orm import Mapped, mapped_column

from virtualmark.extensions import db


def new_record_id() -> str:
    """Generate a store-assigned record id (UUID4 string)."""
    return str(uuid.uuid4())


class PostRow(db.Model):
    """Blog post as stored in the ``posts`` table."""

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(db.String(36), primary_key=True, default=new_record_id)
    created_at: Mapped[dt.datetime] = mapped_column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    title: Mapped[str] = mapped_column(db.String(200), nullable=False)
    excerpt: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
    content: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(db.String(40), nullable=False, default="marketing")
    author: Mapped[str] = mapped_column(db.String(120), nullable=False, default="")
    date: Mapped[dt.date] = mapped_column(db.Date, nullable=False, default=dt.date.today, index=True)
    read_time: Mapped[str] = mapped_column(db.String(40), nullable=False, default="")
    image_url: Mapped[str] = mapped_column(db.String(500), nullable=False, default="")
    featured: Mapped[bool] = mapped_column(db.Boolean, nullable=False, default=False)
    # Nullable on purpose: rows written before the draft workflow have no status
    status: Mapped[str | None] = mapped_column(db.String(16), nullable=True)


class CaseRow(db.Model):
    """Client case study as stored in the ``cases`` table."""

    __tablename__ = "cases"

    id: Mapped[str] = mapped_column(db.String(36), primary_key=True, default=new_record_id)
    created_at: Mapped[dt.datetime] = mapped_column(db.DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    title: Mapped[str] = mapped_column(db.String(200), nullable=False)
    slug: Mapped[str] = mapped_column(db.String(220), unique=True, nullable=False, index=True)
    description: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
    challenge: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
    solution: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
    results: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
    client_name: Mapped[str] = mapped_column(db.String(200), nullable=False, default="")
    client_industry: Mapped[str] = mapped_column(db.String(40), nullable=False, default="technology")
    client_size: Mapped[str] = mapped_column(db.String(40), nullable=False, default="small")
    client_testimonial: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    client_role: Mapped[str | None] = mapped_column(db.String(200), nullable=True)
    duration: Mapped[str] = mapped_column(db.String(80), nullable=False, default="")
    image_url: Mapped[str] = mapped_column(db.String(500), nullable=False, default="")
    featured: Mapped[bool] = mapped_column(db.Boolean, nullable=False, default=False)
    tools: Mapped[list[str]] = mapped_column(db.JSON, nullable=False, default=list)
    metrics: Mapped[list[dict]] = mapped_column(db.JSON, nullable=False, default=list)
    gallery: Mapped[list[str] | None] = mapped_column(db.JSON, nullable=True)
    status: Mapped[str | None] = mapped_column(db.String(16), nullable=True)
