from __future__ import annotations

from datetime import datetime

from flask_login import UserMixin
from sqlalchemy import func
from sqlalchemy.orm import Mapped, mapped_column

from virtualmark.extensions import db
from virtualmark.models.content import new_record_id


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    public_id: Mapped[str] = mapped_column(db.String(36), unique=True, nullable=False, index=True, default=new_record_id)
    username: Mapped[str] = mapped_column(db.String(50), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(db.String(255), nullable=False, default="")
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(db.Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(db.DateTime(timezone=True), nullable=True)

    # Rate limiting fields
    failed_login_attempts: Mapped[int] = mapped_column(db.Integer, default=0, nullable=False)
    login_locked_until: Mapped[datetime | None] = mapped_column(db.DateTime(timezone=True), nullable=True)

    def get_id(self) -> str:  # Flask-Login compatibility
        return str(self.id)
