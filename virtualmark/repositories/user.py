from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from virtualmark.extensions import db
from virtualmark.models.user import User


def get_user_by_username(username: str) -> Optional[User]:
    return db.session.execute(db.select(User).filter_by(username=username)).scalar_one_or_none()


def get_user_by_id(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def count_admins() -> int:
    return db.session.execute(db.select(db.func.count(User.id)).filter_by(is_admin=True)).scalar() or 0


def create_user(username: str, password_hash: str, email: str = "", is_admin: bool = False) -> User:
    user = User(username=username, email=email, password_hash=password_hash, is_admin=is_admin)
    db.session.add(user)
    db.session.commit()
    return user


def increment_failed_login_attempts(user: User, max_attempts: int = 3, lockout_minutes: int = 15) -> None:
    """Increment failed login attempts and set lockout if needed."""
    user.failed_login_attempts += 1
    if user.failed_login_attempts >= max_attempts:
        user.login_locked_until = datetime.now(timezone.utc) + timedelta(minutes=lockout_minutes)
    db.session.commit()


def reset_failed_login_attempts(user: User) -> None:
    user.failed_login_attempts = 0
    user.login_locked_until = None
    db.session.commit()


def record_login(user: User) -> None:
    user.last_login = datetime.now(timezone.utc)
    db.session.commit()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timezone-aware columns back naive
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def lockout_remaining(user: User) -> Optional[timedelta]:
    """Time left on the user's login lockout, or None when not locked.

    An expired lockout is cleared as a side effect.
    """
    if user.login_locked_until is None:
        return None
    remaining = _as_utc(user.login_locked_until) - datetime.now(timezone.utc)
    if remaining.total_seconds() <= 0:
        reset_failed_login_attempts(user)
        return None
    return remaining
