from __future__ import annotations

from typing import Tuple

from flask import current_app

from virtualmark.models.user import User
from virtualmark.repositories.user import (
    get_user_by_username,
    increment_failed_login_attempts,
    lockout_remaining,
    record_login,
    reset_failed_login_attempts,
)
from virtualmark.utils.crypto import verify_password

INVALID_CREDENTIALS = "Invalid username or password"


def authenticate(username: str, password: str) -> Tuple[User | None, str | None]:
    """
    Authenticate an admin with lockout after repeated failures.
    Returns (user, error_message) tuple.
    """
    max_attempts = current_app.config.get("LOGIN_MAX_ATTEMPTS", 3)
    lockout_minutes = current_app.config.get("LOGIN_LOCKOUT_MINUTES", 15)

    user = get_user_by_username(username)
    if not user:
        return None, INVALID_CREDENTIALS

    remaining = lockout_remaining(user)
    if remaining is not None:
        minutes = min(max(1, int(remaining.total_seconds() / 60)), lockout_minutes)
        return None, (
            f"Account locked due to {max_attempts} failed login attempts. "
            f"Please try again in {minutes} minutes."
        )

    if not verify_password(password, user.password_hash):
        increment_failed_login_attempts(user, max_attempts, lockout_minutes)
        attempts_remaining = max_attempts - user.failed_login_attempts
        if attempts_remaining > 0:
            return None, f"{INVALID_CREDENTIALS}. {attempts_remaining} attempts remaining before account lockout."
        return None, (
            f"{INVALID_CREDENTIALS}. Account has been locked for {lockout_minutes} minutes "
            "due to too many failed attempts."
        )

    reset_failed_login_attempts(user)
    record_login(user)
    return user, None
