from virtualmark.repositories.user import (
    count_admins,
    create_user,
    get_user_by_id,
    get_user_by_username,
    increment_failed_login_attempts,
    lockout_remaining,
    record_login,
    reset_failed_login_attempts,
)

__all__ = [
    "count_admins",
    "create_user",
    "get_user_by_id",
    "get_user_by_username",
    "increment_failed_login_attempts",
    "lockout_remaining",
    "record_login",
    "reset_failed_login_attempts",
]
