from __future__ import annotations

from typing import Optional

from flask import current_app
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from virtualmark.extensions import db
from virtualmark.repositories.user import count_admins


def ensure_admin_user() -> Optional[str]:
    """
    Check whether an admin user exists and log the outcome.

    Admin users are created with the ``flask create-admin`` CLI command; this
    never creates one. Database errors are logged and do not stop startup.

    Returns:
        Status message if no admin user exists, None if one does or on error
    """
    try:
        # Tables may not exist yet, e.g. before the first migration
        if not inspect(db.engine).has_table("users"):
            current_app.logger.info("Users table not found yet; skipping admin check")
            return None

        if count_admins():
            return None

        current_app.logger.warning("No admin user exists. Create one using: flask create-admin")
        return "No admin user found. Use 'flask create-admin' to create one."

    except SQLAlchemyError as e:
        current_app.logger.error(f"Error checking for admin user: {str(e)}")
        return None
