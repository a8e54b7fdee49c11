from __future__ import annotations

# Import all models so migrations and create_all() see every table
from virtualmark.models.content import CaseRow, PostRow, new_record_id
from virtualmark.models.user import User

__all__ = [
    "new_record_id",
    "User",
    "PostRow",
    "CaseRow",
]
