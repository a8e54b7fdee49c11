from __future__ import annotations

from .drafts import EditDraft  # noqa: F401
from .errors import (  # noqa: F401
    AuthorizationError,
    ContentError,
    ContentValidationError,
    MissingIdentityError,
    PersistenceError,
    RecordNotFoundError,
    RecordShapeError,
)
from .kinds import CASE_KIND, KINDS, POST_KIND, ContentKind  # noqa: F401
from .registry import ContentRegistry, get_content, init_content  # noqa: F401
from .repository import ContentRepository  # noqa: F401
from .stats import DashboardAggregator, DashboardStats, compute_stats  # noqa: F401
from .sync import reconcile  # noqa: F401
from .validation import ValidationResult, validate_case, validate_post  # noqa: F401
