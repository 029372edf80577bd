"""Per-request context passed explicitly to services."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from .query.builder import utcnow


@dataclass(frozen=True)
class RequestContext:
    """
    Values fixed for the duration of one request.

    Attributes:
        request_id: Correlation id, also bound into the log context
        now: Reference instant (naive UTC) for every date comparison
    """

    request_id: str = field(default_factory=lambda: f"req-{uuid4().hex[:12]}")
    now: datetime = field(default_factory=utcnow)
