"""
Error Tracker - Keep the most recent agent failures for diagnostics
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class TrackedError(BaseModel):
    """A recorded failure with the context it happened in"""

    id: str
    timestamp: datetime
    provider: str | None = None
    code: str | None = None
    status: int | None = None
    message: str
    context: dict[str, Any] = {}


class ErrorTracker:
    """Bounded, newest-first store of tracked errors.

    Owned by the application; pass it to whichever component records errors.
    """

    def __init__(self, max_errors: int = 100):
        self.max_errors = max_errors
        self._errors: list[TrackedError] = []

    def track(
        self,
        message: str,
        provider: str | None = None,
        code: str | None = None,
        status: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> str:
        """Record an error and return its id"""
        error = TrackedError(
            id=f"err_{uuid.uuid4().hex[:12]}",
            timestamp=datetime.now(timezone.utc),
            provider=provider,
            code=code,
            status=status,
            message=message,
            context=context or {},
        )
        self._errors.insert(0, error)
        del self._errors[self.max_errors:]

        logger.error("[ErrorTracker] %s (%s): %s", error.id, provider or "agent", message)
        return error.id

    def get_all(self) -> list[TrackedError]:
        return list(self._errors)

    def get_by_provider(self, provider: str) -> list[TrackedError]:
        return [e for e in self._errors if e.provider == provider]

    def get_recent(self, minutes: float = 10) -> list[TrackedError]:
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=minutes)
        return [e for e in self._errors if e.timestamp > cutoff]

    def clear(self) -> None:
        self._errors.clear()

    def get_stats(self) -> dict[str, Any]:
        by_provider: dict[str, int] = {}
        for error in self._errors:
            if error.provider:
                by_provider[error.provider] = by_provider.get(error.provider, 0) + 1

        return {
            "total": len(self._errors),
            "byProvider": by_provider,
            "recentCount": len(self.get_recent(5)),
        }
