# src/app/domain/models.py
"""
Domain models for the AI creations backend.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional


class Plan(str, Enum):
    """Subscription tier of a user."""
    FREE = "free"
    PREMIUM = "premium"

    @classmethod
    def parse(cls, value: object) -> "Plan":
        if isinstance(value, str) and value.strip().lower() == cls.PREMIUM.value:
            return cls.PREMIUM
        return cls.FREE


class CreationType(str, Enum):
    """Type discriminator stored with every creation."""
    ARTICLE = "article"
    BLOG_TITLE = "blog-title"
    IMAGE = "image"
    RESUME_REVIEW = "resume-review"


class ErrorKind(str, Enum):
    """Closed set of failure kinds a handler can report."""
    ENTITLEMENT_DENIED = "entitlement_denied"
    INVALID_INPUT = "invalid_input"
    UPSTREAM_FAILURE = "upstream_failure"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class EntitlementContext:
    """
    Plan and usage state of the caller, read once per request.
    The identity provider owns this state; handlers only read it.
    """
    user_id: str
    plan: Plan = Plan.FREE
    free_usage: int = 0

    @property
    def is_premium(self) -> bool:
        return self.plan == Plan.PREMIUM


@dataclass(frozen=True)
class Creation:
    """One persisted output of an upstream invocation. Never mutated."""
    user_id: str
    prompt: str
    content: str
    type: CreationType
    publish: bool = False

    # Assigned by the store
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class UploadedFile:
    """A multipart upload spooled to a transient local path."""
    path: str
    filename: str
    content_type: Optional[str] = None
    size: int = 0


@dataclass
class PollPolicy:
    """Fixed-delay polling budget for asynchronous upstream jobs."""
    max_attempts: int = 20
    interval_seconds: float = 5.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    should_cancel: Optional[Callable[[], bool]] = field(default=None, repr=False)

    @property
    def max_wait_seconds(self) -> float:
        return self.max_attempts * self.interval_seconds

    def cancelled(self) -> bool:
        return bool(self.should_cancel and self.should_cancel())


@dataclass(frozen=True)
class CreationResult:
    """Outcome of a handler: either content or a typed failure."""
    success: bool
    content: Optional[str] = None
    kind: Optional[ErrorKind] = None
    message: Optional[str] = None
    details: Any = None

    @classmethod
    def ok(cls, content: str) -> "CreationResult":
        return cls(success=True, content=content)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str, details: Any = None) -> "CreationResult":
        return cls(success=False, kind=kind, message=message, details=details)
