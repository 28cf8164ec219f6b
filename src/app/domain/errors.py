from __future__ import annotations

from typing import Any

from src.app.domain.models import ErrorKind


class CreationError(Exception):
    kind: ErrorKind = ErrorKind.UPSTREAM_FAILURE

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class EntitlementDeniedError(CreationError):
    kind = ErrorKind.ENTITLEMENT_DENIED


class QuotaExceededError(EntitlementDeniedError):
    def __init__(self, message: str = "Limit reached. Upgrade to continue.", free_usage: int = 0):
        super().__init__(message)
        self.free_usage = free_usage


class PremiumRequiredError(EntitlementDeniedError):
    def __init__(self, message: str = "This feature is only available for premium users."):
        super().__init__(message)


class InvalidInputError(CreationError):
    kind = ErrorKind.INVALID_INPUT


class UpstreamFailureError(CreationError):
    kind = ErrorKind.UPSTREAM_FAILURE


class GenerationTimeoutError(CreationError):
    kind = ErrorKind.TIMEOUT

    def __init__(self, attempts: int, message: str = "Image generation timed out"):
        super().__init__(message)
        self.attempts = attempts


class GenerationCancelledError(UpstreamFailureError):
    def __init__(self, job_id: str, attempts: int):
        super().__init__(f"Image generation cancelled after {attempts} attempts")
        self.job_id = job_id
        self.attempts = attempts


class RepositoryError(UpstreamFailureError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Repository error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason
