# src/app/services/entitlement_service.py
"""
Entitlement management service.
Gates operations by plan tier and free-usage quota.
"""
from __future__ import annotations

import logging
from typing import Optional

from src.app.domain.errors import PremiumRequiredError, QuotaExceededError
from src.app.domain.models import EntitlementContext
from src.app.infra.db.base import UsageRepository

logger = logging.getLogger(__name__)

# Number of quota-gated calls a free user can make
FREE_USAGE_LIMIT = 10


class EntitlementService:
    """
    Service for plan and quota checks.

    Responsibilities:
    - Reject free users whose quota is exhausted
    - Reject non-premium users from premium-only features
    - Increment the free-usage counter after a successful call
    """

    def __init__(
        self,
        repository: UsageRepository,
        free_usage_limit: int = FREE_USAGE_LIMIT,
    ):
        self._repo = repository
        self.free_usage_limit = free_usage_limit

    def require_quota(self, ctx: EntitlementContext) -> None:
        """
        Check that a caller may make a quota-gated call.

        Raises:
            QuotaExceededError: If a non-premium caller reached the limit
        """
        if ctx.is_premium:
            return
        if ctx.free_usage >= self.free_usage_limit:
            logger.info("Free quota exhausted: user=%s, free_usage=%d", ctx.user_id, ctx.free_usage)
            raise QuotaExceededError(free_usage=ctx.free_usage)

    def require_premium(self, ctx: EntitlementContext) -> None:
        """
        Raises:
            PremiumRequiredError: If the caller is not on the premium plan
        """
        if not ctx.is_premium:
            logger.info("Premium feature denied: user=%s, plan=%s", ctx.user_id, ctx.plan.value)
            raise PremiumRequiredError()

    def record_usage(self, ctx: EntitlementContext) -> None:
        """Increment the free-usage counter of a non-premium caller."""
        if ctx.is_premium:
            return
        self._repo.set_free_usage(ctx.user_id, ctx.free_usage + 1)

    def remaining(self, ctx: EntitlementContext) -> Optional[int]:
        """Free calls left, or None when the plan is unlimited."""
        if ctx.is_premium:
            return None
        return max(0, self.free_usage_limit - ctx.free_usage)
