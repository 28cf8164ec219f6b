# src/app/infra/db/base.py
"""
Abstract base classes for the persistence store and the identity provider.
This interface allows easy swapping between different backends.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from src.app.domain.models import Creation


class CreationRepository(ABC):
    """
    Append-only log of creations.

    Implementations:
    - SupabaseCreationRepository: Postgres table via Supabase
    """

    @abstractmethod
    def insert_creation(self, creation: Creation) -> Creation:
        """
        Append one creation record.

        Args:
            creation: The record to write

        Returns:
            The stored record, with id and created_at when the store returns them
        """
        pass


class UsageRepository(ABC):
    """Write side of the identity provider's free-usage counter."""

    @abstractmethod
    def set_free_usage(self, user_id: str, free_usage: int) -> None:
        """
        Set a user's free-usage counter.

        Args:
            user_id: The user to update
            free_usage: The new counter value
        """
        pass
