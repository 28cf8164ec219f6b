from __future__ import annotations

import logging
import os
from datetime import datetime

from supabase import Client, create_client

from src.app.domain.errors import RepositoryError
from src.app.domain.models import Creation, CreationType
from src.app.infra.db.base import CreationRepository, UsageRepository

logger = logging.getLogger(__name__)


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None

    try:
        normalized = value.replace("Z", "+00:00") if value.endswith("Z") else value
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _row_to_creation(row: dict[str, object]) -> Creation:
    return Creation(
        user_id=str(row["user_id"]),
        prompt=str(row["prompt"]),
        content=str(row["content"]),
        type=CreationType(str(row["type"])),
        publish=bool(row.get("publish")),
        id=int(row["id"]) if row.get("id") is not None else None,
        created_at=_parse_datetime(row.get("created_at")),
    )


def _create_supabase_client() -> Client:
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY required")
    return create_client(url, key)


class SupabaseCreationRepository(CreationRepository):
    TABLE_NAME = "creations"

    def __init__(self, client: Client | None = None):
        self._client = client or _create_supabase_client()

    def _build_row(self, creation: Creation) -> dict[str, str | bool]:
        row: dict[str, str | bool] = {
            "user_id": creation.user_id,
            "prompt": creation.prompt,
            "content": creation.content,
            "type": creation.type.value,
        }
        # the column defaults to false; only generated images carry the flag
        if creation.publish:
            row["publish"] = True
        return row

    def insert_creation(self, creation: Creation) -> Creation:
        try:
            result = self._client.table(self.TABLE_NAME).insert(self._build_row(creation)).execute()
        except (ConnectionError, TimeoutError) as error:
            logger.error("Network error inserting creation: %s", error)
            raise RepositoryError("insert_creation", str(error)) from error

        logger.info("Stored creation: user=%s, type=%s", creation.user_id, creation.type.value)
        if not result.data:
            return creation
        return _row_to_creation(result.data[0])


class SupabaseUsageRepository(UsageRepository):
    """Free-usage counter kept in the Supabase auth user's app_metadata."""

    def __init__(self, client: Client | None = None):
        self._client = client or _create_supabase_client()

    def set_free_usage(self, user_id: str, free_usage: int) -> None:
        try:
            self._client.auth.admin.update_user_by_id(
                user_id,
                {"app_metadata": {"free_usage": free_usage}},
            )
        except (ConnectionError, TimeoutError) as error:
            logger.error("Network error updating free usage: %s", error)
            raise RepositoryError("set_free_usage", str(error)) from error

        logger.info("Updated free usage: user=%s, free_usage=%d", user_id, free_usage)
