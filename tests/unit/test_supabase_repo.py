from __future__ import annotations

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from src.app.domain.errors import RepositoryError
from src.app.domain.models import Creation, CreationType
from src.app.infra.db.supabase_repo import SupabaseCreationRepository, SupabaseUsageRepository


def _creation(publish: bool = False) -> Creation:
    return Creation(
        user_id="user_1",
        prompt="A lighthouse",
        content="https://res.cloudinary.com/demo/image/upload/abc.png",
        type=CreationType.IMAGE,
        publish=publish,
    )


class TestSupabaseCreationRepository:
    def test_insert_without_publish_flag(self) -> None:
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])
        repo = SupabaseCreationRepository(client)

        stored = repo.insert_creation(_creation())

        client.table.assert_called_once_with("creations")
        client.table.return_value.insert.assert_called_once_with(
            {
                "user_id": "user_1",
                "prompt": "A lighthouse",
                "content": "https://res.cloudinary.com/demo/image/upload/abc.png",
                "type": "image",
            }
        )
        assert stored == _creation()

    def test_insert_with_publish_flag(self) -> None:
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])
        repo = SupabaseCreationRepository(client)

        repo.insert_creation(_creation(publish=True))

        row = client.table.return_value.insert.call_args.args[0]
        assert row["publish"] is True

    def test_returns_stored_row(self) -> None:
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.return_value = MagicMock(
            data=[
                {
                    "id": 7,
                    "user_id": "user_1",
                    "prompt": "A lighthouse",
                    "content": "https://res.cloudinary.com/demo/image/upload/abc.png",
                    "type": "image",
                    "publish": False,
                    "created_at": "2024-01-15T10:00:00Z",
                }
            ]
        )
        repo = SupabaseCreationRepository(client)

        stored = repo.insert_creation(_creation())

        assert stored.id == 7
        assert isinstance(stored.created_at, datetime)
        assert stored.type == CreationType.IMAGE

    def test_network_error(self) -> None:
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.side_effect = ConnectionError("refused")
        repo = SupabaseCreationRepository(client)

        with pytest.raises(RepositoryError) as exc_info:
            repo.insert_creation(_creation())

        assert exc_info.value.operation == "insert_creation"


class TestSupabaseUsageRepository:
    def test_writes_app_metadata(self) -> None:
        client = MagicMock()
        repo = SupabaseUsageRepository(client)

        repo.set_free_usage("user_1", 4)

        client.auth.admin.update_user_by_id.assert_called_once_with(
            "user_1",
            {"app_metadata": {"free_usage": 4}},
        )

    def test_network_error(self) -> None:
        client = MagicMock()
        client.auth.admin.update_user_by_id.side_effect = TimeoutError("slow")
        repo = SupabaseUsageRepository(client)

        with pytest.raises(RepositoryError):
            repo.set_free_usage("user_1", 4)
