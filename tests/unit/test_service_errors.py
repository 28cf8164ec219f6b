from __future__ import annotations

import pytest

from src.services.errors import (
    ServiceError,
    GeminiConfigurationError,
    GeminiResponseError,
    HordeConfigurationError,
    HordeRequestError,
    MediaStoreError,
    DocumentExtractionError,
    NetworkTimeoutError,
)


class TestServiceError:
    def test_base_exception(self) -> None:
        error = ServiceError("Base service error")
        assert str(error) == "Base service error"
        assert error.details is None
        assert isinstance(error, Exception)


class TestHordeRequestError:
    def test_keeps_upstream_details(self) -> None:
        error = HordeRequestError("AI Horde request failed with status 400", details={"message": "Bad prompt"})
        assert "400" in str(error)
        assert error.details == {"message": "Bad prompt"}
        assert isinstance(error, ServiceError)


class TestNetworkTimeoutError:
    def test_includes_url_and_timeout(self) -> None:
        error = NetworkTimeoutError("https://stablehorde.net/api/v2/generate/async", 30.0)
        assert "30.0" in str(error)
        assert "stablehorde" in str(error)
        assert error.url == "https://stablehorde.net/api/v2/generate/async"
        assert error.timeout_seconds == 30.0


class TestServiceErrorHierarchy:
    @pytest.mark.parametrize(
        "error_class",
        [
            GeminiConfigurationError,
            GeminiResponseError,
            HordeConfigurationError,
            HordeRequestError,
            MediaStoreError,
            DocumentExtractionError,
        ],
    )
    def test_inherits_service_error(self, error_class: type[ServiceError]) -> None:
        assert issubclass(error_class, ServiceError)
