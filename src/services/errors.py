from typing import Any


class ServiceError(Exception):
    def __init__(self, message: str = "", details: Any = None):
        super().__init__(message)
        self.details = details


class GeminiConfigurationError(ServiceError):
    pass


class GeminiResponseError(ServiceError):
    pass


class HordeConfigurationError(ServiceError):
    pass


class HordeRequestError(ServiceError):
    pass


class MediaStoreError(ServiceError):
    pass


class DocumentExtractionError(ServiceError):
    pass


class NetworkTimeoutError(ServiceError):
    def __init__(self, url: str, timeout_seconds: float):
        super().__init__(f"Network timeout after {timeout_seconds}s: {url}")
        self.url = url
        self.timeout_seconds = timeout_seconds
