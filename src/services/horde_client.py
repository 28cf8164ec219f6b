"""
Client for the AI Horde asynchronous image-generation queue.

A job is submitted once and then polled until it reports completion,
within the budget given by a PollPolicy.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from src.app.domain.errors import GenerationCancelledError, GenerationTimeoutError
from src.app.domain.models import PollPolicy
from src.services.errors import HordeConfigurationError, HordeRequestError, NetworkTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://stablehorde.net/api/v2"
REQUEST_TIMEOUT_SECONDS = 30.0

# Sampling parameters sent with every submission
GENERATION_PARAMS: dict[str, Any] = {
    "steps": 25,
    "width": 512,
    "height": 512,
    "n": 1,
    "sampler_name": "k_euler",
}


class HordeGeneration(BaseModel):
    model_config = ConfigDict(extra="ignore")

    img: Optional[str] = None
    id: Optional[str] = None
    seed: Optional[str] = None
    model: Optional[str] = None


class HordeStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    done: bool = False
    faulted: bool = False
    wait_time: int = 0
    queue_position: int = 0
    generations: list[HordeGeneration] = Field(default_factory=list)


def _response_details(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


class HordeClient:
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._http = http_client or httpx.Client(timeout=REQUEST_TIMEOUT_SECONDS)

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self._http.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as timeout_error:
            raise NetworkTimeoutError(url, REQUEST_TIMEOUT_SECONDS) from timeout_error
        except httpx.HTTPStatusError as status_error:
            details = _response_details(status_error.response)
            raise HordeRequestError(
                f"AI Horde request failed with status {status_error.response.status_code}",
                details=details,
            ) from status_error
        except httpx.HTTPError as http_error:
            raise HordeRequestError(f"AI Horde request failed: {http_error}") from http_error

        try:
            return response.json()
        except ValueError as decode_error:
            raise HordeRequestError("AI Horde returned a non-JSON response", details=response.text) from decode_error

    def submit(self, prompt: str) -> str:
        """Submit a generation job and return its id."""
        if not self.api_key:
            raise HordeConfigurationError("AI_HORDE_API_KEY is missing in environment variables")

        payload = {"prompt": prompt, **GENERATION_PARAMS}
        data = self._request(
            "POST",
            "/generate/async",
            json=payload,
            headers={"apikey": self.api_key, "Content-Type": "application/json"},
        )

        job_id = data.get("id") if isinstance(data, dict) else None
        if not job_id:
            raise HordeRequestError("Failed to get generation ID from AI Horde", details=data)

        logger.info("Submitted AI Horde job: id=%s", job_id)
        return str(job_id)

    def status(self, job_id: str) -> HordeStatus:
        data = self._request("GET", f"/generate/status/{job_id}")
        return HordeStatus.model_validate(data)

    def wait_for_image(self, job_id: str, policy: PollPolicy) -> str:
        """
        Poll a job until it yields an image.

        Returns:
            The first generation's image, either a hosted URL or base64 data

        Raises:
            GenerationTimeoutError: if the attempt budget runs out
            GenerationCancelledError: if the policy's cancel hook fires
            HordeRequestError: if the finished job carries no image data
        """
        attempts = 0
        while attempts < policy.max_attempts:
            if policy.cancelled():
                raise GenerationCancelledError(job_id, attempts)

            status = self.status(job_id)
            if status.done and status.generations:
                image = status.generations[0].img
                if not image:
                    raise HordeRequestError("AI Horde returned no image data")
                logger.info("AI Horde job finished: id=%s, attempts=%d", job_id, attempts + 1)
                return image

            attempts += 1
            logger.debug(
                "AI Horde job pending: id=%s, attempt=%d/%d, queue_position=%d",
                job_id,
                attempts,
                policy.max_attempts,
                status.queue_position,
            )
            policy.sleep(policy.interval_seconds)

        logger.warning("AI Horde job timed out: id=%s, attempts=%d", job_id, attempts)
        raise GenerationTimeoutError(attempts)

    def close(self) -> None:
        self._http.close()
