from __future__ import annotations

import json
from typing import Optional

import httpx

from src.app.domain.models import Creation, PollPolicy
from src.app.infra.db.base import CreationRepository, UsageRepository
from src.app.infra.storage.base import MediaStore, StoredMedia, Transformation
from src.app.services.creation_service import CreationService
from src.app.services.entitlement_service import EntitlementService
from src.services.errors import GeminiResponseError
from src.services.horde_client import HordeClient

CLOUD_URL = "https://res.cloudinary.com/demo/image/upload"


class CreationRepositoryStub(CreationRepository):
    def __init__(self) -> None:
        self.inserted: list[Creation] = []
        self.should_fail = False

    def insert_creation(self, creation: Creation) -> Creation:
        if self.should_fail:
            raise ConnectionError("Simulated insert failure")
        self.inserted.append(creation)
        return creation


class UsageRepositoryStub(UsageRepository):
    def __init__(self) -> None:
        self.calls: list[tuple[str, int]] = []
        self.should_fail = False

    def set_free_usage(self, user_id: str, free_usage: int) -> None:
        if self.should_fail:
            raise ConnectionError("Simulated metadata update failure")
        self.calls.append((user_id, free_usage))


class TextGeneratorStub:
    def __init__(self, response: str = "Generated text") -> None:
        self.response = response
        self.calls: list[tuple[str, int]] = []
        self.should_fail = False

    def complete(self, prompt: str, max_output_tokens: int, temperature: float = 0.7) -> str:
        self.calls.append((prompt, max_output_tokens))
        if self.should_fail:
            raise GeminiResponseError("Gemini returned an empty completion")
        return self.response


class ImageGeneratorStub:
    def __init__(self, image: str = "https://horde.example/generated.webp") -> None:
        self.image = image
        self.submitted: list[str] = []
        self.waited: list[tuple[str, PollPolicy]] = []
        self.error: Optional[Exception] = None
        self.closed = False

    def submit(self, prompt: str) -> str:
        self.submitted.append(prompt)
        return "job-1"

    def wait_for_image(self, job_id: str, policy: PollPolicy) -> str:
        self.waited.append((job_id, policy))
        if self.error is not None:
            raise self.error
        return self.image

    def close(self) -> None:
        self.closed = True


class MediaStoreStub(MediaStore):
    def __init__(self) -> None:
        self.uploads: list[tuple[str, Optional[Transformation]]] = []
        self.delivery_requests: list[tuple[str, Transformation]] = []

    def upload(
        self,
        source: str,
        transformation: Optional[Transformation] = None,
    ) -> StoredMedia:
        self.uploads.append((source, transformation))
        public_id = f"creations/asset{len(self.uploads)}"
        return StoredMedia(public_id=public_id, secure_url=f"{CLOUD_URL}/{public_id}.png")

    def delivery_url(self, public_id: str, transformation: Transformation) -> str:
        self.delivery_requests.append((public_id, transformation))
        effect = transformation[0]["effect"]
        return f"{CLOUD_URL}/e_{effect}/{public_id}"


class FakeClock:
    def __init__(self) -> None:
        self.sleeps: list[float] = []

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


class HordeServerStub:
    """In-process AI Horde served through httpx.MockTransport."""

    def __init__(self, done_on_attempt: Optional[int] = None, image: Optional[str] = "aGVsbG8=") -> None:
        self.done_on_attempt = done_on_attempt
        self.image = image
        self.status_checks = 0
        self.submissions: list[dict] = []
        self.submit_headers: list[httpx.Headers] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path.endswith("/generate/async"):
            self.submissions.append(json.loads(request.content))
            self.submit_headers.append(request.headers)
            return httpx.Response(202, json={"id": "job-1", "kudos": 10})

        if request.method == "GET" and "/generate/status/" in request.url.path:
            self.status_checks += 1
            if self.done_on_attempt is not None and self.status_checks >= self.done_on_attempt:
                return httpx.Response(
                    200,
                    json={"done": True, "generations": [{"img": self.image, "id": "gen-1"}]},
                )
            return httpx.Response(200, json={"done": False, "queue_position": 3, "generations": []})

        return httpx.Response(404, json={"message": "Not found"})

    def client(self, api_key: Optional[str] = "horde-key") -> HordeClient:
        transport = httpx.MockTransport(self.handler)
        return HordeClient(
            api_key,
            base_url="https://horde.test/api/v2",
            http_client=httpx.Client(transport=transport),
        )


def make_service(
    creations: Optional[CreationRepositoryStub] = None,
    usage: Optional[UsageRepositoryStub] = None,
    text: Optional[TextGeneratorStub] = None,
    images=None,
    media: Optional[MediaStoreStub] = None,
    clock: Optional[FakeClock] = None,
    extract_text=None,
    resume_max_bytes: int = 5 * 1024 * 1024,
) -> CreationService:
    clock = clock or FakeClock()
    return CreationService(
        entitlements=EntitlementService(usage or UsageRepositoryStub(), free_usage_limit=10),
        creations=creations or CreationRepositoryStub(),
        text_generator=text or TextGeneratorStub(),
        image_generator=images or ImageGeneratorStub(),
        media_store=media or MediaStoreStub(),
        poll_policy=PollPolicy(max_attempts=20, interval_seconds=5.0, sleep=clock.sleep),
        extract_text=extract_text or (lambda data: "Jane Doe\nSoftware Engineer"),
        resume_max_bytes=resume_max_bytes,
    )
