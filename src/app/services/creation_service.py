# src/app/services/creation_service.py
"""
Request handlers for AI creations.

Every handler runs the same linear pipeline:
entitlement gate -> upstream call -> (image) media relocation -> insert -> quota update.
Failures at any stage are converted to a CreationResult at the handler boundary.
Completed stages are never rolled back.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional

from src.app.domain.errors import CreationError, InvalidInputError
from src.app.domain.models import (
    Creation,
    CreationResult,
    CreationType,
    EntitlementContext,
    ErrorKind,
    PollPolicy,
    UploadedFile,
)
from src.app.infra.db.base import CreationRepository
from src.app.infra.storage.base import BACKGROUND_REMOVAL, MediaStore, object_removal
from src.app.services.entitlement_service import EntitlementService
from src.services.gemini_client import GeminiClient
from src.services.horde_client import HordeClient
from src.services.pdf_text import extract_pdf_text

logger = logging.getLogger(__name__)

BLOG_TITLE_MAX_TOKENS = 100
RESUME_REVIEW_MAX_TOKENS = 1000
RESUME_MAX_BYTES = 5 * 1024 * 1024

RESUME_REVIEW_PROMPT = (
    "Review the following resume and provide constructive feedback on its strengths, "
    "weaknesses, and areas for improvement. Resume Content:\n\n{text}"
)
RESUME_REVIEW_LABEL = "Review the uploaded resume"
BACKGROUND_REMOVAL_LABEL = "Remove background from image"
OBJECT_REMOVAL_LABEL = "Removed {object_name} from image"


def _is_pdf(upload: UploadedFile) -> bool:
    if upload.content_type == "application/pdf":
        return True
    return upload.filename.lower().endswith(".pdf")


def _upload_size(upload: UploadedFile) -> int:
    return upload.size or os.path.getsize(upload.path)


def _format_megabytes(num_bytes: int) -> str:
    return f"{num_bytes / (1024 * 1024):g}MB"


class CreationService:
    """
    Handlers for the five creation operations.

    Collaborators are injected so each stage can be replaced in tests.
    """

    def __init__(
        self,
        entitlements: EntitlementService,
        creations: CreationRepository,
        text_generator: GeminiClient,
        image_generator: HordeClient,
        media_store: MediaStore,
        poll_policy: Optional[PollPolicy] = None,
        extract_text: Callable[[bytes], str] = extract_pdf_text,
        resume_max_bytes: int = RESUME_MAX_BYTES,
    ):
        self._entitlements = entitlements
        self._creations = creations
        self._text = text_generator
        self._images = image_generator
        self._media = media_store
        self.poll_policy = poll_policy or PollPolicy()
        self._extract_text = extract_text
        self.resume_max_bytes = resume_max_bytes

    def close(self) -> None:
        """Release the HTTP client held by the image generator."""
        self._images.close()

    # =========================================================================
    # Handler boundary
    # =========================================================================

    def _handle(
        self,
        operation: str,
        ctx: EntitlementContext,
        handler: Callable[[], str],
    ) -> CreationResult:
        try:
            content = handler()
        except CreationError as error:
            if error.kind in (ErrorKind.ENTITLEMENT_DENIED, ErrorKind.INVALID_INPUT):
                logger.info("%s rejected: user=%s, reason=%s", operation, ctx.user_id, error.message)
            else:
                logger.exception("%s failed: user=%s", operation, ctx.user_id)
            return CreationResult.fail(error.kind, error.message, error.details)
        except Exception as error:
            logger.exception("%s failed: user=%s", operation, ctx.user_id)
            return CreationResult.fail(
                ErrorKind.UPSTREAM_FAILURE,
                str(error),
                getattr(error, "details", None),
            )
        return CreationResult.ok(content)

    def _store(
        self,
        ctx: EntitlementContext,
        prompt: str,
        content: str,
        creation_type: CreationType,
        publish: bool = False,
    ) -> None:
        self._creations.insert_creation(
            Creation(
                user_id=ctx.user_id,
                prompt=prompt,
                content=content,
                type=creation_type,
                publish=publish,
            )
        )

    def _generate_text(
        self,
        ctx: EntitlementContext,
        prompt: Optional[str],
        max_output_tokens: int,
        creation_type: CreationType,
    ) -> str:
        if not prompt or not prompt.strip():
            raise InvalidInputError("Prompt is required.")
        self._entitlements.require_quota(ctx)

        content = self._text.complete(prompt, max_output_tokens=max_output_tokens)
        self._store(ctx, prompt, content, creation_type)
        self._entitlements.record_usage(ctx)
        return content

    # =========================================================================
    # Text generation
    # =========================================================================

    def generate_article(
        self,
        ctx: EntitlementContext,
        prompt: Optional[str],
        length: int,
    ) -> CreationResult:
        return self._handle(
            "generate_article",
            ctx,
            lambda: self._generate_text(ctx, prompt, length, CreationType.ARTICLE),
        )

    def generate_blog_title(
        self,
        ctx: EntitlementContext,
        prompt: Optional[str],
    ) -> CreationResult:
        return self._handle(
            "generate_blog_title",
            ctx,
            lambda: self._generate_text(ctx, prompt, BLOG_TITLE_MAX_TOKENS, CreationType.BLOG_TITLE),
        )

    def review_resume(
        self,
        ctx: EntitlementContext,
        resume: Optional[UploadedFile],
    ) -> CreationResult:
        def run() -> str:
            if resume is None:
                raise InvalidInputError("No resume uploaded.")
            self._entitlements.require_premium(ctx)
            if _upload_size(resume) > self.resume_max_bytes:
                raise InvalidInputError(
                    f"Resume file size exceeds allowed size ({_format_megabytes(self.resume_max_bytes)})."
                )
            if not _is_pdf(resume):
                raise InvalidInputError("Resume must be a PDF document.")

            text = self._extract_text(Path(resume.path).read_bytes())
            prompt = RESUME_REVIEW_PROMPT.format(text=text)
            content = self._text.complete(prompt, max_output_tokens=RESUME_REVIEW_MAX_TOKENS)
            self._store(ctx, RESUME_REVIEW_LABEL, content, CreationType.RESUME_REVIEW)
            return content

        return self._handle("review_resume", ctx, run)

    # =========================================================================
    # Images
    # =========================================================================

    def generate_image(
        self,
        ctx: EntitlementContext,
        prompt: Optional[str],
        publish: bool = False,
    ) -> CreationResult:
        def run() -> str:
            if not prompt or not prompt.strip():
                raise InvalidInputError("Prompt is required.")
            self._entitlements.require_premium(ctx)

            job_id = self._images.submit(prompt)
            image = self._images.wait_for_image(job_id, self.poll_policy)
            stored = self._media.upload_image_payload(image)
            self._store(ctx, prompt, stored.secure_url, CreationType.IMAGE, publish=publish)
            return stored.secure_url

        return self._handle("generate_image", ctx, run)

    def remove_background(
        self,
        ctx: EntitlementContext,
        image: Optional[UploadedFile],
    ) -> CreationResult:
        def run() -> str:
            if image is None:
                raise InvalidInputError("No image uploaded.")
            self._entitlements.require_premium(ctx)

            stored = self._media.upload(image.path, transformation=BACKGROUND_REMOVAL)
            self._store(ctx, BACKGROUND_REMOVAL_LABEL, stored.secure_url, CreationType.IMAGE)
            return stored.secure_url

        return self._handle("remove_background", ctx, run)

    def remove_object(
        self,
        ctx: EntitlementContext,
        image: Optional[UploadedFile],
        object_name: Optional[str],
    ) -> CreationResult:
        def run() -> str:
            if image is None:
                raise InvalidInputError("No image uploaded.")
            if not object_name or not object_name.strip():
                raise InvalidInputError("Object name is required.")
            self._entitlements.require_premium(ctx)

            name = object_name.strip()
            stored = self._media.upload(image.path)
            url = self._media.delivery_url(stored.public_id, object_removal(name))
            self._store(ctx, OBJECT_REMOVAL_LABEL.format(object_name=name), url, CreationType.IMAGE)
            return url

        return self._handle("remove_object", ctx, run)
