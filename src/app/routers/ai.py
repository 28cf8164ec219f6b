# src/app/routers/ai.py
"""
AI creation routes.

Handlers are plain `def` so FastAPI runs them in its threadpool; image
generation blocks its own request for the whole poll budget.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import JSONResponse

from src.app.deps import get_creation_service, get_entitlement, get_entitlement_service
from src.app.domain.models import CreationResult, EntitlementContext, ErrorKind, UploadedFile
from src.app.schemas.ai import (
    CreationResponse,
    GenerateArticleRequest,
    GenerateBlogTitleRequest,
    GenerateImageRequest,
    UsageResponse,
)
from src.app.services.creation_service import CreationService
from src.app.services.entitlement_service import EntitlementService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["AI"])

# Denials are reported in a 200 body; only missing input is a client error.
# Upstream failures are 200 on the JSON routes and 500 on the upload routes.
UPSTREAM_KINDS = (ErrorKind.UPSTREAM_FAILURE, ErrorKind.TIMEOUT)
UPLOAD_UPSTREAM_STATUS = status.HTTP_500_INTERNAL_SERVER_ERROR


# =============================================================================
# Helper Functions
# =============================================================================

def _to_response(
    result: CreationResult,
    upstream_status: int = status.HTTP_200_OK,
) -> JSONResponse:
    body = CreationResponse(
        success=result.success,
        content=result.content,
        message=result.message,
        details=result.details,
    )
    status_code = status.HTTP_200_OK
    if result.kind == ErrorKind.INVALID_INPUT:
        status_code = status.HTTP_400_BAD_REQUEST
    elif result.kind in UPSTREAM_KINDS:
        status_code = upstream_status
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _spool_upload(upload: Optional[UploadFile]) -> Optional[UploadedFile]:
    """Copy a multipart upload to a temp file the handlers can read by path."""
    if upload is None or not upload.filename:
        return None

    _, ext = os.path.splitext(upload.filename)
    with tempfile.NamedTemporaryFile(delete=False, suffix=ext) as tmp:
        shutil.copyfileobj(upload.file, tmp)
        path = tmp.name

    return UploadedFile(
        path=path,
        filename=upload.filename,
        content_type=upload.content_type,
        size=os.path.getsize(path),
    )


def _discard(upload: Optional[UploadedFile]) -> None:
    if upload is None:
        return
    try:
        os.unlink(upload.path)
    except OSError as e:
        logger.warning("Failed to remove temp upload %s: %s", upload.path, e)


# =============================================================================
# Routes
# =============================================================================

@router.post("/generate-article", response_model=CreationResponse)
def generate_article(
    request: GenerateArticleRequest,
    ctx: EntitlementContext = Depends(get_entitlement),
    service: CreationService = Depends(get_creation_service),
):
    return _to_response(service.generate_article(ctx, request.prompt, request.length))


@router.post("/generate-blog-title", response_model=CreationResponse)
def generate_blog_title(
    request: GenerateBlogTitleRequest,
    ctx: EntitlementContext = Depends(get_entitlement),
    service: CreationService = Depends(get_creation_service),
):
    return _to_response(service.generate_blog_title(ctx, request.prompt))


@router.post("/generate-image", response_model=CreationResponse)
def generate_image(
    request: GenerateImageRequest,
    ctx: EntitlementContext = Depends(get_entitlement),
    service: CreationService = Depends(get_creation_service),
):
    return _to_response(service.generate_image(ctx, request.prompt, publish=request.publish))


@router.post("/remove-image-background", response_model=CreationResponse)
def remove_image_background(
    image: Optional[UploadFile] = File(None),
    ctx: EntitlementContext = Depends(get_entitlement),
    service: CreationService = Depends(get_creation_service),
):
    uploaded = _spool_upload(image)
    try:
        return _to_response(service.remove_background(ctx, uploaded), UPLOAD_UPSTREAM_STATUS)
    finally:
        _discard(uploaded)


@router.post("/remove-image-object", response_model=CreationResponse)
def remove_image_object(
    image: Optional[UploadFile] = File(None),
    object_name: Optional[str] = Form(None, alias="object"),
    ctx: EntitlementContext = Depends(get_entitlement),
    service: CreationService = Depends(get_creation_service),
):
    uploaded = _spool_upload(image)
    try:
        return _to_response(service.remove_object(ctx, uploaded, object_name), UPLOAD_UPSTREAM_STATUS)
    finally:
        _discard(uploaded)


@router.post("/resume-review", response_model=CreationResponse)
def resume_review(
    resume: Optional[UploadFile] = File(None),
    ctx: EntitlementContext = Depends(get_entitlement),
    service: CreationService = Depends(get_creation_service),
):
    uploaded = _spool_upload(resume)
    try:
        return _to_response(service.review_resume(ctx, uploaded), UPLOAD_UPSTREAM_STATUS)
    finally:
        _discard(uploaded)


@router.get("/usage", response_model=UsageResponse)
def get_usage(
    ctx: EntitlementContext = Depends(get_entitlement),
    entitlements: EntitlementService = Depends(get_entitlement_service),
):
    return UsageResponse(
        plan=ctx.plan.value,
        free_usage=ctx.free_usage,
        remaining=entitlements.remaining(ctx),
    )
