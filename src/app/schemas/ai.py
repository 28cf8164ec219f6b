from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class GenerateArticleRequest(BaseModel):
    prompt: Optional[str] = None
    length: int = Field(default=800, ge=1)


class GenerateBlogTitleRequest(BaseModel):
    prompt: Optional[str] = None


class GenerateImageRequest(BaseModel):
    prompt: Optional[str] = None
    publish: bool = False


class CreationResponse(BaseModel):
    success: bool
    content: Optional[str] = None
    message: Optional[str] = None
    details: Optional[Any] = None


class UsageResponse(BaseModel):
    plan: str
    free_usage: int
    remaining: Optional[int] = Field(None, description="Free calls left; null on the premium plan")
