# src/app/deps.py (singletons exposed as FastAPI dependencies)

from __future__ import annotations
from supabase import create_client, Client
from src.app.config import settings
from src.app.domain.models import EntitlementContext, Plan, PollPolicy
from src.app.infra.db.supabase_repo import SupabaseCreationRepository, SupabaseUsageRepository
from src.app.infra.storage.cloudinary_provider import CloudinaryMediaStore
from src.app.services.creation_service import CreationService
from src.app.services.entitlement_service import EntitlementService
from src.services.gemini_client import GeminiClient
from src.services.horde_client import HordeClient
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

_client: Client | None = None
_creation_service: CreationService | None = None

def get_supabase() -> Client:
    global _client
    if _client is None:
        _client = create_client(str(settings.SUPABASE_URL),
                                settings.SUPABASE_SERVICE_ROLE_KEY)
    return _client


auth_scheme = HTTPBearer(auto_error=False)

class CurrentUser(BaseModel):
    id: str
    email: str | None = None
    plan: Plan = Plan.FREE
    free_usage: int = 0

def _read_entitlement(app_metadata: object) -> tuple[Plan, int]:
    if not isinstance(app_metadata, dict):
        return Plan.FREE, 0
    plan = Plan.parse(app_metadata.get("plan"))
    try:
        free_usage = int(app_metadata.get("free_usage") or 0)
    except (TypeError, ValueError):
        free_usage = 0
    return plan, free_usage

async def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(auth_scheme),
    supa: Client = Depends(get_supabase),
) -> CurrentUser:
    """
    Validate the Supabase access token from Authorization: Bearer <token>
    and return the user with the plan and usage stored in app_metadata.
    """
    if cred is None or cred.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")

    token = cred.credentials
    try:
        res = supa.auth.get_user(token)
        user = res.user
        if not user:
            raise HTTPException(status_code=401, detail="Invalid token")

        # app_metadata is only writable with the service role key
        plan, free_usage = _read_entitlement(getattr(user, "app_metadata", None))
        return CurrentUser(id=str(user.id), email=user.email, plan=plan, free_usage=free_usage)
    except HTTPException:
        raise
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid/expired token")


async def get_entitlement(user: CurrentUser = Depends(get_current_user)) -> EntitlementContext:
    return EntitlementContext(user_id=user.id, plan=user.plan, free_usage=user.free_usage)


def get_entitlement_service(supa: Client = Depends(get_supabase)) -> EntitlementService:
    return EntitlementService(
        SupabaseUsageRepository(supa),
        free_usage_limit=settings.FREE_USAGE_LIMIT,
    )


def get_creation_service(supa: Client = Depends(get_supabase)) -> CreationService:
    global _creation_service
    if _creation_service is None:
        _creation_service = CreationService(
            entitlements=get_entitlement_service(supa),
            creations=SupabaseCreationRepository(supa),
            text_generator=GeminiClient(settings.GEMINI_API_KEY, model_name=settings.GEMINI_MODEL),
            image_generator=HordeClient(settings.AI_HORDE_API_KEY, base_url=settings.AI_HORDE_BASE_URL),
            media_store=CloudinaryMediaStore(
                cloud_name=settings.CLOUDINARY_CLOUD_NAME,
                api_key=settings.CLOUDINARY_API_KEY,
                api_secret=settings.CLOUDINARY_API_SECRET,
            ),
            poll_policy=PollPolicy(
                max_attempts=settings.HORDE_POLL_MAX_ATTEMPTS,
                interval_seconds=settings.HORDE_POLL_INTERVAL_SECONDS,
            ),
            resume_max_bytes=settings.RESUME_MAX_BYTES,
        )
    return _creation_service


def close_creation_service() -> None:
    global _creation_service
    if _creation_service is not None:
        _creation_service.close()
        _creation_service = None
