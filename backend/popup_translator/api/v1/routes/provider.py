"""Runtime provider and settings API routes."""

from typing import Optional

from fastapi import APIRouter

from popup_translator.api.dependencies import OptionalAuth, Pipeline
from popup_translator.config import settings
from popup_translator.core.translation import ProviderStatus
from popup_translator.models.schemas import PreloadRequest, PreloadResponse, RuntimeDefaults

router = APIRouter()


@router.get(
    "/provider/status",
    response_model=ProviderStatus,
    response_model_exclude_none=True,
)
async def provider_status(pipeline: Pipeline, _auth: OptionalAuth, endpoint: Optional[str] = None):
    """Check whether the Ollama runtime is reachable."""
    return await pipeline.check_status((endpoint or settings.ollama_endpoint).rstrip("/"))


@router.post(
    "/provider/preload",
    response_model=PreloadResponse,
    response_model_exclude_none=True,
)
async def preload_model(pipeline: Pipeline, _auth: OptionalAuth, body: Optional[PreloadRequest] = None):
    """Load the model into memory ahead of the first translation."""
    body = body or PreloadRequest()
    reason = await pipeline.preload(body.resolved_endpoint, body.resolved_model)
    return PreloadResponse(loaded=reason is None, reason=reason)


@router.get("/settings/defaults", response_model=RuntimeDefaults)
async def runtime_defaults(_auth: OptionalAuth):
    """Configured runtime defaults used when a request omits them."""
    return RuntimeDefaults(
        endpoint=settings.ollama_endpoint,
        model=settings.ollama_model,
        keep_alive=settings.keep_alive,
        request_timeout=settings.request_timeout,
    )
