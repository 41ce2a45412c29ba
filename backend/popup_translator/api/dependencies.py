"""API dependencies for authentication and the translation pipeline.

This module provides:
- Optional API key authentication for network-exposed deployments
- The pipeline instance injected into route handlers
"""

import logging
import secrets
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException

from popup_translator.config import settings
from popup_translator.core.translation import TranslationPipeline
from popup_translator.core.translation.errors import TranslationError

logger = logging.getLogger(__name__)


# =============================================================================
# Authentication Dependencies
# =============================================================================


async def verify_api_token(
    authorization: Annotated[Optional[str], Header()] = None,
    x_api_key: Annotated[Optional[str], Header(alias="X-API-Key")] = None,
) -> bool:
    """Verify API token.

    Supports two authentication methods:
    1. Authorization: Bearer <token>
    2. X-API-Key: <token>

    If API_AUTH_TOKEN is not set in environment, authentication is disabled
    (for local use from the popup window).

    Raises:
        HTTPException: 401 if auth is required but token is invalid/missing
    """
    if not settings.api_auth_token:
        return True

    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:]
    elif x_api_key:
        token = x_api_key

    if not token:
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Provide Authorization: Bearer <token> or X-API-Key header.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not secrets.compare_digest(token, settings.api_auth_token):
        logger.warning("Rejected request with invalid API token")
        raise HTTPException(
            status_code=401,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return True


async def verify_api_token_if_configured(
    authorization: Annotated[Optional[str], Header()] = None,
    x_api_key: Annotated[Optional[str], Header(alias="X-API-Key")] = None,
) -> bool:
    """Verify API token only if require_auth_all is enabled."""
    if not settings.require_auth_all:
        return True
    return await verify_api_token(authorization, x_api_key)


OptionalAuth = Annotated[bool, Depends(verify_api_token_if_configured)]


# =============================================================================
# Pipeline Dependencies
# =============================================================================


@lru_cache
def get_pipeline() -> TranslationPipeline:
    """Process-wide pipeline on the shared pooled HTTP client."""
    return TranslationPipeline()


Pipeline = Annotated[TranslationPipeline, Depends(get_pipeline)]


def to_http_exception(error: TranslationError) -> HTTPException:
    """Map a pipeline error onto its HTTP status with the display message."""
    return HTTPException(status_code=error.status_code, detail=error.message)
