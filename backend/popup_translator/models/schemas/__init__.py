"""API request/response schemas."""

from .llm import RuntimeConfigMixin
from .translation import (
    DetectLanguageRequest,
    PreloadRequest,
    PreloadResponse,
    ReplyRequest,
    RuntimeDefaults,
    SummarizeRequest,
    TranslateRequest,
)

__all__ = [
    "RuntimeConfigMixin",
    "DetectLanguageRequest",
    "PreloadRequest",
    "PreloadResponse",
    "ReplyRequest",
    "RuntimeDefaults",
    "SummarizeRequest",
    "TranslateRequest",
]
