"""Translation package.

This package provides the translation pipeline for the popup translator.

Architecture:
- models/: Data models (TranslationRequest, PromptBundle, results, events)
- pipeline/: Pipeline components (PromptEngine, OllamaGateway, etc.)
- language.py: Japanese/English detection for untagged input
- errors.py: Error taxonomy surfaced to callers
"""

from .errors import (
    ApiError,
    ConnectionFailed,
    InsufficientCapability,
    TranslationError,
    TranslationTimeout,
)
from .language import detect_language, resolve_languages
from .models import (
    Language,
    TaskKind,
    TranslationRequest,
    Message,
    PromptBundle,
    LLMResponse,
    StreamChunkEvent,
    StreamCompleteEvent,
    TranslationResult,
    SummarizeResult,
    ReplyResult,
    ProviderStatus,
    DetectionResult,
)
from .pipeline import OllamaGateway, OutputProcessor, PromptEngine, TranslationPipeline

__all__ = [
    # Errors
    "ApiError",
    "ConnectionFailed",
    "InsufficientCapability",
    "TranslationError",
    "TranslationTimeout",
    # Language detection
    "detect_language",
    "resolve_languages",
    # Models
    "Language",
    "TaskKind",
    "TranslationRequest",
    "Message",
    "PromptBundle",
    "LLMResponse",
    "StreamChunkEvent",
    "StreamCompleteEvent",
    "TranslationResult",
    "SummarizeResult",
    "ReplyResult",
    "ProviderStatus",
    "DetectionResult",
    # Pipeline
    "OllamaGateway",
    "OutputProcessor",
    "PromptEngine",
    "TranslationPipeline",
]
