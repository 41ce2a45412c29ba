"""Translation pipeline data models.

This module provides structured data models for the translation pipeline,
ensuring type safety and clear contracts between components.
"""

from .context import CamelModel, Language, TaskKind, TranslationRequest
from .prompt import DecodingParams, Message, PromptBundle
from .response import (
    CHUNK_EVENT,
    COMPLETE_EVENT,
    ERROR_EVENT,
    ChatMessage,
    ChatResponse,
    LLMResponse,
    StreamChunkEvent,
    StreamCompleteEvent,
    StreamFragment,
)
from .result import (
    DetectionResult,
    ProviderState,
    ProviderStatus,
    ReplyResult,
    SummarizeResult,
    TranslationResult,
)

__all__ = [
    # Context models
    "CamelModel",
    "Language",
    "TaskKind",
    "TranslationRequest",
    # Prompt models
    "DecodingParams",
    "Message",
    "PromptBundle",
    # Response models
    "CHUNK_EVENT",
    "COMPLETE_EVENT",
    "ERROR_EVENT",
    "ChatMessage",
    "ChatResponse",
    "LLMResponse",
    "StreamChunkEvent",
    "StreamCompleteEvent",
    "StreamFragment",
    # Result models
    "DetectionResult",
    "ProviderState",
    "ProviderStatus",
    "ReplyResult",
    "SummarizeResult",
    "TranslationResult",
]
