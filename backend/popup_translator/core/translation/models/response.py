"""LLM response models.

This module defines what comes back from the Ollama runtime, both the
whole-response body and the NDJSON fragments of a streamed body, plus the
events emitted to the UI while a stream is consumed.
"""

from typing import Optional

from pydantic import BaseModel, Field

from .context import CamelModel

CHUNK_EVENT = "translation-chunk"
COMPLETE_EVENT = "translation-complete"
ERROR_EVENT = "translation-error"


class ChatMessage(BaseModel):
    """``message`` object of an ``/api/chat`` response."""

    content: str


class ChatResponse(BaseModel):
    """Non-streaming ``/api/chat`` body. Only ``message.content`` is required."""

    message: ChatMessage


class StreamFragment(BaseModel):
    """One NDJSON line of a streamed ``/api/chat`` body."""

    message: Optional[ChatMessage] = None
    done: bool


class LLMResponse(BaseModel):
    """Raw response from the runtime, before cleaning."""

    content: str = Field(..., description="Response content from LLM")
    model: str = Field(..., description="Model identifier used")
    latency_ms: int = Field(default=0, description="Response latency in milliseconds")


class StreamChunkEvent(CamelModel):
    """Emitted once per decoded fragment that carries content."""

    chunk: str
    accumulated: str
    done: bool = False


class StreamCompleteEvent(CamelModel):
    """Emitted exactly once after the terminal fragment or the end of the body."""

    translated_text: str
    duration_ms: int = Field(..., ge=0)
