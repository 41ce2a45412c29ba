"""Translation result models.

This module defines the final output data structures returned to the
caller. They serialise with camelCase keys.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from .context import CamelModel, Language


class TranslationResult(CamelModel):
    """Cleaned translation of one request."""

    translated_text: str = Field(..., description="The translated text")
    source_lang: Language
    target_lang: Language
    duration_ms: int = Field(..., ge=0, description="Wall-clock time of the call")


class SummarizeResult(CamelModel):
    """Summary of a text, lengths in code points."""

    summary: str
    original_length: int = Field(..., ge=0)
    summary_length: int = Field(..., ge=0)
    duration_ms: int = Field(..., ge=0)


class ReplyResult(CamelModel):
    """Generated reply plus its rendering in the other language.

    ``reply`` is written in ``language``; ``explanation`` is the same reply
    translated into the caller's source language, or empty when the model
    did not produce that section.
    """

    reply: str
    explanation: str = ""
    language: Language
    duration_ms: int = Field(..., ge=0)


class ProviderState(str, Enum):
    """Reachability of the runtime."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class ProviderStatus(CamelModel):
    """Health-check outcome, computed fresh on every check."""

    status: ProviderState
    reason: Optional[str] = None

    @model_validator(mode="after")
    def reason_matches_state(self) -> "ProviderStatus":
        """Only an unavailable runtime carries a reason."""
        if self.status == ProviderState.UNAVAILABLE and not self.reason:
            raise ValueError("Unavailable status requires a reason")
        if self.status == ProviderState.AVAILABLE and self.reason is not None:
            raise ValueError("Available status carries no reason")
        return self

    @classmethod
    def available(cls) -> "ProviderStatus":
        return cls(status=ProviderState.AVAILABLE)

    @classmethod
    def unavailable(cls, reason: str) -> "ProviderStatus":
        return cls(status=ProviderState.UNAVAILABLE, reason=reason)

    @property
    def is_available(self) -> bool:
        return self.status == ProviderState.AVAILABLE


class DetectionResult(CamelModel):
    """Detected language of a text with a confidence score."""

    language: Language
    confidence: float = Field(..., ge=0.0, le=1.0)
