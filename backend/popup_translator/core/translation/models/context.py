"""Translation context models.

This module defines the input data structures for the translation pipeline:
the supported languages, the task kinds and the per-call request record.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys for the UI layer."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Language(str, Enum):
    """Supported languages."""

    JAPANESE = "japanese"
    ENGLISH = "english"

    @property
    def display_name(self) -> str:
        """Canonical name used inside prompts."""
        return _DISPLAY_NAMES[self]

    @property
    def opposite(self) -> "Language":
        """The other supported language (default translation target)."""
        if self is Language.JAPANESE:
            return Language.ENGLISH
        return Language.JAPANESE


_DISPLAY_NAMES = {
    Language.JAPANESE: "Japanese",
    Language.ENGLISH: "English",
}


class TaskKind(str, Enum):
    """What the model is asked to do with the text."""

    TRANSLATE = "translate"
    SUMMARIZE = "summarize"
    REPLY = "reply"


class TranslationRequest(CamelModel):
    """Single call into the pipeline.

    Caller-owned and consumed once; endpoint and model come from the
    settings collaborator.
    """

    text: str = Field(..., description="Raw text to process")
    source_lang: Language = Field(..., description="Language of the text")
    target_lang: Language = Field(..., description="Language to produce")
    endpoint: str = Field(..., description="Base URL of the Ollama runtime")
    model: str = Field(..., description="Model identifier, e.g. qwen2.5:7b")

    @field_validator("endpoint")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")
