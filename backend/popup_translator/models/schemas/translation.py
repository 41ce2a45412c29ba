"""Request and response schemas for the translation API."""

from typing import Optional

from pydantic import Field

from popup_translator.core.translation.models.context import CamelModel, Language

from .llm import RuntimeConfigMixin


class TranslateRequest(RuntimeConfigMixin):
    """Translate text; a missing direction is detected from the text."""

    text: str
    source_lang: Optional[Language] = None
    target_lang: Optional[Language] = None


class SummarizeRequest(RuntimeConfigMixin):
    """Summarize text in ``language`` (detected when omitted)."""

    text: str
    language: Optional[Language] = None


class ReplyRequest(RuntimeConfigMixin):
    """Draft a reply in ``language`` with an explanation in ``source_language``."""

    text: str
    language: Language
    source_language: Language


class DetectLanguageRequest(CamelModel):
    text: str


class PreloadRequest(RuntimeConfigMixin):
    pass


class PreloadResponse(CamelModel):
    """Outcome of a model warm-up; ``reason`` is set only on failure."""

    loaded: bool
    reason: Optional[str] = None


class RuntimeDefaults(CamelModel):
    endpoint: str
    model: str
    keep_alive: str
    request_timeout: float = Field(..., gt=0)
