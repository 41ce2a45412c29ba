"""Shared runtime-related request schemas.

These base classes eliminate repetition of the runtime fields (Ollama
endpoint and model) across the API endpoints.
"""

from typing import Optional

from popup_translator.config import settings
from popup_translator.core.translation.models.context import CamelModel


class RuntimeConfigMixin(CamelModel):
    """Mixin for runtime configuration fields.

    Both fields are optional; missing values fall back to the configured
    defaults (``OLLAMA_ENDPOINT`` / ``OLLAMA_MODEL``).
    """

    endpoint: Optional[str] = None
    model: Optional[str] = None

    @property
    def resolved_endpoint(self) -> str:
        return (self.endpoint or settings.ollama_endpoint).rstrip("/")

    @property
    def resolved_model(self) -> str:
        return self.model or settings.ollama_model
