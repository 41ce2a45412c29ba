"""Model capability profiles.

A model identifier such as ``qwen2.5:7b`` or
``mitmul/plamo-2-translate:Q4_K_M`` is classified into a small closed set of
profiles. Prompt and decoding choices downstream consume the profile, never
the raw string.
"""

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..errors import InsufficientCapability

# Vendor of the translation-specialized model family
SPECIALIZED_VENDOR_TOKEN = "plamo"
SPECIALIZED_TASK_TOKEN = "translate"

# Summaries and replies need at least this many billion parameters
MIN_SIZE_FOR_ADVANCED_FEATURES = 7

_SIZE_PATTERN = re.compile(r"[:\-_](\d+)b")


class ModelKind(str, Enum):
    """Capability class of a model."""

    SPECIALIZED_TRANSLATION = "specialized_translation"
    GENERAL_PURPOSE = "general_purpose"


class ModelProfile(BaseModel):
    """Derived capability profile of a model identifier."""

    model_config = ConfigDict(frozen=True)

    kind: ModelKind
    declared_size_billions: Optional[int] = None

    @property
    def is_specialized(self) -> bool:
        return self.kind == ModelKind.SPECIALIZED_TRANSLATION


def extract_model_size(model: str) -> Optional[int]:
    """Parse the declared parameter count in billions.

    Examples: ``"qwen2.5:3b"`` -> 3, ``"model-7b"`` -> 7,
    ``"model:latest"`` -> None.
    """
    match = _SIZE_PATTERN.search(model.lower())
    if not match:
        return None
    return int(match.group(1))


def classify(model: str) -> ModelProfile:
    """Classify a model identifier. Never raises; unknown models are general purpose."""
    lowered = model.lower()
    if SPECIALIZED_VENDOR_TOKEN in lowered and SPECIALIZED_TASK_TOKEN in lowered:
        kind = ModelKind.SPECIALIZED_TRANSLATION
    else:
        kind = ModelKind.GENERAL_PURPOSE
    return ModelProfile(kind=kind, declared_size_billions=extract_model_size(model))


def require_advanced_capability(model: str) -> ModelProfile:
    """Gate summarize/reply on declared model size.

    Models without a parseable size pass, so custom names are not penalized.

    Returns:
        The model's profile

    Raises:
        InsufficientCapability: If the declared size is below the minimum
    """
    profile = classify(model)
    size = profile.declared_size_billions
    if size is not None and size < MIN_SIZE_FOR_ADVANCED_FEATURES:
        raise InsufficientCapability(size, MIN_SIZE_FOR_ADVANCED_FEATURES)
    return profile
