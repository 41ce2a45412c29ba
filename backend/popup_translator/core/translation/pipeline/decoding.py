"""Decoding parameters per model profile."""

from ..models.prompt import DecodingParams
from .model_profile import ModelKind, ModelProfile

MAX_OUTPUT_TOKENS = 4096

_PARAMS = {
    # Lower temperature and stronger anti-repetition for translation models
    ModelKind.SPECIALIZED_TRANSLATION: DecodingParams(
        temperature=0.1,
        repeat_penalty=1.4,
        max_output_tokens=MAX_OUTPUT_TOKENS,
    ),
    ModelKind.GENERAL_PURPOSE: DecodingParams(
        temperature=0.2,
        repeat_penalty=1.1,
        max_output_tokens=MAX_OUTPUT_TOKENS,
        top_p=0.9,
    ),
}


def select_parameters(profile: ModelProfile) -> DecodingParams:
    """Return the decoding parameters for a profile."""
    return _PARAMS[profile.kind]
