"""Japanese/English language detection.

Detection is a character-ratio heuristic: the share of Japanese code points
(kana, CJK ideographs, CJK punctuation, half-width katakana) among the
non-whitespace characters of the text.
"""

import re
from typing import Optional, Tuple

from .models.context import Language
from .models.result import DetectionResult

JAPANESE_CHARS = re.compile(
    "[\u3040-\u309f"  # hiragana
    "\u30a0-\u30ff"  # katakana
    "\u4e00-\u9fff"  # CJK unified ideographs
    "\u3000-\u303f"  # CJK symbols and punctuation
    "\uff65-\uff9f]"  # half-width katakana
)
_WHITESPACE = re.compile(r"\s+")

SHORT_TEXT_LENGTH = 10
JAPANESE_RATIO_THRESHOLD = 0.1

# Below this confidence the default direction is used instead
CONFIDENCE_THRESHOLD = 0.5
DEFAULT_SOURCE = Language.JAPANESE


def japanese_ratio(text: str) -> float:
    """Share of Japanese characters in ``text``, whitespace ignored."""
    cleaned = _WHITESPACE.sub("", text)
    if not cleaned:
        return 0.0
    return len(JAPANESE_CHARS.findall(cleaned)) / len(cleaned)


def detect_language(text: str) -> DetectionResult:
    """Detect whether text is Japanese or English.

    Empty input is reported as Japanese with zero confidence. Short texts
    (under 10 characters) count as Japanese as soon as one Japanese
    character appears, with a capped confidence.

    Args:
        text: Text to inspect

    Returns:
        DetectionResult with language and confidence in ``[0, 1]``
    """
    trimmed = text.strip()
    if not trimmed:
        return DetectionResult(language=Language.JAPANESE, confidence=0.0)

    ratio = japanese_ratio(trimmed)

    if len(trimmed) < SHORT_TEXT_LENGTH:
        if JAPANESE_CHARS.search(trimmed):
            return DetectionResult(language=Language.JAPANESE, confidence=min(0.8, 0.5 + ratio * 0.5))
        return DetectionResult(language=Language.ENGLISH, confidence=0.7)

    if ratio >= JAPANESE_RATIO_THRESHOLD:
        return DetectionResult(language=Language.JAPANESE, confidence=min(1.0, 0.5 + ratio))
    return DetectionResult(
        language=Language.ENGLISH,
        confidence=min(1.0, 0.6 + (1 - ratio) * 0.4),
    )


def resolve_languages(
    text: str,
    source_lang: Optional[Language] = None,
    target_lang: Optional[Language] = None,
) -> Tuple[Language, Language]:
    """Fill in a missing translation direction.

    A missing source is detected from the text; a low-confidence detection
    falls back to Japanese. A missing target is the opposite of the source.
    """
    if source_lang is None:
        detection = detect_language(text)
        if detection.confidence >= CONFIDENCE_THRESHOLD:
            source_lang = detection.language
        else:
            source_lang = DEFAULT_SOURCE
    if target_lang is None:
        target_lang = source_lang.opposite
    return source_lang, target_lang
