"""Split a two-section reply response.

The reply prompt asks the model for a reply section followed by a
translated-explanation section. Models do not always use the exact markers
they were given, so both families accept labelled and bracketed variants in
English and Japanese. Lists are searched in order; the first hit wins.
"""

import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

REPLY_MARKERS: Tuple[str, ...] = (
    "REPLY:",
    "Reply:",
    "reply:",
    "[返信]",
    "[Reply]",
    "返信:",
)

EXPLANATION_MARKERS: Tuple[str, ...] = (
    "TRANSLATION:",
    "Translation:",
    "translation:",
    "[翻訳]",
    "[Translation]",
    # legacy synonyms from the earlier explanation-style prompt
    "[説明]",
    "[Explanation]",
    "翻訳:",
)


def _extract_reply(text: str) -> Optional[str]:
    """Return the reply section, or None when no reply marker is present."""
    for marker in REPLY_MARKERS:
        start = text.find(marker)
        if start == -1:
            continue
        after = text[start + len(marker):]
        ends = [pos for pos in (after.find(m) for m in EXPLANATION_MARKERS) if pos != -1]
        end = min(ends) if ends else len(after)
        return after[:end].strip()
    return None


def _extract_explanation(text: str) -> Tuple[int, str]:
    """Return the marker offset and the explanation, or ``(-1, "")``."""
    for marker in EXPLANATION_MARKERS:
        start = text.find(marker)
        if start != -1:
            return start, text[start + len(marker):].strip()
    return -1, ""


def split_reply(model_output: str) -> Tuple[str, str]:
    """Separate the reply from its translated explanation.

    When neither marker family is present the whole output is the reply and
    the explanation is empty. When only an explanation marker is present,
    the text before it is the reply.

    Args:
        model_output: Raw model response

    Returns:
        ``(reply, explanation)``
    """
    text = model_output.strip()
    reply = _extract_reply(text)
    explanation_start, explanation = _extract_explanation(text)

    if reply is None and explanation_start == -1:
        logger.warning("Reply markers not found; using the whole response as the reply")
        return text, ""

    if reply is None:
        reply = text[:explanation_start].strip()

    if not reply:
        logger.warning("Reply section is empty")
    if not explanation:
        logger.warning("Explanation section is empty")
    return reply, explanation
