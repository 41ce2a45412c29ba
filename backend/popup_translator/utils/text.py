"""Text utilities for log-safe string handling."""

# Break points considered when shortening, including Japanese punctuation
BREAK_CHARS = frozenset(" \n\t,.!?;:-。、，！？")

# How far back from the cut to look for a break point
BREAK_LOOKBACK = 20


def safe_truncate(text: str, max_chars: int, suffix: str = "...") -> str:
    """Shorten text for previews, preferring to cut at a break point.

    Slicing works on code points, so multi-byte characters are never split.

    Args:
        text: Text to truncate
        max_chars: Maximum characters kept (excluding suffix)
        suffix: Appended when the text was shortened

    Returns:
        ``text`` unchanged when short enough, else a prefix plus ``suffix``
    """
    if not text or len(text) <= max_chars:
        return text

    truncated = text[:max_chars]
    for i in range(len(truncated) - 1, max(len(truncated) - BREAK_LOOKBACK, 0), -1):
        if truncated[i] in BREAK_CHARS:
            truncated = truncated[: i + 1].rstrip()
            break
    return truncated + suffix
