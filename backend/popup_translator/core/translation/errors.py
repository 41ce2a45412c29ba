"""Translation errors.

Every error carries a message suitable for direct display and the HTTP
status the API layer answers with. None of them are retried internally.
"""

from typing import Optional


class TranslationError(Exception):
    """Base class for terminal failures of a single call."""

    status_code: int = 500
    code: str = "translation_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class TranslationTimeout(TranslationError):
    """No response within the configured window."""

    status_code = 504
    code = "timeout"

    def __init__(self, message: str = "The translation request timed out"):
        super().__init__(message)


class ConnectionFailed(TranslationError):
    """Transport-level failure: refused connection, DNS, broken stream."""

    status_code = 503
    code = "connection_failed"

    def __init__(self, detail: str):
        super().__init__(f"Connection failed: {detail}")
        self.detail = detail


class ApiError(TranslationError):
    """Non-2xx status or a body that does not match the expected shape."""

    status_code = 502
    code = "api_error"

    def __init__(self, detail: str, status: Optional[int] = None):
        super().__init__(f"API error: {detail}")
        self.detail = detail
        self.status = status


class InsufficientCapability(TranslationError):
    """Model is too small for summarize/reply."""

    status_code = 422
    code = "insufficient_capability"

    def __init__(self, declared_size: int, minimum: int):
        super().__init__(
            "This model does not support summaries or replies. "
            f"Use a model with at least {minimum}B parameters "
            f"(current: {declared_size}B)"
        )
        self.declared_size = declared_size
        self.minimum = minimum
