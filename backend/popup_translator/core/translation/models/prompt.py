"""Prompt bundle models.

This module defines the prompt data structures that are passed to the
Ollama gateway: the chat messages, the decoding parameters and the
request body rendering shared by the streaming and non-streaming calls.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .context import TaskKind


class Message(BaseModel):
    """Single message in LLM conversation."""

    role: str = Field(
        ..., description="Message role: 'system', 'user', or 'assistant'"
    )
    content: str = Field(..., description="Message content")


class DecodingParams(BaseModel):
    """Sampling controls sent as Ollama ``options``."""

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(..., ge=0.0, le=2.0)
    repeat_penalty: float = Field(..., gt=0.0)
    max_output_tokens: int = Field(..., gt=0)
    top_p: Optional[float] = Field(default=None, gt=0.0, le=1.0)

    def to_options(self) -> Dict[str, Any]:
        """Render the Ollama ``options`` object.

        ``top_p`` is only sent when set so the runtime default applies
        otherwise.
        """
        options: Dict[str, Any] = {
            "temperature": self.temperature,
            "repeat_penalty": self.repeat_penalty,
            "num_predict": self.max_output_tokens,
        }
        if self.top_p is not None:
            options["top_p"] = self.top_p
        return options


class PromptBundle(BaseModel):
    """Complete prompt package ready for the LLM runtime.

    This is the output of the PromptEngine and input to OllamaGateway.
    Contains all information needed to make an ``/api/chat`` call.
    """

    task: TaskKind = Field(default=TaskKind.TRANSLATE, description="Task the prompt encodes")
    endpoint: str = Field(..., description="Base URL of the Ollama runtime")
    model: str = Field(..., description="Model identifier")
    messages: List[Message] = Field(..., description="Conversation messages")

    # None means "let the runtime decide" (used by the warm-up request)
    params: Optional[DecodingParams] = Field(
        default=None, description="Decoding parameters"
    )

    @property
    def system_prompt(self) -> Optional[str]:
        """Extract system prompt from messages."""
        for msg in self.messages:
            if msg.role == "system":
                return msg.content
        return None

    @property
    def user_prompt(self) -> Optional[str]:
        """Extract user prompt from messages."""
        for msg in self.messages:
            if msg.role == "user":
                return msg.content
        return None

    @property
    def chat_url(self) -> str:
        return f"{self.endpoint.rstrip('/')}/api/chat"

    def to_payload(self, *, stream: bool, keep_alive: str) -> Dict[str, Any]:
        """Build the JSON body for ``POST /api/chat``.

        Args:
            stream: Whether the runtime should stream NDJSON fragments
            keep_alive: How long the runtime keeps the model loaded

        Returns:
            Request body dict
        """
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in self.messages],
            "stream": stream,
        }
        if self.params is not None:
            payload["options"] = self.params.to_options()
        payload["keep_alive"] = keep_alive
        return payload

    def estimate_tokens(self) -> int:
        """Estimate total input tokens.

        Uses a simple heuristic: ~4 characters per token for English,
        ~2 characters per token for Japanese.

        Returns:
            Estimated token count
        """
        total_chars = sum(len(m.content) for m in self.messages)
        # Rough estimate: average 3 chars per token (mix of EN/JA)
        return total_chars // 3
