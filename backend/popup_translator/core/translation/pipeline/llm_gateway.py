"""LLM Gateway for the local Ollama runtime.

This module owns the process-wide pooled HTTP client and the three calls
made against the runtime: whole-response chat, streamed chat and the
health check. Transport failures are mapped onto the translation error
taxonomy here so nothing above this layer sees httpx exceptions.
"""

import logging
import threading
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from pydantic import ValidationError

from popup_translator.config import settings

from ..errors import ApiError, ConnectionFailed, TranslationError, TranslationTimeout
from ..models.prompt import Message, PromptBundle
from ..models.response import ChatResponse, LLMResponse
from ..models.result import ProviderStatus

logger = logging.getLogger(__name__)

NOT_RUNNING_MESSAGE = "Ollama is not running. Start Ollama and try again."
PRELOAD_PROMPT = "hi"

# InvalidURL is raised while parsing the URL and is not an HTTPError
TRANSPORT_ERRORS = (httpx.HTTPError, httpx.InvalidURL)

_client: Optional[httpx.AsyncClient] = None
_client_lock = threading.Lock()


def get_http_client() -> httpx.AsyncClient:
    """Return the shared pooled client, creating it on first use."""
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                # The keep-alive cap is pool-wide; one runtime endpoint makes it per host
                _client = httpx.AsyncClient(
                    timeout=httpx.Timeout(settings.request_timeout),
                    limits=httpx.Limits(
                        max_keepalive_connections=settings.pool_max_idle_per_host,
                    ),
                )
                logger.info(
                    "[LLM Gateway] HTTP client created: timeout=%ss, keepalive=%d",
                    settings.request_timeout,
                    settings.pool_max_idle_per_host,
                )
    return _client


async def close_http_client() -> None:
    """Close and forget the shared client (application shutdown)."""
    global _client
    with _client_lock:
        client, _client = _client, None
    if client is not None:
        await client.aclose()


def map_transport_error(exc: Exception) -> TranslationError:
    """Translate an httpx failure into a display-ready error."""
    if isinstance(exc, httpx.InvalidURL):
        return ConnectionFailed(f"invalid endpoint: {exc}")
    if isinstance(exc, httpx.TimeoutException):
        return TranslationTimeout()
    if isinstance(exc, httpx.ConnectError):
        return ConnectionFailed(NOT_RUNNING_MESSAGE)
    return ConnectionFailed(str(exc) or exc.__class__.__name__)


def _status_error(response: httpx.Response, body: str) -> ApiError:
    return ApiError(f"status {response.status_code}: {body}", status=response.status_code)


class OllamaGateway:
    """Gateway for chat-completion calls against an Ollama runtime.

    Usage:
        gateway = OllamaGateway()
        response = await gateway.call(bundle)
        async with gateway.open_stream(bundle) as fragments:
            async for fragment in fragments:
                ...
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        keep_alive: Optional[str] = None,
        request_timeout: Optional[float] = None,
        health_check_timeout: Optional[float] = None,
        health_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the gateway.

        Args:
            client: Client to use instead of the shared pooled one
            keep_alive: Keep-alive directive sent with every chat call
            request_timeout: Timeout for non-streaming calls in seconds
            health_check_timeout: Timeout for the health check in seconds
            health_transport: Transport for the health-check client
        """
        self._client = client
        self.keep_alive = keep_alive or settings.keep_alive
        self.request_timeout = request_timeout or settings.request_timeout
        self.health_check_timeout = health_check_timeout or settings.health_check_timeout
        self._health_transport = health_transport

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client if self._client is not None else get_http_client()

    async def call(self, bundle: PromptBundle) -> LLMResponse:
        """Make a non-streaming chat call.

        Args:
            bundle: Prompt bundle

        Returns:
            LLMResponse with the raw model content

        Raises:
            TranslationTimeout: No response within the request timeout
            ConnectionFailed: Runtime unreachable or connection dropped
            ApiError: Non-2xx status or unexpected body
        """
        start_time = time.perf_counter()
        payload = bundle.to_payload(stream=False, keep_alive=self.keep_alive)

        try:
            response = await self.client.post(
                bundle.chat_url,
                json=payload,
                timeout=httpx.Timeout(self.request_timeout),
            )
        except TRANSPORT_ERRORS as e:
            logger.error("[LLM Gateway] Chat call failed: model=%s, error=%r", bundle.model, e)
            raise map_transport_error(e) from e

        if not response.is_success:
            raise _status_error(response, response.text)

        try:
            chat = ChatResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise ApiError(f"failed to parse response: {e.errors()[0]['msg']}") from e

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info("[LLM Gateway] Chat response: model=%s, latency=%dms", bundle.model, latency_ms)
        return LLMResponse(content=chat.message.content, model=bundle.model, latency_ms=latency_ms)

    @asynccontextmanager
    async def open_stream(self, bundle: PromptBundle) -> AsyncIterator[AsyncIterator[bytes]]:
        """Open a streaming chat call.

        Yields the raw byte fragments of the NDJSON body. The read timeout is
        disabled so a silent stream waits until the caller cancels; leaving
        the context closes the response and its connection.

        Raises:
            TranslationTimeout: Handshake did not complete in time
            ConnectionFailed: Runtime unreachable
            ApiError: Non-2xx status
        """
        payload = bundle.to_payload(stream=True, keep_alive=self.keep_alive)
        timeout = httpx.Timeout(self.request_timeout, read=None)
        try:
            request = self.client.build_request("POST", bundle.chat_url, json=payload, timeout=timeout)
            response = await self.client.send(request, stream=True)
        except TRANSPORT_ERRORS as e:
            logger.error("[LLM Gateway] Stream open failed: model=%s, error=%r", bundle.model, e)
            raise map_transport_error(e) from e

        try:
            if not response.is_success:
                body = (await response.aread()).decode("utf-8", errors="replace")
                raise _status_error(response, body)
            yield self._iter_fragments(response)
        finally:
            await response.aclose()

    async def _iter_fragments(self, response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for fragment in response.aiter_bytes():
                yield fragment
        except httpx.HTTPError as e:
            logger.error("[LLM Gateway] Stream interrupted: %r", e)
            raise ConnectionFailed(str(e) or e.__class__.__name__) from e

    async def check_status(self, endpoint: str) -> ProviderStatus:
        """Check whether the runtime answers ``GET /api/tags``.

        Uses its own short-lived client so a busy pool never delays it.
        """
        url = f"{endpoint.rstrip('/')}/api/tags"
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.health_check_timeout),
                transport=self._health_transport,
            ) as client:
                response = await client.get(url)
        except httpx.ConnectError:
            return ProviderStatus.unavailable("Ollama is not running")
        except httpx.TimeoutException:
            return ProviderStatus.unavailable("Connection timed out")
        except httpx.InvalidURL as e:
            return ProviderStatus.unavailable(f"Invalid endpoint: {e}")
        except httpx.HTTPError as e:
            return ProviderStatus.unavailable(str(e) or e.__class__.__name__)

        if response.is_success:
            return ProviderStatus.available()
        return ProviderStatus.unavailable(f"HTTP error: {response.status_code}")

    async def preload(self, endpoint: str, model: str) -> Optional[str]:
        """Force the model into memory with a trivial chat.

        Best effort: failures come back as a reason string.

        Returns:
            None on success, otherwise a human-readable reason
        """
        bundle = PromptBundle(
            endpoint=endpoint,
            model=model,
            messages=[Message(role="user", content=PRELOAD_PROMPT)],
        )
        try:
            response = await self.client.post(
                bundle.chat_url,
                json=bundle.to_payload(stream=False, keep_alive=self.keep_alive),
                timeout=httpx.Timeout(self.request_timeout),
            )
        except httpx.ConnectError:
            return "Ollama is not running"
        except httpx.TimeoutException:
            return "Preload timed out"
        except httpx.InvalidURL as e:
            return f"Invalid endpoint: {e}"
        except httpx.HTTPError as e:
            return str(e) or e.__class__.__name__

        if not response.is_success:
            return f"HTTP error: {response.status_code}"
        return None
