"""Main translation pipeline orchestrator.

This module provides the TranslationPipeline class that coordinates
all pipeline components for one call:

Request -> ModelProfile -> PromptEngine -> PromptBundle -> OllamaGateway
        -> OutputProcessor / reply splitter -> Result

Calls share nothing but the pooled HTTP client held by the gateway.
"""

import logging
import time
from typing import AsyncIterator, Optional

from popup_translator.utils.text import safe_truncate

from ..models.context import Language, TaskKind, TranslationRequest
from ..models.prompt import PromptBundle
from ..models.result import (
    ProviderStatus,
    ReplyResult,
    SummarizeResult,
    TranslationResult,
)
from .llm_gateway import OllamaGateway
from .model_profile import ModelProfile, classify, require_advanced_capability
from .output_processor import OutputProcessor
from .prompt_engine import PromptEngine
from .reply_splitter import split_reply
from .stream_decoder import (
    ChunkListener,
    CompleteListener,
    StreamDispatcher,
    StreamEvent,
    elapsed_ms,
)

logger = logging.getLogger(__name__)

PROMPT_PREVIEW_CHARS = 200


class TranslationPipeline:
    """Main orchestrator for the translation pipeline.

    Supports:
    - Whole-response and streamed translation
    - Summaries and business replies for capable models
    - Runtime health check and model warm-up
    """

    def __init__(
        self,
        gateway: Optional[OllamaGateway] = None,
        output_processor: Optional[OutputProcessor] = None,
    ):
        """Initialize translation pipeline.

        Args:
            gateway: Runtime gateway (defaults to one on the shared client)
            output_processor: Cleaner for raw model output
        """
        self.gateway = gateway or OllamaGateway()
        self.output_processor = output_processor or OutputProcessor()
        self.dispatcher = StreamDispatcher(self.gateway, self.output_processor)

    def _log_dispatch(self, bundle: PromptBundle, profile: ModelProfile) -> None:
        logger.info(
            "[Pipeline] Dispatch %s: model=%s, kind=%s, size=%s, ~%d tokens",
            bundle.task.value,
            bundle.model,
            profile.kind.value,
            profile.declared_size_billions,
            bundle.estimate_tokens(),
        )
        logger.debug(
            "[Pipeline] Prompt preview: %s",
            safe_truncate(bundle.user_prompt or "", PROMPT_PREVIEW_CHARS),
        )

    async def translate(self, request: TranslationRequest) -> TranslationResult:
        """Translate text and return the cleaned result.

        Args:
            request: Text, language pair, endpoint and model

        Returns:
            TranslationResult

        Raises:
            TranslationError: Transport or runtime failure
        """
        start = time.perf_counter()
        profile = classify(request.model)
        bundle = PromptEngine.build(TaskKind.TRANSLATE, request, profile)
        self._log_dispatch(bundle, profile)

        response = await self.gateway.call(bundle)
        translated = self.output_processor.clean(response.content, request.text)

        duration_ms = elapsed_ms(start)
        logger.info("[Pipeline] Translation complete: %dms", duration_ms)
        return TranslationResult(
            translated_text=translated,
            source_lang=request.source_lang,
            target_lang=request.target_lang,
            duration_ms=duration_ms,
        )

    def _prepare_stream(self, request: TranslationRequest) -> PromptBundle:
        profile = classify(request.model)
        bundle = PromptEngine.build(TaskKind.TRANSLATE, request, profile)
        self._log_dispatch(bundle, profile)
        return bundle

    def stream_events(self, request: TranslationRequest) -> AsyncIterator[StreamEvent]:
        """Streamed translation as an async iterator of events.

        Chunk events carry the raw accumulated text; the completion event
        carries the cleaned translation.
        """
        start = time.perf_counter()
        bundle = self._prepare_stream(request)
        return self.dispatcher.events(bundle, request.text, start=start)

    async def translate_stream(
        self,
        request: TranslationRequest,
        on_chunk: ChunkListener,
        on_complete: CompleteListener,
    ) -> None:
        """Streamed translation delivered to listener callbacks.

        ``on_complete`` is called exactly once on success and never on
        failure; the error propagates instead.
        """
        start = time.perf_counter()
        bundle = self._prepare_stream(request)
        await self.dispatcher.run(bundle, request.text, on_chunk, on_complete, start=start)

    async def summarize(
        self,
        text: str,
        language: Language,
        endpoint: str,
        model: str,
    ) -> SummarizeResult:
        """Summarize text in its own language.

        The capability gate runs before any I/O.

        Raises:
            InsufficientCapability: Model is too small for summaries
            TranslationError: Transport or runtime failure
        """
        profile = require_advanced_capability(model)
        start = time.perf_counter()
        request = TranslationRequest(
            text=text,
            source_lang=language,
            target_lang=language,
            endpoint=endpoint,
            model=model,
        )
        bundle = PromptEngine.build(TaskKind.SUMMARIZE, request, profile)
        self._log_dispatch(bundle, profile)

        response = await self.gateway.call(bundle)
        summary = self.output_processor.clean(response.content, text)

        duration_ms = elapsed_ms(start)
        logger.info(
            "[Pipeline] Summary complete: %d -> %d chars, %dms",
            len(text),
            len(summary),
            duration_ms,
        )
        return SummarizeResult(
            summary=summary,
            original_length=len(text),
            summary_length=len(summary),
            duration_ms=duration_ms,
        )

    async def reply(
        self,
        text: str,
        language: Language,
        source_language: Language,
        endpoint: str,
        model: str,
    ) -> ReplyResult:
        """Draft a business reply to a message.

        Args:
            text: Message being replied to
            language: Language the reply is written in
            source_language: Caller's language; the explanation is the reply
                rendered in it
            endpoint: Runtime base URL
            model: Model identifier

        Returns:
            ReplyResult

        Raises:
            InsufficientCapability: Model is too small for replies
            TranslationError: Transport or runtime failure
        """
        profile = require_advanced_capability(model)
        start = time.perf_counter()
        request = TranslationRequest(
            text=text,
            source_lang=source_language,
            target_lang=language,
            endpoint=endpoint,
            model=model,
        )
        bundle = PromptEngine.build(TaskKind.REPLY, request, profile)
        self._log_dispatch(bundle, profile)

        response = await self.gateway.call(bundle)
        reply, explanation = split_reply(response.content)

        duration_ms = elapsed_ms(start)
        logger.info("[Pipeline] Reply complete: %dms", duration_ms)
        return ReplyResult(
            reply=reply,
            explanation=explanation,
            language=language,
            duration_ms=duration_ms,
        )

    async def check_status(self, endpoint: str) -> ProviderStatus:
        """Check whether the runtime at ``endpoint`` is reachable."""
        status = await self.gateway.check_status(endpoint)
        if not status.is_available:
            logger.info("[Pipeline] Runtime unavailable at %s: %s", endpoint, status.reason)
        return status

    async def preload(self, endpoint: str, model: str) -> Optional[str]:
        """Warm the model up. Returns None on success, else the reason."""
        reason = await self.gateway.preload(endpoint, model)
        if reason is None:
            logger.info("[Pipeline] Model preloaded: %s", model)
        else:
            logger.warning("[Pipeline] Preload of %s failed: %s", model, reason)
        return reason
