"""Translation API routes."""

import json
import logging

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from popup_translator.api.dependencies import OptionalAuth, Pipeline, to_http_exception
from popup_translator.core.translation import (
    DetectionResult,
    ReplyResult,
    SummarizeResult,
    TranslationRequest,
    TranslationResult,
    detect_language,
    resolve_languages,
)
from popup_translator.core.translation.errors import TranslationError
from popup_translator.core.translation.models import (
    CHUNK_EVENT,
    COMPLETE_EVENT,
    ERROR_EVENT,
    StreamCompleteEvent,
)
from popup_translator.models.schemas import (
    DetectLanguageRequest,
    ReplyRequest,
    SummarizeRequest,
    TranslateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _build_request(body: TranslateRequest) -> TranslationRequest:
    source_lang, target_lang = resolve_languages(body.text, body.source_lang, body.target_lang)
    return TranslationRequest(
        text=body.text,
        source_lang=source_lang,
        target_lang=target_lang,
        endpoint=body.resolved_endpoint,
        model=body.resolved_model,
    )


def _sse(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


@router.post("/translate", response_model=TranslationResult)
async def translate(body: TranslateRequest, pipeline: Pipeline, _auth: OptionalAuth):
    """Translate text and return the cleaned result."""
    try:
        return await pipeline.translate(_build_request(body))
    except TranslationError as e:
        raise to_http_exception(e) from e


@router.post("/translate/stream")
async def translate_stream(body: TranslateRequest, pipeline: Pipeline, _auth: OptionalAuth):
    """Stream a translation as Server-Sent Events.

    Emits ``translation-chunk`` events with the accumulated raw text, then a
    single ``translation-complete`` event with the cleaned translation. A
    failure ends the stream with one ``translation-error`` event instead.
    """
    request = _build_request(body)

    async def event_generator():
        try:
            async for event in pipeline.stream_events(request):
                name = COMPLETE_EVENT if isinstance(event, StreamCompleteEvent) else CHUNK_EVENT
                yield _sse(name, event.model_dump_json(by_alias=True))
        except TranslationError as e:
            logger.warning("Streamed translation failed: %s", e)
            payload = {"code": e.code, "message": e.message}
            yield _sse(ERROR_EVENT, json.dumps(payload, ensure_ascii=False))

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/summarize", response_model=SummarizeResult)
async def summarize(body: SummarizeRequest, pipeline: Pipeline, _auth: OptionalAuth):
    """Summarize text in its own language (7B+ models only)."""
    language = body.language or resolve_languages(body.text)[0]
    try:
        return await pipeline.summarize(
            body.text,
            language,
            body.resolved_endpoint,
            body.resolved_model,
        )
    except TranslationError as e:
        raise to_http_exception(e) from e


@router.post("/reply", response_model=ReplyResult)
async def reply(body: ReplyRequest, pipeline: Pipeline, _auth: OptionalAuth):
    """Draft a business reply with its translation (7B+ models only)."""
    try:
        return await pipeline.reply(
            body.text,
            body.language,
            body.source_language,
            body.resolved_endpoint,
            body.resolved_model,
        )
    except TranslationError as e:
        raise to_http_exception(e) from e


@router.post("/detect-language", response_model=DetectionResult)
async def detect(body: DetectLanguageRequest, _auth: OptionalAuth):
    """Detect whether text is Japanese or English."""
    return detect_language(body.text)
