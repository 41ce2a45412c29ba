"""Shared helpers for tests that talk to a mocked Ollama runtime."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, Iterable, List

import httpx

from popup_translator.core.translation.models import Language, TranslationRequest
from popup_translator.core.translation.pipeline import OllamaGateway

ENDPOINT = "http://ollama.test:11434"


def chat_body(content: str) -> dict[str, Any]:
    return {"model": "m", "message": {"role": "assistant", "content": content}, "done": True}


def ndjson_lines(contents: Iterable[str], done: bool = True) -> List[bytes]:
    """One NDJSON line per content fragment, plus a terminal fragment."""
    lines = [
        json.dumps({"message": {"role": "assistant", "content": c}, "done": False}, ensure_ascii=False)
        for c in contents
    ]
    if done:
        lines.append(json.dumps({"message": {"role": "assistant", "content": ""}, "done": True}))
    return [(line + "\n").encode("utf-8") for line in lines]


async def byte_stream(parts: Iterable[bytes]):
    for part in parts:
        yield part


def make_request(
    text: str = "こんにちは",
    source: Language = Language.JAPANESE,
    target: Language = Language.ENGLISH,
    model: str = "qwen2.5:3b",
    endpoint: str = ENDPOINT,
) -> TranslationRequest:
    return TranslationRequest(
        text=text,
        source_lang=source,
        target_lang=target,
        endpoint=endpoint,
        model=model,
    )


class Recorder:
    """MockTransport handler that records requests and replays a handler."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def payloads(self) -> List[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.content]


def make_gateway(recorder: Recorder) -> OllamaGateway:
    transport = httpx.MockTransport(recorder)
    return OllamaGateway(
        httpx.AsyncClient(transport=transport),
        keep_alive="10m",
        request_timeout=5.0,
        health_check_timeout=1.0,
        health_transport=transport,
    )


def run_gateway(recorder: Recorder, fn: Callable[[OllamaGateway], Awaitable[Any]]) -> Any:
    async def main():
        gateway = make_gateway(recorder)
        try:
            return await fn(gateway)
        finally:
            await gateway.client.aclose()

    return asyncio.run(main())



def chat_recorder(content: str) -> Recorder:
    """Recorder answering every call with a fixed chat response."""
    return Recorder(lambda request: httpx.Response(200, json=chat_body(content)))
