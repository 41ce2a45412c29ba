import asyncio
import json

import httpx
import pytest

from popup_translator.core.translation.errors import ApiError, ConnectionFailed
from popup_translator.core.translation.models import StreamChunkEvent, StreamCompleteEvent, TaskKind
from popup_translator.core.translation.pipeline import PromptEngine, StreamDecoder, StreamDispatcher, classify

from helpers import Recorder, byte_stream, make_gateway, make_request, ndjson_lines


def _collect(recorder: Recorder, source_text: str = "こんにちは"):
    request = make_request(text=source_text)
    bundle = PromptEngine.build(TaskKind.TRANSLATE, request, classify(request.model))

    async def main():
        gateway = make_gateway(recorder)
        try:
            return [event async for event in StreamDispatcher(gateway).events(bundle, source_text)]
        finally:
            await gateway.client.aclose()

    return asyncio.run(main())


def test_decoder_buffers_until_newline():
    line = json.dumps({"message": {"content": "こんにちは"}, "done": False}, ensure_ascii=False)
    data = (line + "\n").encode("utf-8")
    decoder = StreamDecoder()

    # split inside a multi-byte character
    assert decoder.feed(data[:26]) == []
    fragments = decoder.feed(data[26:])
    assert len(fragments) == 1
    assert fragments[0].message.content == "こんにちは"


def test_decoder_skips_garbage_and_flushes_tail():
    decoder = StreamDecoder()
    fragments = decoder.feed(b'not json\n{"done": false, "message": {"content": "a"}}\n{"done": true}')
    assert [f.message.content for f in fragments] == ["a"]
    tail = decoder.flush()
    assert len(tail) == 1 and tail[0].done
    assert decoder.flush() == []


def test_chunks_accumulate_in_order_then_complete():
    recorder = Recorder(lambda request: httpx.Response(200, content=byte_stream(ndjson_lines(["Hel", "lo", "!"]))))
    events = _collect(recorder)

    chunks = [e for e in events if isinstance(e, StreamChunkEvent)]
    assert [c.chunk for c in chunks] == ["Hel", "lo", "!"]
    assert [c.accumulated for c in chunks] == ["Hel", "Hello", "Hello!"]
    assert isinstance(events[-1], StreamCompleteEvent)
    assert sum(isinstance(e, StreamCompleteEvent) for e in events) == 1
    assert events[-1].translated_text == "Hello!"
    assert events[-1].duration_ms >= 1
    assert recorder.payloads[0]["stream"] is True


def test_fragments_split_across_transport_boundaries():
    body = b"".join(ndjson_lines(["Good ", "morning"]))
    parts = [body[i:i + 7] for i in range(0, len(body), 7)]
    recorder = Recorder(lambda request: httpx.Response(200, content=byte_stream(parts)))

    events = _collect(recorder)
    assert [e.accumulated for e in events[:-1]] == ["Good ", "Good morning"]
    assert events[-1].translated_text == "Good morning"


def test_completion_text_is_cleaned():
    lines = ndjson_lines(['"Trans', 'lation: Hi"'])
    recorder = Recorder(lambda request: httpx.Response(200, content=byte_stream(lines)))

    events = _collect(recorder)
    assert events[-2].accumulated == '"Translation: Hi"'
    assert events[-1].translated_text == "Hi"


def test_body_ending_without_done_still_completes():
    lines = ndjson_lines(["partial"], done=False)
    recorder = Recorder(lambda request: httpx.Response(200, content=byte_stream(lines)))

    events = _collect(recorder)
    assert isinstance(events[-1], StreamCompleteEvent)
    assert events[-1].translated_text == "partial"


def test_fragments_after_done_are_ignored():
    lines = ndjson_lines(["one"]) + ndjson_lines(["two"])
    recorder = Recorder(lambda request: httpx.Response(200, content=byte_stream(lines)))

    events = _collect(recorder)
    assert [e.chunk for e in events if isinstance(e, StreamChunkEvent)] == ["one"]


def test_mid_stream_failure_raises_without_completion():
    async def broken():
        yield ndjson_lines(["Hel"], done=False)[0]
        raise httpx.ReadError("connection reset")

    recorder = Recorder(lambda request: httpx.Response(200, content=broken()))
    request = make_request()
    bundle = PromptEngine.build(TaskKind.TRANSLATE, request, classify(request.model))
    seen = []

    async def main():
        gateway = make_gateway(recorder)
        try:
            async for event in StreamDispatcher(gateway).events(bundle, request.text):
                seen.append(event)
        finally:
            await gateway.client.aclose()

    with pytest.raises(ConnectionFailed):
        asyncio.run(main())
    assert [e.chunk for e in seen] == ["Hel"]
    assert not any(isinstance(e, StreamCompleteEvent) for e in seen)


def test_non_success_status_fails_before_any_chunk():
    recorder = Recorder(lambda request: httpx.Response(404, text="model not found"))

    with pytest.raises(ApiError) as exc_info:
        _collect(recorder)
    assert "404" in exc_info.value.message
    assert "model not found" in exc_info.value.message


def test_run_dispatches_to_listeners():
    recorder = Recorder(lambda request: httpx.Response(200, content=byte_stream(ndjson_lines(["a", "b"]))))
    request = make_request()
    bundle = PromptEngine.build(TaskKind.TRANSLATE, request, classify(request.model))
    chunks, completions = [], []

    async def main():
        gateway = make_gateway(recorder)
        try:
            await StreamDispatcher(gateway).run(bundle, request.text, chunks.append, completions.append)
        finally:
            await gateway.client.aclose()

    asyncio.run(main())
    assert [c.accumulated for c in chunks] == ["a", "ab"]
    assert len(completions) == 1
    assert completions[0].translated_text == "ab"


def test_oversized_line_is_dropped_up_to_newline():
    decoder = StreamDecoder(max_line_bytes=16)
    for _ in range(10):
        assert decoder.feed(b"xxxxxxxx") == []
    fragments = decoder.feed(b'tail\n{"done": false, "message": {"content": "ok"}}\n')
    assert [f.message.content for f in fragments] == ["ok"]

    decoder.feed(b"y" * 40)
    assert decoder.flush() == []


class _HangingBody(httpx.AsyncByteStream):
    """Body that sends one line and then never ends."""

    def __init__(self, first: bytes):
        self.first = first
        self.closed = False

    async def __aiter__(self):
        yield self.first
        await asyncio.Event().wait()

    async def aclose(self):
        self.closed = True


def test_cancelled_consumer_closes_upstream_response():
    body = _HangingBody(ndjson_lines(["Hel"], done=False)[0])
    recorder = Recorder(lambda request: httpx.Response(200, stream=body))
    request = make_request()
    bundle = PromptEngine.build(TaskKind.TRANSLATE, request, classify(request.model))
    seen = []

    async def main():
        gateway = make_gateway(recorder)
        first_chunk = asyncio.Event()

        async def consume():
            async for event in StreamDispatcher(gateway).events(bundle, request.text):
                seen.append(event)
                first_chunk.set()

        task = asyncio.create_task(consume())
        try:
            await asyncio.wait_for(first_chunk.wait(), timeout=5)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
        finally:
            await gateway.client.aclose()

    asyncio.run(main())
    assert [e.chunk for e in seen] == ["Hel"]
    assert body.closed
