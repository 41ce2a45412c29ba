"""Incremental decoding of streamed chat responses.

The runtime streams newline-delimited JSON objects
``{"message": {"content": ...}, "done": bool}``. Transport fragments do not
have to line up with object boundaries, so the decoder buffers bytes until
a newline and parses complete lines only. Lines that do not match the
fragment shape are skipped: partial or malformed lines are noise, not
call-ending errors.
"""

import logging
import math
import time
from typing import AsyncIterator, Callable, Iterable, Iterator, List, Optional, Union

from pydantic import ValidationError

from ..models.prompt import PromptBundle
from ..models.response import StreamChunkEvent, StreamCompleteEvent, StreamFragment
from .llm_gateway import OllamaGateway
from .output_processor import OutputProcessor

logger = logging.getLogger(__name__)

StreamEvent = Union[StreamChunkEvent, StreamCompleteEvent]
ChunkListener = Callable[[StreamChunkEvent], None]
CompleteListener = Callable[[StreamCompleteEvent], None]

# Upper bound for one NDJSON line; real fragments are far smaller
MAX_LINE_BYTES = 1024 * 1024


def elapsed_ms(start: float) -> int:
    """Milliseconds since ``start`` (a perf_counter value), rounded up."""
    return max(0, math.ceil((time.perf_counter() - start) * 1000))


class StreamDecoder:
    """Turns raw byte fragments into parsed stream fragments.

    A line longer than ``max_line_bytes`` is dropped up to its newline so a
    runtime that never terminates a line cannot grow the buffer unbounded.
    """

    def __init__(self, max_line_bytes: int = MAX_LINE_BYTES) -> None:
        self.max_line_bytes = max_line_bytes
        self._buffer = bytearray()
        self._overflowed = False

    def feed(self, data: bytes) -> List[StreamFragment]:
        """Add bytes and return every fragment completed by them."""
        pieces = data.split(b"\n")
        lines: List[bytes] = []
        if len(pieces) > 1:
            if self._overflowed:
                self._overflowed = False
            else:
                lines.append(bytes(self._buffer) + pieces[0])
            self._buffer.clear()
            lines.extend(pieces[1:-1])
        self._append(pieces[-1])
        return [f for f in (self._parse(line) for line in lines) if f is not None]

    def flush(self) -> List[StreamFragment]:
        """Parse whatever is left once the body has ended."""
        rest = bytes(self._buffer)
        self._buffer.clear()
        if self._overflowed:
            self._overflowed = False
            return []
        fragment = self._parse(rest)
        return [fragment] if fragment is not None else []

    def _append(self, data: bytes) -> None:
        if self._overflowed:
            return
        self._buffer += data
        if len(self._buffer) > self.max_line_bytes:
            logger.warning("Dropping stream line longer than %d bytes", self.max_line_bytes)
            self._buffer.clear()
            self._overflowed = True

    def _parse(self, line: bytes) -> Optional[StreamFragment]:
        text = line.decode("utf-8", errors="replace").strip()
        if not text:
            return None
        try:
            return StreamFragment.model_validate_json(text)
        except ValidationError:
            logger.debug("Skipping unparseable stream line: %.80s", text)
            return None


class _Accumulator:
    """Running text of one stream; stops at the first terminal fragment."""

    def __init__(self) -> None:
        self.text = ""
        self.finished = False

    def consume(self, fragments: Iterable[StreamFragment]) -> Iterator[StreamChunkEvent]:
        for fragment in fragments:
            if self.finished:
                return
            content = fragment.message.content if fragment.message else ""
            if content:
                self.text += content
                yield StreamChunkEvent(chunk=content, accumulated=self.text, done=fragment.done)
            if fragment.done:
                self.finished = True


class StreamDispatcher:
    """Consumes one streamed call and emits ordered events.

    For one call the sequence is: zero or more chunk events with strictly
    growing ``accumulated``, then exactly one completion event, unless the
    transport fails, in which case the error propagates and no completion
    event is emitted.
    """

    def __init__(
        self,
        gateway: OllamaGateway,
        output_processor: Optional[OutputProcessor] = None,
    ):
        self.gateway = gateway
        self.output_processor = output_processor or OutputProcessor()

    async def events(
        self,
        bundle: PromptBundle,
        source_text: str,
        start: Optional[float] = None,
    ) -> AsyncIterator[StreamEvent]:
        """Yield chunk events and the final completion event.

        Args:
            bundle: Prompt bundle to send
            source_text: Original text, for output cleaning
            start: perf_counter value the duration is measured from

        Yields:
            StreamChunkEvent per content fragment, then one StreamCompleteEvent

        Raises:
            TranslationError: Transport failure before or during the stream
        """
        start = time.perf_counter() if start is None else start
        decoder = StreamDecoder()
        accumulator = _Accumulator()

        async with self.gateway.open_stream(bundle) as fragments:
            async for data in fragments:
                for event in accumulator.consume(decoder.feed(data)):
                    yield event
                if accumulator.finished:
                    break
            else:
                # Body ended without a terminal fragment
                for event in accumulator.consume(decoder.flush()):
                    yield event

        duration_ms = elapsed_ms(start)
        logger.info(
            "Stream finished: model=%s, chars=%d, duration=%dms, terminal=%s",
            bundle.model,
            len(accumulator.text),
            duration_ms,
            accumulator.finished,
        )
        yield StreamCompleteEvent(
            translated_text=self.output_processor.clean(accumulator.text, source_text),
            duration_ms=duration_ms,
        )

    async def run(
        self,
        bundle: PromptBundle,
        source_text: str,
        on_chunk: ChunkListener,
        on_complete: CompleteListener,
        start: Optional[float] = None,
    ) -> None:
        """Consume the stream, dispatching events to the listeners."""
        async for event in self.events(bundle, source_text, start=start):
            if isinstance(event, StreamCompleteEvent):
                on_complete(event)
            else:
                on_chunk(event)
