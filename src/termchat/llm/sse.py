"""Server-Sent-Events decoding for streamed chat completions.

Hides how a byte stream of `data: <json>` lines becomes an ordered sequence
of content fragments and a final ChatResult:
- network reads are not aligned with line boundaries
- UTF-8 characters may be split across reads
- malformed or truncated chunks are skipped, never fatal
"""

import codecs
from collections.abc import AsyncIterable

from .models import ChatResult, ChunkCallback, ContentCallback, StreamingChunk, Usage
from .validation import parse_chunk

SSE_DATA_PREFIX = "data: "
SSE_DONE = "[DONE]"


class SSELineBuffer:
    """Turns arbitrary byte reads into complete text lines.

    Only complete lines are released; the trailing partial segment stays
    buffered until the next read or `flush()`.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending: list[str] = []

    def feed(self, data: bytes) -> list[str]:
        """Add bytes from one network read and return the completed lines."""
        text = self._decoder.decode(data)
        if "\n" not in text:
            if text:
                self._pending.append(text)
            return []

        *lines, tail = text.split("\n")
        lines[0] = "".join(self._pending) + lines[0]
        self._pending = [tail] if tail else []
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> list[str]:
        """Return the residual unterminated line at end of stream, if any."""
        self._pending.append(self._decoder.decode(b"", final=True))
        residual = "".join(self._pending).rstrip("\r")
        self._pending = []
        return [residual] if residual else []


class StreamAccumulator:
    """Assembles content and finish reason from decoded chunks."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._finish_reason: str | None = None

    def add(self, chunk: StreamingChunk) -> str | None:
        """Record one chunk.

        Returns:
            The chunk's non-empty content fragment, or None
        """
        if not chunk.choices:
            return None
        choice = chunk.choices[0]
        if choice.finish_reason:
            self._finish_reason = choice.finish_reason

        fragment = choice.delta.content
        if not fragment:
            return None
        self._parts.append(fragment)
        return fragment

    @property
    def content(self) -> str:
        return "".join(self._parts)

    def result(self) -> ChatResult:
        # Usage is not reported incrementally by this protocol
        return ChatResult(
            content=self.content,
            usage=Usage(),
            finish_reason=self._finish_reason or "unknown",
        )


def extract_data_payload(line: str) -> str | None:
    """Return the JSON payload of a `data:` line, or None for lines to ignore."""
    stripped = line.strip()
    if not stripped or not stripped.startswith(SSE_DATA_PREFIX):
        return None
    payload = stripped[len(SSE_DATA_PREFIX):].strip()
    if not payload or payload == SSE_DONE:
        return None
    return payload


async def decode_stream(
    byte_chunks: AsyncIterable[bytes],
    on_content: ContentCallback | None = None,
    on_chunk: ChunkCallback | None = None,
) -> ChatResult:
    """Consume an SSE byte stream and assemble the completion.

    Args:
        byte_chunks: Raw network reads, in arrival order
        on_content: Called with each non-empty content fragment (never the
            cumulative string)
        on_chunk: Called with every successfully decoded chunk

    Returns:
        ChatResult whose content is the ordered concatenation of every
        fragment passed to on_content
    """
    lines = SSELineBuffer()
    accumulator = StreamAccumulator()

    def handle(line: str) -> None:
        payload = extract_data_payload(line)
        if payload is None:
            return
        chunk = parse_chunk(payload)
        if chunk is None:
            return
        if on_chunk is not None:
            on_chunk(chunk)
        fragment = accumulator.add(chunk)
        if fragment is not None and on_content is not None:
            on_content(fragment)

    async for data in byte_chunks:
        for line in lines.feed(data):
            handle(line)
    for line in lines.flush():
        handle(line)

    return accumulator.result()
