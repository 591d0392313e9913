"""Unit tests for SSE stream decoding."""
import json

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from termchat.llm.sse import SSELineBuffer, StreamAccumulator, decode_stream, extract_data_payload
from termchat.llm.validation import parse_chunk


def chunk_line(content: str | None = None, finish_reason: str | None = None) -> str:
    """Build one `data:` line carrying a streaming chunk."""
    delta = {} if content is None else {"content": content}
    chunk = {
        "id": "chatcmpl-1",
        "created": 1700000000,
        "model": "qwen/qwen3-32b",
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }
    return f"data: {json.dumps(chunk)}\n"


async def byte_stream(*reads: bytes):
    """Yield network reads as an async iterator."""
    for data in reads:
        yield data


def split_every(data: bytes, size: int) -> list[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


class TestDecodeStream:
    """Tests for decode_stream()."""

    @pytest.mark.asyncio
    async def test_fragments_delivered_in_order(self):
        """Test the callback sequence and the assembled content."""
        body = "".join([
            chunk_line("He"),
            chunk_line("llo"),
            chunk_line(""),
            chunk_line(" world"),
            "data: [DONE]\n",
        ]).encode()
        received: list[str] = []

        result = await decode_stream(byte_stream(body), on_content=received.append)

        assert received == ["He", "llo", " world"]
        assert result.content == "Hello world"

    @pytest.mark.asyncio
    async def test_malformed_chunk_is_skipped(self):
        """Test that a bad chunk between two good ones does not stop the stream."""
        body = (
            chunk_line("Good ")
            + 'data: {"id": "x", "choices": [\n'
            + "data: not json at all\n"
            + chunk_line("stream")
            + "data: [DONE]\n"
        ).encode()
        received: list[str] = []

        result = await decode_stream(byte_stream(body), on_content=received.append)

        assert received == ["Good ", "stream"]
        assert result.content == "Good stream"

    @pytest.mark.asyncio
    async def test_finish_reason_and_zero_usage(self):
        """Test that the last finish reason wins and usage is zeroed."""
        body = (
            chunk_line("a", finish_reason="length")
            + chunk_line(None, finish_reason="stop")
            + "data: [DONE]\n"
        ).encode()

        result = await decode_stream(byte_stream(body))

        assert result.finish_reason == "stop"
        assert result.usage.total_tokens == 0
        assert result.usage.prompt_tokens == 0

    @pytest.mark.asyncio
    async def test_finish_reason_defaults_to_unknown(self):
        """Test a stream that never reports a finish reason."""
        result = await decode_stream(byte_stream(chunk_line("x").encode()))
        assert result.finish_reason == "unknown"

    @pytest.mark.asyncio
    async def test_empty_stream(self):
        """Test that no data gives empty content."""
        result = await decode_stream(byte_stream())
        assert result.content == ""

    @pytest.mark.asyncio
    async def test_reads_split_mid_line_and_mid_character(self):
        """Test reads that cut through lines and multibyte characters."""
        body = (chunk_line("héllo ") + chunk_line("wörld 🌍") + "data: [DONE]\n").encode()
        received: list[str] = []

        result = await decode_stream(byte_stream(*split_every(body, 3)), on_content=received.append)

        assert received == ["héllo ", "wörld 🌍"]
        assert result.content == "héllo wörld 🌍"

    @pytest.mark.asyncio
    async def test_residual_line_without_newline(self):
        """Test that a final chunk without a trailing newline is still decoded."""
        body = (chunk_line("first ") + chunk_line("last").rstrip("\n")).encode()
        result = await decode_stream(byte_stream(body))
        assert result.content == "first last"

    @pytest.mark.asyncio
    async def test_crlf_and_comment_lines(self):
        """Test CRLF line endings and non-data lines."""
        body = (
            ": keep-alive\r\n"
            + "event: message\r\n"
            + chunk_line("ok").replace("\n", "\r\n")
            + "\r\n"
            + "data: [DONE]\r\n"
        ).encode()
        result = await decode_stream(byte_stream(body))
        assert result.content == "ok"

    @pytest.mark.asyncio
    async def test_chunk_callback_sees_every_decoded_chunk(self):
        """Test on_chunk receives chunks, including ones without content."""
        body = (chunk_line("a") + chunk_line(None, finish_reason="stop")).encode()
        chunks = []

        await decode_stream(byte_stream(body), on_chunk=chunks.append)

        assert len(chunks) == 2
        assert chunks[1].choices[0].finish_reason == "stop"

    @settings(max_examples=50)
    @given(
        fragments=st.lists(st.text(min_size=1, max_size=8), max_size=10),
        read_size=st.integers(min_value=1, max_value=64),
    )
    @pytest.mark.asyncio
    async def test_content_is_concatenation_of_callbacks(self, fragments, read_size):
        """Property test: content equals the ordered concatenation of fragments."""
        body = ("".join(chunk_line(f) for f in fragments) + "data: [DONE]\n").encode()
        received: list[str] = []

        result = await decode_stream(byte_stream(*split_every(body, read_size)), on_content=received.append)

        assert received == fragments
        assert result.content == "".join(fragments)


class TestSSELineBuffer:
    """Tests for SSELineBuffer."""

    def test_partial_line_is_held(self):
        """Test that only complete lines are released."""
        buffer = SSELineBuffer()
        assert buffer.feed(b"data: ab") == []
        assert buffer.feed(b"c\ndata: d") == ["data: abc"]
        assert buffer.flush() == ["data: d"]

    def test_long_line_over_many_reads(self):
        """Test a line assembled from many reads without a newline."""
        buffer = SSELineBuffer()
        payload = "data: " + "x" * 5000

        released = [line for byte in payload.encode() for line in buffer.feed(bytes([byte]))]

        assert released == []
        assert buffer.feed(b"\r\ndata: next\n") == [payload, "data: next"]
        assert buffer.flush() == []

    def test_several_lines_in_one_read(self):
        """Test a read that completes a held line and carries more."""
        buffer = SSELineBuffer()
        buffer.feed(b"data: 1")
        assert buffer.feed(b"\ndata: 2\n\ndata: 3") == ["data: 1", "data: 2", ""]
        assert buffer.flush() == ["data: 3"]

    def test_flush_empty(self):
        """Test flushing with nothing buffered."""
        assert SSELineBuffer().flush() == []


class TestHelpers:
    """Tests for payload extraction and chunk parsing."""

    @pytest.mark.parametrize("line,expected", [
        ('data: {"a": 1}', '{"a": 1}'),
        ("  data: {}  ", "{}"),
        ("data: [DONE]", None),
        ("", None),
        ("event: ping", None),
        ("data: ", None),
    ])
    def test_extract_data_payload(self, line, expected):
        """Test which lines carry a payload."""
        assert extract_data_payload(line) == expected

    def test_parse_chunk_rejects_bad_payloads(self):
        """Test that invalid JSON and wrong shapes yield None."""
        assert parse_chunk("{") is None
        assert parse_chunk('{"choices": []}') is None
        assert parse_chunk(chunk_line("x")[len("data: "):]) is not None

    def test_accumulator_ignores_chunks_without_choices(self):
        """Test a chunk with an empty choices list."""
        accumulator = StreamAccumulator()
        chunk = parse_chunk('{"id": "1", "created": 1, "model": "m", "choices": []}')

        assert accumulator.add(chunk) is None
        assert accumulator.result().content == ""
