"""Unit tests for request building and response validation."""
import base64

import pytest
from hypothesis import given
from hypothesis import strategies as st

from termchat.errors import ResponseValidationError
from termchat.llm import ImageAttachment, Message, Role, VisionChatOptions
from termchat.llm.models import ChatOptions
from termchat.llm.request import (
    attachment_to_content_part,
    build_chat_request,
    build_image_request,
    build_vision_request,
    file_to_data_url,
    is_supported_image,
    mime_type_from_extension,
    parse_file_attachment,
)
from termchat.llm.validation import (
    decode_json,
    validate_completion,
    validate_models,
    validate_stats,
)


class TestBuildChatRequest:
    """Tests for build_chat_request()."""

    def test_minimal_request_omits_sampling_fields(self):
        """Test that unset options are not sent."""
        payload = build_chat_request(
            "qwen/qwen3-32b",
            [Message(role=Role.USER, content="Hi")],
            stream=True,
        )

        assert payload == {
            "model": "qwen/qwen3-32b",
            "messages": [{"role": "user", "content": "Hi"}],
            "stream": True,
        }

    def test_explicit_options_are_included(self):
        """Test that set options are sent, including zero values."""
        payload = build_chat_request(
            "m",
            [Message(role=Role.SYSTEM, content="Be brief"), Message(role=Role.USER, content="Hi")],
            stream=False,
            temperature=0.0,
            max_tokens=64,
            top_p=0.9,
        )

        assert payload["stream"] is False
        assert payload["temperature"] == 0.0
        assert payload["max_tokens"] == 64
        assert payload["top_p"] == 0.9
        assert [m["role"] for m in payload["messages"]] == ["system", "user"]

    @given(st.text())
    def test_message_content_passes_through(self, content: str):
        """Property test: message content is sent unchanged."""
        payload = build_chat_request("m", [Message(role=Role.USER, content=content)], stream=False)
        assert payload["messages"][0]["content"] == content

    def test_chat_options_validate_ranges(self):
        """Test option bounds."""
        with pytest.raises(ValueError):
            ChatOptions(model="m", messages=[], temperature=3.0)
        with pytest.raises(ValueError):
            ChatOptions(model="m", messages=[], max_tokens=0)


class TestVisionRequest:
    """Tests for multi-part vision requests."""

    def test_vision_request_with_url_and_system_prompt(self):
        """Test content parts for a URL image."""
        options = VisionChatOptions(
            model="google/gemini-2.5-flash",
            prompt="Describe",
            system_prompt="You see images",
            images=[ImageAttachment(type="url", data="https://example.com/cat.png")],
        )

        payload = build_vision_request(options, stream=True)

        assert payload["stream"] is True
        assert "temperature" not in payload
        assert payload["messages"][0] == {"role": "system", "content": "You see images"}
        assert payload["messages"][1] == {
            "role": "user",
            "content": [
                {"type": "text", "text": "Describe"},
                {"type": "image_url", "image_url": {"url": "https://example.com/cat.png"}},
            ],
        }

    def test_file_attachment_becomes_data_url(self, tmp_path):
        """Test reading a local image into a base64 data URL."""
        image = tmp_path / "pic.JPG"
        image.write_bytes(b"\xff\xd8\xff")

        part = attachment_to_content_part(ImageAttachment(type="file", data=str(image)))

        assert part.image_url.url == "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8\xff").decode()

    def test_base64_attachment(self):
        """Test raw base64 data with and without a data URL prefix."""
        raw = attachment_to_content_part(ImageAttachment(type="base64", data="AAAA", mime_type="image/gif"))
        prefixed = attachment_to_content_part(ImageAttachment(type="base64", data="data:image/png;base64,BBBB"))

        assert raw.image_url.url == "data:image/gif;base64,AAAA"
        assert prefixed.image_url.url == "data:image/png;base64,BBBB"

    def test_missing_file_raises(self, tmp_path):
        """Test a file attachment that does not exist."""
        with pytest.raises(FileNotFoundError):
            file_to_data_url(tmp_path / "missing.png")

    def test_vision_options_require_an_image(self):
        """Test that a vision prompt needs at least one image."""
        with pytest.raises(ValueError):
            VisionChatOptions(model="m", prompt="p", images=[])


class TestImageHelpers:
    """Tests for image type detection, attachments and image requests."""

    @pytest.mark.parametrize("path,expected", [
        ("a.png", True), ("b.JPEG", True), ("c.webp", True), ("d.bmp", True),
        ("e.gif", True), ("f.txt", False), ("noext", False), ("g.svg", False),
    ])
    def test_is_supported_image(self, path, expected):
        """Test supported image extensions."""
        assert is_supported_image(path) is expected

    def test_mime_type_from_extension(self):
        """Test extension lookup with and without a dot."""
        assert mime_type_from_extension(".jpg") == "image/jpeg"
        assert mime_type_from_extension("PNG") == "image/png"
        assert mime_type_from_extension("tiff") is None

    @pytest.mark.parametrize("text,cleaned,path", [
        ("What is this? @file:cat.png", "What is this?", "cat.png"),
        ('@file:"my photos/dog.jpg" describe', "describe", "my photos/dog.jpg"),
        ("@file:'a b.gif'", "", "a b.gif"),
        ("no attachment here", "no attachment here", None),
    ])
    def test_parse_file_attachment(self, text, cleaned, path):
        """Test extracting @file references."""
        assert parse_file_attachment(text) == (cleaned, path)

    def test_build_image_request(self):
        """Test the image generation payload."""
        payload = build_image_request("google/gemini-2.5-flash-image-preview", "a fox")
        assert payload["modalities"] == ["image", "text"]
        assert payload["messages"] == [{"role": "user", "content": "a fox"}]

    def test_build_image_request_rejects_text_model(self):
        """Test that only image-generative models are accepted."""
        with pytest.raises(ValueError, match="does not support image generation"):
            build_image_request("qwen/qwen3-32b", "a fox")


class TestValidation:
    """Tests for full-response validation."""

    def test_valid_completion(self):
        """Test a well-formed completion."""
        completion = validate_completion({
            "id": "c1",
            "choices": [{"index": 0, "message": {"role": "assistant", "content": "Hi"}, "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 3, "completion_tokens": 1, "total_tokens": 4},
        })

        assert completion.choices[0].message.content == "Hi"
        assert completion.usage.total_tokens == 4

    @pytest.mark.parametrize("data", [
        {},
        {"choices": [], "usage": {}},
        {"choices": [{"message": {"role": "robot", "content": "x"}}], "usage": {}},
        {"choices": [{"message": {"role": "assistant"}}]},
        "not a dict",
    ])
    def test_malformed_completion_is_a_hard_failure(self, data):
        """Test that bad full responses raise."""
        with pytest.raises(ResponseValidationError):
            validate_completion(data)

    def test_models_and_stats(self):
        """Test catalog and usage payloads, ignoring unknown fields."""
        models = validate_models({"data": [{"id": "a", "owned_by": "x"}, {"id": "b", "context_length": 8192}]})
        stats = validate_stats({"totalRequests": 7, "totalTokens": 900, "extra": True})

        assert [m.id for m in models] == ["a", "b"]
        assert models[1].context_length == 8192
        assert stats.total_requests == 7
        assert stats.total_tokens == 900

    def test_bad_models_payload(self):
        """Test a catalog without a data list."""
        with pytest.raises(ResponseValidationError):
            validate_models({"models": []})

    def test_decode_json(self):
        """Test JSON decoding errors become validation errors."""
        assert decode_json('{"a": 1}') == {"a": 1}
        with pytest.raises(ResponseValidationError):
            decode_json("<html>")
