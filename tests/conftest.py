"""Pytest configuration and shared fixtures."""
from pathlib import Path

import pytest

from termchat.commands import CommandContext
from termchat.llm import ChatResult, LLMProvider, ModelInfo, Usage, UsageStats
from termchat.llm.models import GeneratedImage, ImageGenerationResult
from termchat.storage import create_chat_store


class FakeLLM(LLMProvider):
    """Scripted LLM provider recording what it was asked."""

    def __init__(
        self,
        fragments: list[str] | None = None,
        models: list[str] | None = None,
        stats: UsageStats | None = None,
    ):
        self.fragments = fragments if fragments is not None else ["Hello", " there"]
        self.models = models if models is not None else ["qwen/qwen3-32b", "google/gemini-2.5-flash"]
        self.stats = stats or UsageStats(total_requests=3, total_tokens=120)
        self.fail_with: Exception | None = None
        # Awaited between streamed fragments
        self.between_fragments = None
        self.chat_calls: list = []
        self.vision_calls: list = []
        self.image_calls: list = []
        self.closed = False

    async def chat(self, options):
        self.chat_calls.append(options)
        if self.fail_with:
            raise self.fail_with
        return ChatResult(
            content="".join(self.fragments),
            usage=Usage(prompt_tokens=4, completion_tokens=6, total_tokens=10),
            finish_reason="stop",
        )

    async def chat_stream(self, options, on_content=None, on_chunk=None):
        self.chat_calls.append(options)
        if self.fail_with:
            raise self.fail_with
        for index, fragment in enumerate(self.fragments):
            if index and self.between_fragments is not None:
                await self.between_fragments()
            if fragment and on_content is not None:
                on_content(fragment)
        return ChatResult(content="".join(self.fragments), finish_reason="stop")

    async def vision_chat(self, options, on_content=None):
        self.vision_calls.append(options)
        if self.fail_with:
            raise self.fail_with
        if on_content is not None:
            on_content("A cat")
        return ChatResult(content="A cat", finish_reason="stop")

    async def get_models(self):
        if self.fail_with:
            raise self.fail_with
        return [ModelInfo(id=model_id) for model_id in self.models]

    async def get_stats(self):
        if self.fail_with:
            raise self.fail_with
        return self.stats

    async def generate_image(self, prompt, model=None, save_dir=None):
        self.image_calls.append(prompt)
        return ImageGenerationResult(
            success=True,
            text_content="Here it is",
            images=[GeneratedImage(url="data:image/png;base64,AAAA", saved_path="/tmp/image_1_0.png")],
        )

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_llm():
    """Return a scripted LLM provider."""
    return FakeLLM()


@pytest.fixture
def store():
    """Return an in-memory chat store."""
    return create_chat_store("memory")


@pytest.fixture
def export_dir(tmp_path) -> Path:
    """Return a directory for chat exports."""
    return tmp_path / "exports"


@pytest.fixture
def make_context(fake_llm, store, export_dir):
    """Build a CommandContext, overriding any field."""
    def _make(**overrides):
        fields = {
            "current_model": "qwen/qwen3-32b",
            "current_chat_id": None,
            "current_chat_title": "New Chat",
            "messages": (),
            "total_tokens": 0,
            "llm": fake_llm,
            "store": store,
            "export_dir": export_dir,
        }
        fields.update(overrides)
        return CommandContext(**fields)

    return _make


@pytest.fixture
def context(make_context):
    """Return a CommandContext with no active chat."""
    return make_context()
