from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from .models import (
    ChatOptions,
    ChatResult,
    ChunkCallback,
    ContentCallback,
    ImageGenerationResult,
    ModelInfo,
    UsageStats,
    VisionChatOptions,
)


class LLMProvider(ABC):
    """Abstract base class for chat service providers.

    This module hides the design decision of which service answers prompts.
    Implementations must handle provider-specific details like:
    - Client setup and authentication
    - Request/response format conversion
    - Stream decoding
    - Error reporting

    Supports async context manager protocol for proper resource cleanup:
        async with provider:
            result = await provider.chat(options)
        # Automatically cleaned up
    """

    @abstractmethod
    async def chat(self, options: ChatOptions) -> ChatResult:
        """Generate a chat completion in a single round trip.

        Raises:
            ChatAPIError: On a non-2xx response
            ResponseValidationError: If the response is malformed
        """

    @abstractmethod
    async def chat_stream(
        self,
        options: ChatOptions,
        on_content: ContentCallback | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> ChatResult:
        """Generate a streaming chat completion.

        Args:
            options: Model, messages and sampling parameters
            on_content: Called with each incremental text fragment
            on_chunk: Called with each decoded streaming chunk

        Returns:
            ChatResult with the assembled content; usage is zeroed

        Raises:
            ChatAPIError: On a non-2xx response
        """

    @abstractmethod
    async def vision_chat(
        self,
        options: VisionChatOptions,
        on_content: ContentCallback | None = None,
    ) -> ChatResult:
        """Send a prompt with images to a vision-capable model.

        Streams when on_content is given, otherwise performs one round trip.
        """

    @abstractmethod
    async def get_models(self) -> list[ModelInfo]:
        """Fetch the model catalog."""

    @abstractmethod
    async def get_stats(self) -> UsageStats:
        """Fetch aggregate account usage."""

    @abstractmethod
    async def generate_image(
        self,
        prompt: str,
        model: str | None = None,
        save_dir: Path | None = None,
    ) -> ImageGenerationResult:
        """Generate images from a prompt, optionally saving them to disk."""

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "LLMProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
