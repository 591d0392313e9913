from .base import LLMProvider
from .factory import create_llm_provider
from .models import (
    ChatOptions,
    ChatResult,
    ImageAttachment,
    Message,
    ModelInfo,
    Role,
    StreamingChunk,
    Usage,
    UsageStats,
    VisionChatOptions,
)
from .providers import OpenAICompatibleProvider
from .sse import decode_stream

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "ChatOptions",
    "ChatResult",
    "ImageAttachment",
    "Message",
    "ModelInfo",
    "Role",
    "StreamingChunk",
    "Usage",
    "UsageStats",
    "VisionChatOptions",
    "OpenAICompatibleProvider",
    "decode_stream",
]
