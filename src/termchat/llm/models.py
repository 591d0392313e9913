from collections.abc import Callable
from enum import Enum
from typing import Annotated, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Author of a chat message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """Represents a chat message in a conversation."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: Role = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")


# ---------------------------------------------------------------------------
# Vision content parts
# ---------------------------------------------------------------------------


class TextContentPart(BaseModel):
    """Plain text part of a multi-part message."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ImageUrl(BaseModel):
    """Image reference; either a public URL or a base64 data URL."""

    model_config = ConfigDict(frozen=True)

    url: str


class ImageUrlContentPart(BaseModel):
    """Image part of a multi-part message."""

    model_config = ConfigDict(frozen=True)

    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl


ContentPart = Annotated[TextContentPart | ImageUrlContentPart, Field(discriminator="type")]


class VisionMessage(BaseModel):
    """Message whose content may be a string or a list of content parts."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: Role
    content: str | list[ContentPart]


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class Usage(BaseModel):
    """Token usage reported by the service."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Delta(BaseModel):
    """Incremental message fragment carried by one streaming chunk."""

    role: str | None = None
    content: str | None = None


class ChunkChoice(BaseModel):
    index: int = 0
    delta: Delta
    finish_reason: str | None = None


class StreamingChunk(BaseModel):
    """One decoded `data:` event of a streamed completion."""

    id: str
    created: int
    model: str
    choices: list[ChunkChoice]


class ResponseMessage(BaseModel):
    role: Role
    content: str | None = None


class ResponseChoice(BaseModel):
    index: int = 0
    message: ResponseMessage
    finish_reason: str | None = None


class ChatCompletionsResponse(BaseModel):
    """Full (non-streaming) chat completion payload."""

    id: str | None = None
    object: str | None = None
    created: int | None = None
    model: str | None = None
    choices: list[ResponseChoice] = Field(min_length=1)
    usage: Usage


class ChatResult(BaseModel):
    """Assembled result of one completion call."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Fully assembled assistant content")
    usage: Usage = Field(default_factory=Usage)
    finish_reason: str = Field(default="unknown", description="Why generation stopped")


# ---------------------------------------------------------------------------
# Request options
# ---------------------------------------------------------------------------


class ChatOptions(BaseModel):
    """Options for a chat completion request.

    Sampling parameters left as None are omitted from the request so the
    service applies its own defaults.
    """

    model: str
    messages: list[Message]
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=1)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)


class ImageAttachment(BaseModel):
    """An image to send along with a vision prompt.

    - url: `data` is a public URL
    - file: `data` is a local path
    - base64: `data` is base64 (with or without a data URL prefix)
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["url", "file", "base64"]
    data: str
    mime_type: str | None = None
    filename: str | None = None


class VisionChatOptions(BaseModel):
    """Options for a vision chat request."""

    model: str
    prompt: str
    images: list[ImageAttachment] = Field(min_length=1)
    system_prompt: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=1)


# ---------------------------------------------------------------------------
# Catalog, stats, images
# ---------------------------------------------------------------------------


class ModelInfo(BaseModel):
    """Entry of the model catalog. Unknown catalog fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str | None = None
    description: str | None = None
    context_length: int | None = None


class ModelsResponse(BaseModel):
    data: list[ModelInfo]


class UsageStats(BaseModel):
    """Aggregate account usage reported by the stats endpoint."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    total_requests: int = Field(
        default=0, validation_alias=AliasChoices("totalRequests", "total_requests")
    )
    total_tokens: int = Field(
        default=0, validation_alias=AliasChoices("totalTokens", "total_tokens")
    )


class GeneratedImage(BaseModel):
    url: str
    saved_path: str | None = None


class ImageGenerationResult(BaseModel):
    success: bool
    text_content: str = ""
    images: list[GeneratedImage] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)
    error: str | None = None


ContentCallback = Callable[[str], None]
ChunkCallback = Callable[[StreamingChunk], None]
