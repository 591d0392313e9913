"""Outbound request payload construction.

Hides the wire shape of chat, vision and image-generation requests and the
encoding of image attachments into content parts.
"""

import base64
import re
from pathlib import Path
from typing import Any

from ..config import IMAGE_GENERATIVE_MODELS
from .models import (
    ContentPart,
    ImageAttachment,
    ImageUrl,
    ImageUrlContentPart,
    Message,
    Role,
    TextContentPart,
    VisionChatOptions,
    VisionMessage,
)

SUPPORTED_IMAGE_MIME_TYPES = frozenset({
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/gif",
    "image/webp",
    "image/bmp",
})

_MIME_BY_EXTENSION = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
}

_EXTENSION_BY_MIME = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/bmp": "bmp",
}

# Tried in order: double-quoted, single-quoted, bare path
_FILE_ATTACHMENT_PATTERNS = (
    re.compile(r'@file:"([^"]+)"'),
    re.compile(r"@file:'([^']+)'"),
    re.compile(r"@file:(\S+)"),
)


def _with_optional(payload: dict[str, Any], **optional: Any) -> dict[str, Any]:
    for key, value in optional.items():
        if value is not None:
            payload[key] = value
    return payload


def build_chat_request(
    model: str,
    messages: list[Message],
    *,
    stream: bool,
    temperature: float | None = None,
    max_tokens: int | None = None,
    top_p: float | None = None,
) -> dict[str, Any]:
    """Build a chat completions request body.

    Optional sampling fields are included only when set.
    """
    payload: dict[str, Any] = {
        "model": model,
        "messages": [message.model_dump(mode="json") for message in messages],
        "stream": stream,
    }
    return _with_optional(payload, temperature=temperature, max_tokens=max_tokens, top_p=top_p)


def mime_type_from_extension(extension: str) -> str | None:
    """Map a file extension (with or without the dot) to an image MIME type."""
    return _MIME_BY_EXTENSION.get(extension.lower().lstrip("."))


def extension_from_mime_type(mime_type: str) -> str | None:
    return _EXTENSION_BY_MIME.get(mime_type.lower())


def is_supported_image(path: str | Path) -> bool:
    """Check if a file path points to a supported image type."""
    mime_type = mime_type_from_extension(Path(path).suffix)
    return mime_type is not None and mime_type in SUPPORTED_IMAGE_MIME_TYPES


def file_to_data_url(path: str | Path) -> str:
    """Read an image file and encode it as a base64 data URL.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    file_path = Path(path).expanduser()
    if not file_path.is_absolute():
        file_path = Path.cwd() / file_path
    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    encoded = base64.b64encode(file_path.read_bytes()).decode("ascii")
    mime_type = mime_type_from_extension(file_path.suffix) or "image/png"
    return f"data:{mime_type};base64,{encoded}"


def attachment_to_content_part(attachment: ImageAttachment) -> ImageUrlContentPart:
    """Convert an image attachment to an `image_url` content part."""
    if attachment.type == "url":
        url = attachment.data
    elif attachment.type == "file":
        url = file_to_data_url(attachment.data)
    elif attachment.data.startswith("data:"):
        url = attachment.data
    else:
        mime_type = attachment.mime_type or "image/png"
        url = f"data:{mime_type};base64,{attachment.data}"
    return ImageUrlContentPart(image_url=ImageUrl(url=url))


def build_vision_messages(options: VisionChatOptions) -> list[VisionMessage]:
    """Build the message list for a vision request.

    An optional system prompt comes first, then a single user message whose
    content is the text prompt followed by one image part per attachment.
    """
    messages: list[VisionMessage] = []
    if options.system_prompt:
        messages.append(VisionMessage(role=Role.SYSTEM, content=options.system_prompt))

    parts: list[ContentPart] = [TextContentPart(text=options.prompt)]
    parts.extend(attachment_to_content_part(image) for image in options.images)
    messages.append(VisionMessage(role=Role.USER, content=parts))
    return messages


def build_vision_request(options: VisionChatOptions, *, stream: bool) -> dict[str, Any]:
    """Build a chat completions request carrying image content parts."""
    payload: dict[str, Any] = {
        "model": options.model,
        "messages": [message.model_dump(mode="json") for message in build_vision_messages(options)],
        "stream": stream,
    }
    return _with_optional(payload, temperature=options.temperature, max_tokens=options.max_tokens)


def build_image_request(model: str, prompt: str) -> dict[str, Any]:
    """Build an image generation request.

    Raises:
        ValueError: If the model cannot generate images
    """
    if model not in IMAGE_GENERATIVE_MODELS:
        raise ValueError(
            f"Model {model!r} does not support image generation. "
            f"Supported models: {', '.join(IMAGE_GENERATIVE_MODELS)}"
        )
    return {
        "model": model,
        "messages": [{"role": Role.USER.value, "content": prompt}],
        "modalities": ["image", "text"],
    }


def parse_file_attachment(text: str) -> tuple[str, str | None]:
    """Extract an `@file:` reference from a user message.

    Returns:
        Tuple of (message with the reference removed, referenced path or None)
    """
    for pattern in _FILE_ATTACHMENT_PATTERNS:
        match = pattern.search(text)
        if match:
            return text.replace(match.group(0), "", 1).strip(), match.group(1)
    return text, None
