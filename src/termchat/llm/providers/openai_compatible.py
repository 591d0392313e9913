import base64
import binascii
import re
import time
from pathlib import Path
from typing import Any

import httpx
from loguru import logger

from ...config import (
    CHAT_COMPLETIONS_PATH,
    DEFAULT_API_BASE_URL,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT_SECONDS,
    MODELS_PATH,
    STATS_PATH,
)
from ...errors import ChatAPIError, ResponseValidationError
from ..base import LLMProvider
from ..models import (
    ChatOptions,
    ChatResult,
    ChunkCallback,
    ContentCallback,
    GeneratedImage,
    ImageGenerationResult,
    ModelInfo,
    Usage,
    UsageStats,
    VisionChatOptions,
)
from ..request import build_chat_request, build_image_request, build_vision_request, extension_from_mime_type
from ..sse import decode_stream
from ..validation import decode_json, validate_completion, validate_models, validate_stats

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.+)$", re.DOTALL)


class OpenAICompatibleProvider(LLMProvider):
    """Provider for OpenAI-compatible chat completion services.

    Hidden design decisions:
    - HTTP client initialization (httpx)
    - Bearer token authentication
    - Endpoint layout relative to the base URL
    - SSE stream decoding and response validation
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
        **client_kwargs: Any
    ):
        """Initialize the provider.

        Args:
            api_key: Bearer token for the service
            model: Default model to use
            base_url: Service base URL; endpoint paths are resolved against it
            timeout: Request timeout in seconds
            client: Pre-built client (tests inject one with a mock transport)
            **client_kwargs: Additional kwargs for httpx.AsyncClient
        """
        self._model = model
        self._api_key = api_key
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._client = client or httpx.AsyncClient(timeout=timeout, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def _url(self, path: str) -> str:
        return self._base_url + path

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    @staticmethod
    def _raise_for_status(response: httpx.Response, body: str) -> None:
        if response.is_success:
            return
        logger.warning(
            "Chat API error: {} {} - {}",
            response.status_code,
            response.reason_phrase,
            body[:500],
        )
        raise ChatAPIError(response.status_code, body, endpoint=str(response.url))

    async def _post_json(self, payload: dict[str, Any]) -> Any:
        response = await self._client.post(
            self._url(CHAT_COMPLETIONS_PATH),
            json=payload,
            headers=self._headers(),
        )
        self._raise_for_status(response, response.text)
        return decode_json(response.text)

    async def _complete(self, payload: dict[str, Any]) -> ChatResult:
        completion = validate_completion(await self._post_json(payload))
        choice = completion.choices[0]
        return ChatResult(
            content=choice.message.content or "",
            usage=completion.usage,
            finish_reason=choice.finish_reason or "unknown",
        )

    async def _stream(
        self,
        payload: dict[str, Any],
        on_content: ContentCallback | None,
        on_chunk: ChunkCallback | None,
    ) -> ChatResult:
        async with self._client.stream(
            "POST",
            self._url(CHAT_COMPLETIONS_PATH),
            json=payload,
            headers=self._headers(),
        ) as response:
            if not response.is_success:
                body = (await response.aread()).decode("utf-8", errors="replace")
                self._raise_for_status(response, body)
            return await decode_stream(response.aiter_bytes(), on_content, on_chunk)

    async def chat(self, options: ChatOptions) -> ChatResult:
        """Generate a chat completion in a single round trip."""
        payload = build_chat_request(
            options.model,
            options.messages,
            stream=False,
            temperature=options.temperature,
            max_tokens=options.max_tokens,
            top_p=options.top_p,
        )
        return await self._complete(payload)

    async def chat_stream(
        self,
        options: ChatOptions,
        on_content: ContentCallback | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> ChatResult:
        """Generate a streaming chat completion."""
        payload = build_chat_request(
            options.model,
            options.messages,
            stream=True,
            temperature=options.temperature,
            max_tokens=options.max_tokens,
            top_p=options.top_p,
        )
        logger.debug("Streaming chat: model={} messages={}", options.model, len(options.messages))
        return await self._stream(payload, on_content, on_chunk)

    async def vision_chat(
        self,
        options: VisionChatOptions,
        on_content: ContentCallback | None = None,
    ) -> ChatResult:
        """Send a prompt with images; streams when on_content is given."""
        stream = on_content is not None
        payload = build_vision_request(options, stream=stream)
        logger.debug("Vision chat: model={} images={} stream={}", options.model, len(options.images), stream)
        if stream:
            return await self._stream(payload, on_content, None)
        return await self._complete(payload)

    async def get_models(self) -> list[ModelInfo]:
        """Fetch the model catalog (no authentication needed)."""
        logger.info("Fetching available models from API...")
        response = await self._client.get(self._url(MODELS_PATH))
        self._raise_for_status(response, response.text)
        models = validate_models(decode_json(response.text))
        logger.info("Fetched {} models", len(models))
        return models

    async def get_stats(self) -> UsageStats:
        """Fetch aggregate usage for the API key."""
        response = await self._client.get(self._url(STATS_PATH), headers=self._headers())
        self._raise_for_status(response, response.text)
        return validate_stats(decode_json(response.text))

    async def generate_image(
        self,
        prompt: str,
        model: str | None = None,
        save_dir: Path | None = None,
    ) -> ImageGenerationResult:
        """Generate images with an image-generative model.

        Returned `data:` URLs are written to save_dir when it is given.
        """
        payload = build_image_request(model or DEFAULT_IMAGE_MODEL, prompt)
        data = await self._post_json(payload)

        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise ResponseValidationError(f"Malformed image generation response: {e}") from e

        images: list[GeneratedImage] = []
        for index, image in enumerate(message.get("images") or []):
            url = (image.get("image_url") or {}).get("url")
            if not url:
                continue
            saved_path = _save_data_url(url, save_dir, index) if save_dir else None
            images.append(GeneratedImage(url=url, saved_path=saved_path))

        usage = Usage.model_validate(data.get("usage") or {})
        if not images:
            return ImageGenerationResult(
                success=False,
                text_content=message.get("content") or "",
                usage=usage,
                error="No images returned by the model",
            )
        return ImageGenerationResult(
            success=True,
            text_content=message.get("content") or "",
            images=images,
            usage=usage,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


def _save_data_url(url: str, save_dir: Path, index: int) -> str | None:
    """Decode a base64 data URL into a file. Remote URLs are not downloaded."""
    match = _DATA_URL_RE.match(url)
    if match is None:
        return None
    try:
        raw = base64.b64decode(match.group("data"), validate=False)
    except (binascii.Error, ValueError):
        logger.warning("Could not decode generated image {}", index)
        return None

    extension = extension_from_mime_type(match.group("mime")) or "png"
    save_dir.mkdir(parents=True, exist_ok=True)
    path = save_dir / f"image_{int(time.time())}_{index}.{extension}"
    path.write_bytes(raw)
    return str(path)
