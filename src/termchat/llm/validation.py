"""Shape checks for payloads received from the chat service.

A full response is the only artifact of a non-streaming call, so a bad one
is a hard failure. A bad streaming chunk is one of many and is skipped.
"""

import json
from typing import Any

from loguru import logger
from pydantic import ValidationError

from ..errors import ResponseValidationError
from .models import ChatCompletionsResponse, ModelInfo, ModelsResponse, StreamingChunk, UsageStats


def validate_completion(data: Any) -> ChatCompletionsResponse:
    """Validate a non-streaming chat completion payload.

    Raises:
        ResponseValidationError: If the payload does not match the schema
    """
    try:
        return ChatCompletionsResponse.model_validate(data)
    except ValidationError as e:
        raise ResponseValidationError(f"Malformed chat completion response: {e}") from e


def parse_chunk(payload: str) -> StreamingChunk | None:
    """Decode and validate one streaming chunk.

    Returns None instead of raising when the payload is not JSON or does
    not match the chunk schema.
    """
    try:
        return StreamingChunk.model_validate_json(payload)
    except ValidationError as e:
        logger.debug("Skipping malformed stream chunk ({} errors): {!r}", e.error_count(), payload[:200])
        return None


def validate_models(data: Any) -> list[ModelInfo]:
    """Validate the model catalog payload."""
    try:
        return ModelsResponse.model_validate(data).data
    except ValidationError as e:
        raise ResponseValidationError(f"Malformed model catalog: {e}") from e


def validate_stats(data: Any) -> UsageStats:
    """Validate the usage statistics payload."""
    try:
        return UsageStats.model_validate(data)
    except ValidationError as e:
        raise ResponseValidationError(f"Malformed usage statistics: {e}") from e


def decode_json(text: str) -> Any:
    """Decode a response body, turning JSON errors into validation errors."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ResponseValidationError(f"Response body is not valid JSON: {e}") from e
