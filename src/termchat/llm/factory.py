from typing import Any

from .base import LLMProvider
from .providers import OpenAICompatibleProvider

_OPENAI_COMPATIBLE_NAMES = ("openai-compatible", "openai", "hackclub")


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Create an LLM provider instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider type ('openai-compatible', aliases 'openai', 'hackclub')
        **config: Provider-specific configuration
            - api_key: str (required)
            - model: str (default: 'qwen/qwen3-32b')
            - base_url: str (default: Hack Club AI proxy)
            - timeout: float (default: 60)

    Returns:
        Initialized LLM provider instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_llm_provider(
        ...     "openai-compatible",
        ...     api_key="sk-...",
        ...     base_url="https://api.example.com/v1/"
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower in _OPENAI_COMPATIBLE_NAMES:
        if "api_key" not in config:
            raise TypeError("OpenAI-compatible provider requires 'api_key' in config")
        return OpenAICompatibleProvider(**config)

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: {', '.join(repr(name) for name in _OPENAI_COMPATIBLE_NAMES)}"
    )
