"""Provider factory functions for CLI.

Centralizes creation of the chat store and LLM instances from the
resolved configuration. Hides configuration details from command
implementations.
"""

from dotenv import load_dotenv
from rich.console import Console

from ..config import AppConfig, load_config
from ..errors import ConfigurationError
from ..llm import LLMProvider, create_llm_provider
from ..storage import ChatStore, create_chat_store

# Default console for output
_console = Console()


def get_config() -> AppConfig:
    """Load `.env` (if present) and resolve configuration from the environment."""
    load_dotenv()
    return load_config()


def get_llm(config: AppConfig) -> LLMProvider:
    """Create the chat service provider.

    Raises:
        ConfigurationError: If TERMCHAT_API_KEY is not set
    """
    if not config.api_key:
        raise ConfigurationError("TERMCHAT_API_KEY not set in environment")

    return create_llm_provider(
        "openai-compatible",
        api_key=config.api_key,
        model=config.model,
        base_url=config.api_base_url,
        timeout=config.timeout,
    )


def get_store(config: AppConfig) -> ChatStore:
    """Create the chat store backend.

    Environment variables:
        TERMCHAT_STORE: 'sqlite' (default, persisted under TERMCHAT_HOME) or 'memory'
    """
    if config.store_backend == "memory":
        return create_chat_store("memory")
    if config.store_backend == "sqlite":
        return create_chat_store("sqlite", path=config.database_path)
    raise ConfigurationError(
        f"Unknown chat store backend: {config.store_backend}. Use 'sqlite' or 'memory'"
    )


def require_llm(config: AppConfig, console: Console | None = None) -> LLMProvider:
    """Get the LLM provider, exiting with an error if it is not configured."""
    import typer

    con = console or _console
    try:
        return get_llm(config)
    except ConfigurationError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
