"""Application constants and environment-driven configuration.

Centralizes magic numbers and endpoint names so the rest of the package
never reads the environment directly.
"""

import os
from dataclasses import dataclass
from pathlib import Path

APP_NAME = "termchat"
APP_DIRECTORY_NAME = ".termchat"
DATABASE_FILE_NAME = "chats.db"
LOG_FILE_NAME = "termchat.log"
EXPORT_DIRECTORY_NAME = "exports"
IMAGE_DIRECTORY_NAME = "images"

DEFAULT_API_BASE_URL = "https://ai.hackclub.com/proxy/v1/"
DEFAULT_MODEL = "qwen/qwen3-32b"
DEFAULT_VISION_MODEL = "google/gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "google/gemini-2.5-flash-image-preview"
DEFAULT_TIMEOUT_SECONDS = 60.0

# Endpoint paths, relative to the API base URL
CHAT_COMPLETIONS_PATH = "chat/completions"
MODELS_PATH = "models"
STATS_PATH = "stats"

IMAGE_GENERATIVE_MODELS = (
    "google/gemini-2.5-flash-image-preview",
    "google/gemini-3-pro-image-preview",
)

# Chat titling: first user message, truncated
TITLE_MAX_LENGTH = 50
TITLE_TRUNCATED_LENGTH = 47
DEFAULT_CHAT_TITLE = "New Chat"

# /models list display limit
MODEL_LIST_DISPLAY_LIMIT = 15
# /chats list display limit
CHAT_LIST_DISPLAY_LIMIT = 10


@dataclass(frozen=True)
class AppConfig:
    """Resolved runtime configuration."""

    api_key: str | None
    api_base_url: str
    model: str
    vision_model: str
    store_backend: str
    home: Path
    log_level: str
    timeout: float

    @property
    def database_path(self) -> Path:
        return self.home / DATABASE_FILE_NAME

    @property
    def log_path(self) -> Path:
        return self.home / LOG_FILE_NAME

    @property
    def export_dir(self) -> Path:
        return self.home / EXPORT_DIRECTORY_NAME

    @property
    def image_dir(self) -> Path:
        return self.home / IMAGE_DIRECTORY_NAME


def load_config() -> AppConfig:
    """Build the configuration from environment variables.

    Environment variables:
        TERMCHAT_API_KEY: Bearer token for the chat service
        TERMCHAT_API_BASE_URL: Service base URL (default: Hack Club AI proxy)
        TERMCHAT_MODEL: Default chat model
        TERMCHAT_VISION_MODEL: Model used for @file image prompts
        TERMCHAT_STORE: Chat store backend, "sqlite" or "memory" (default: sqlite)
        TERMCHAT_HOME: Directory for the database, logs and exports (default: ~/.termchat)
        TERMCHAT_LOG_LEVEL: Log level (default: INFO)
        TERMCHAT_TIMEOUT: HTTP timeout in seconds (default: 60)
    """
    home = Path(os.getenv("TERMCHAT_HOME", str(Path.home() / APP_DIRECTORY_NAME))).expanduser()
    return AppConfig(
        api_key=os.getenv("TERMCHAT_API_KEY") or None,
        api_base_url=os.getenv("TERMCHAT_API_BASE_URL", DEFAULT_API_BASE_URL),
        model=os.getenv("TERMCHAT_MODEL", DEFAULT_MODEL),
        vision_model=os.getenv("TERMCHAT_VISION_MODEL", DEFAULT_VISION_MODEL),
        store_backend=os.getenv("TERMCHAT_STORE", "sqlite").lower(),
        home=home,
        log_level=os.getenv("TERMCHAT_LOG_LEVEL", "INFO").upper(),
        timeout=float(os.getenv("TERMCHAT_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))),
    )
