"""
termchat: a terminal chat client for OpenAI-compatible model services.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .commands import CommandRegistry, CommandResult, create_command_registry
from .llm import LLMProvider, create_llm_provider
from .session import ChatSession
from .storage import ChatStore, create_chat_store

__all__ = [
    "ChatSession",
    "ChatStore",
    "CommandRegistry",
    "CommandResult",
    "LLMProvider",
    "create_chat_store",
    "create_command_registry",
    "create_llm_provider",
]
