"""Effects returned by commands.

Commands never touch the UI. They describe the state changes they want as
a sequence of effects, and the consuming shell applies them in order.

The set is closed: `Effect` is a union, and consumers are expected to
`match` on it exhaustively with `typing.assert_never` in the fallback arm.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, TypeAlias

from ..llm.models import Message


class ViewMode(str, Enum):
    """Which screen the shell shows."""

    CHAT = "chat"
    IMAGE = "image"


@dataclass(frozen=True)
class NoOp:
    kind: Literal["noop"] = field(default="noop", init=False)


@dataclass(frozen=True)
class Exit:
    kind: Literal["exit"] = field(default="exit", init=False)


@dataclass(frozen=True)
class ClearTranscript:
    kind: Literal["clear_transcript"] = field(default="clear_transcript", init=False)


@dataclass(frozen=True)
class ClearTokenCounter:
    kind: Literal["clear_token_counter"] = field(default="clear_token_counter", init=False)


@dataclass(frozen=True)
class ClearError:
    kind: Literal["clear_error"] = field(default="clear_error", init=False)


@dataclass(frozen=True)
class SetError:
    message: str
    kind: Literal["set_error"] = field(default="set_error", init=False)


@dataclass(frozen=True)
class ReplaceTranscript:
    messages: tuple[Message, ...]
    kind: Literal["replace_transcript"] = field(default="replace_transcript", init=False)


@dataclass(frozen=True)
class AppendMessage:
    message: Message
    kind: Literal["append_message"] = field(default="append_message", init=False)


@dataclass(frozen=True)
class ToggleHelp:
    kind: Literal["toggle_help"] = field(default="toggle_help", init=False)


@dataclass(frozen=True)
class SetMode:
    mode: ViewMode
    prompt: str | None = None
    kind: Literal["set_mode"] = field(default="set_mode", init=False)


@dataclass(frozen=True)
class CreateNewChat:
    kind: Literal["create_new_chat"] = field(default="create_new_chat", init=False)


@dataclass(frozen=True)
class SetChatId:
    chat_id: str
    kind: Literal["set_chat_id"] = field(default="set_chat_id", init=False)


@dataclass(frozen=True)
class SetChatTitle:
    title: str
    kind: Literal["set_chat_title"] = field(default="set_chat_title", init=False)


@dataclass(frozen=True)
class SetModel:
    model: str
    kind: Literal["set_model"] = field(default="set_model", init=False)


@dataclass(frozen=True)
class ShowInfo:
    message: str
    kind: Literal["show_info"] = field(default="show_info", init=False)


Effect: TypeAlias = (
    NoOp
    | Exit
    | ClearTranscript
    | ClearTokenCounter
    | ClearError
    | SetError
    | ReplaceTranscript
    | AppendMessage
    | ToggleHelp
    | SetMode
    | CreateNewChat
    | SetChatId
    | SetChatTitle
    | SetModel
    | ShowInfo
)
