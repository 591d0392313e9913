"""Unit tests for the chat session controller."""
import pytest

from termchat.commands import create_command_registry
from termchat.commands.effects import (
    AppendMessage,
    ClearError,
    ClearTokenCounter,
    ClearTranscript,
    CreateNewChat,
    Exit,
    NoOp,
    ReplaceTranscript,
    SetChatId,
    SetChatTitle,
    SetError,
    SetMode,
    SetModel,
    ShowInfo,
    ToggleHelp,
    ViewMode,
)
from termchat.commands.base import CommandResult
from termchat.llm import ChatResult, Message, Role
from termchat.session import (
    UNSUPPORTED_IMAGE_MESSAGE,
    ChatSession,
    SessionState,
    make_chat_title,
)
from termchat.storage import AppSettings


@pytest.fixture
async def session(fake_llm, store, export_dir, tmp_path):
    """Return a started session over the in-memory store."""
    chat_session = ChatSession(
        fake_llm,
        store,
        create_command_registry(),
        export_dir=export_dir,
        image_dir=tmp_path / "images",
    )
    await chat_session.start()
    return chat_session


class TestMakeChatTitle:
    """Tests for make_chat_title()."""

    def test_short_message_is_kept(self):
        """Test titles under the limit."""
        assert make_chat_title("  Plan a trip  ") == "Plan a trip"

    def test_long_message_is_truncated(self):
        """Test the 47 characters plus ellipsis rule."""
        title = make_chat_title("x" * 51)
        assert title == "x" * 47 + "..."
        assert len(title) == 50

    def test_boundary(self):
        """Test a message exactly at the limit."""
        assert make_chat_title("y" * 50) == "y" * 50

    def test_blank_message(self):
        """Test the fallback title."""
        assert make_chat_title("   ") == "New Chat"


class TestStart:
    """Tests for ChatSession.start()."""

    @pytest.mark.asyncio
    async def test_start_creates_chat_and_loads_settings(self, fake_llm, store, export_dir):
        """Test starting with saved preferences and no chats."""
        await store.save_settings(AppSettings(last_used_model="m/saved", show_commands_help=False))
        chat_session = ChatSession(fake_llm, store, create_command_registry(), export_dir=export_dir)

        await chat_session.start()

        assert chat_session.model == "m/saved"
        assert chat_session.show_help is False
        assert chat_session.chat_id is not None
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_start_resumes_empty_recent_chat(self, fake_llm, store, export_dir):
        """Test that an empty most-recent chat is reused."""
        existing = await store.create_chat()
        chat_session = ChatSession(
            fake_llm, store, create_command_registry(), export_dir=export_dir, model="m/explicit"
        )

        await chat_session.start()

        assert chat_session.chat_id == existing.id
        assert chat_session.model == "m/explicit"
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_start_skips_non_empty_recent_chat(self, fake_llm, store, export_dir):
        """Test that a used chat is not resumed."""
        used = await store.create_chat()
        await store.add_message(used.id, "user", "hello")
        chat_session = ChatSession(fake_llm, store, create_command_registry(), export_dir=export_dir)

        await chat_session.start()

        assert chat_session.chat_id != used.id
        assert await store.count() == 2


class TestApplyEffects:
    """Tests for ChatSession.apply()."""

    @pytest.mark.asyncio
    async def test_every_effect(self, session, store):
        """Test each effect's state change."""
        hello = Message(role=Role.USER, content="hello")
        reply = Message(role=Role.ASSISTANT, content="hi")
        session.total_tokens = 10
        session.error = "old"

        await session.apply([NoOp(), ReplaceTranscript((hello,)), AppendMessage(reply)])
        assert session.messages == [hello, reply]

        await session.apply([ClearTranscript(), ClearTokenCounter(), ClearError()])
        assert session.messages == []
        assert session.total_tokens == 0
        assert session.error is None

        await session.apply([SetError("bad"), ShowInfo("note"), ToggleHelp()])
        assert session.error == "bad"
        assert session.info == "note"
        assert session.show_help is False

        await session.apply([SetMode(ViewMode.IMAGE, prompt="a fox"), SetChatTitle("T"), SetChatId("chat_x")])
        assert session.view_mode == ViewMode.IMAGE
        assert session.image_prompt == "a fox"
        assert session.chat_title == "T"
        assert session.chat_id == "chat_x"

        await session.apply([SetModel("m/new"), Exit()])
        assert session.model == "m/new"
        assert session.should_exit is True
        assert (await store.get_settings()).last_used_model == "m/new"

    @pytest.mark.asyncio
    async def test_effects_apply_in_order(self, session):
        """Test that later effects see earlier ones."""
        await session.apply([SetError("first"), ClearError(), SetError("second")])
        assert session.error == "second"

    @pytest.mark.asyncio
    async def test_create_new_chat(self, session, store):
        """Test that CreateNewChat goes through the store."""
        first_id = session.chat_id
        session.total_tokens = 5

        await session.apply([CreateNewChat()])

        assert session.chat_id != first_id
        assert session.total_tokens == 0
        assert await store.count() == 2


class TestRunCommand:
    """Tests for command input."""

    @pytest.mark.asyncio
    async def test_command_effects_are_applied(self, session):
        """Test /title end to end."""
        result = await session.submit('/title "Road trip"')

        assert isinstance(result, CommandResult)
        assert session.chat_title == "Road trip"
        assert (await session.store.get_chat(session.chat_id)).title == "Road trip"

    @pytest.mark.asyncio
    async def test_unknown_command_sets_error(self, session):
        """Test that failures surface through the error field."""
        await session.submit("/frobnicate")
        assert session.error.startswith("Unknown command: /frobnicate")

    @pytest.mark.asyncio
    async def test_quit(self, session):
        """Test that /quit only flags the exit."""
        await session.submit("/q")
        assert session.should_exit is True

    @pytest.mark.asyncio
    async def test_invalid_command_format(self, session):
        """Test a bare prefix."""
        result = await session.run_command("/")
        assert result.success is False
        assert session.error == "Invalid command format"

    @pytest.mark.asyncio
    async def test_info_is_cleared_by_next_input(self, session):
        """Test that informational messages do not linger."""
        await session.submit("/models current")
        assert session.info is not None
        await session.submit("/help")
        assert session.info is None


class TestSubmitChat:
    """Tests for chat input."""

    @pytest.mark.asyncio
    async def test_empty_input_is_ignored(self, session, fake_llm):
        """Test that blank input does nothing."""
        assert await session.submit("   ") is None
        assert fake_llm.chat_calls == []

    @pytest.mark.asyncio
    async def test_streamed_reply(self, session, fake_llm, store):
        """Test the full prompt flow."""
        fake_llm.fragments = ["Hel", "lo", "!"]
        seen: list[str] = []
        snapshots: list[list[Message]] = []

        async def on_change():
            snapshots.append(list(session.messages))

        session.on_transcript_change = on_change
        result = await session.submit("Say hello", on_content=seen.append)

        assert isinstance(result, ChatResult)
        assert seen == ["Hel", "lo", "!"]
        assert session.messages == [
            Message(role=Role.USER, content="Say hello"),
            Message(role=Role.ASSISTANT, content="Hello!"),
        ]
        assert session.state == SessionState.IDLE
        assert snapshots[0][-1] == Message(role=Role.ASSISTANT, content="")

        chat = await store.get_chat(session.chat_id)
        assert [(m.role, m.content) for m in chat.messages] == [
            ("user", "Say hello"),
            ("assistant", "Hello!"),
        ]
        assert chat.title == "Say hello"
        assert session.chat_title == "Say hello"

    @pytest.mark.asyncio
    async def test_history_is_sent(self, session, fake_llm):
        """Test that earlier turns are included in the request."""
        await session.submit("First")
        await session.submit("Second")

        sent = fake_llm.chat_calls[-1].messages
        assert [m.content for m in sent] == ["First", "Hello there", "Second"]
        assert fake_llm.chat_calls[-1].model == session.model

    @pytest.mark.asyncio
    async def test_title_only_set_from_first_message(self, session):
        """Test that later messages keep the title."""
        await session.submit("First question")
        await session.submit("Second question")
        assert session.chat_title == "First question"

    @pytest.mark.asyncio
    async def test_failed_reply(self, session, fake_llm):
        """Test that a failed request removes the placeholder and sets the error."""
        fake_llm.fail_with = RuntimeError("Chat API error 500")

        result = await session.submit("Hi")

        assert result is None
        assert session.state == SessionState.ERROR
        assert session.error == "Chat API error 500"
        assert session.messages == [Message(role=Role.USER, content="Hi")]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("command", ["/new", "/clear"])
    async def test_command_while_streaming(self, session, fake_llm, store, command):
        """Test that replacing the transcript mid-reply keeps the turn in its chat."""
        fake_llm.fragments = ["Hel", "lo"]
        started_in = session.chat_id
        seen: list[str] = []

        async def interrupt():
            await session.run_command(command)

        fake_llm.between_fragments = interrupt
        result = await session.submit("Say hello", on_content=seen.append)

        assert isinstance(result, ChatResult)
        assert seen == ["Hel"]
        assert session.messages == []
        assert session.error is None
        assert session.state == SessionState.IDLE

        chat = await store.get_chat(started_in)
        assert [(m.role, m.content) for m in chat.messages] == [
            ("user", "Say hello"),
            ("assistant", "Hello"),
        ]

    @pytest.mark.asyncio
    async def test_failure_after_transcript_replaced(self, session, fake_llm):
        """Test that a failed reply reports through error once its transcript is gone."""
        fake_llm.fragments = ["Hel", "lo"]

        async def interrupt():
            await session.run_command("/clear")
            raise RuntimeError("connection lost")

        fake_llm.between_fragments = interrupt
        result = await session.submit("Say hello")

        assert result is None
        assert session.error == "connection lost"
        assert session.state == SessionState.ERROR
        assert session.messages == []

    @pytest.mark.asyncio
    async def test_image_attachment_goes_to_vision_model(self, session, fake_llm, tmp_path):
        """Test @file prompts."""
        image = tmp_path / "cat.png"
        image.write_bytes(b"\x89PNG")

        await session.submit(f"What is this? @file:{image}")

        (options,) = fake_llm.vision_calls
        assert options.model == session.vision_model
        assert options.prompt == "What is this?"
        assert options.images[0].data == str(image)
        assert session.messages[0].content == "📎 cat.png\nWhat is this?"
        assert session.messages[-1].content == "A cat"

    @pytest.mark.asyncio
    async def test_missing_attachment(self, session, fake_llm):
        """Test a reference to a file that does not exist."""
        assert await session.submit("look @file:/nope/missing.png") is None
        assert session.error == "File not found: /nope/missing.png"
        assert fake_llm.vision_calls == []
        assert session.messages == []

    @pytest.mark.asyncio
    async def test_unsupported_attachment(self, session, tmp_path):
        """Test a reference to a non-image file."""
        notes = tmp_path / "notes.txt"
        notes.write_text("hi")

        await session.submit(f"read @file:{notes}")

        assert session.error == UNSUPPORTED_IMAGE_MESSAGE


class TestImageGeneration:
    """Tests for the image prompt flow."""

    @pytest.mark.asyncio
    async def test_generate_image(self, session, fake_llm):
        """Test that a generated image is added to the transcript."""
        await session.submit("/image a fox")
        assert session.view_mode == ViewMode.IMAGE
        assert session.image_prompt == "a fox"

        result = await session.generate_image("a fox")

        assert result.success
        assert fake_llm.image_calls == ["a fox"]
        assert session.view_mode == ViewMode.CHAT
        assert session.image_prompt is None
        assert session.messages[-1].content == (
            "🎨 Image generated successfully!\nHere it is\n📁 Saved: /tmp/image_1_0.png"
        )

    @pytest.mark.asyncio
    async def test_cancel_image(self, session):
        """Test leaving image mode without generating."""
        await session.submit("/img")
        session.cancel_image()
        assert session.view_mode == ViewMode.CHAT
        assert session.messages == []
