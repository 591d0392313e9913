"""Main CLI application using Typer."""
import asyncio
import json
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from ..commands import create_command_registry
from ..errors import TermChatError
from ..llm import ChatOptions, ImageAttachment, Message, Role, VisionChatOptions
from ..llm.request import is_supported_image
from ..logging_utils import configure_logging
from ..session import UNSUPPORTED_IMAGE_MESSAGE, ChatSession
from .providers import get_config, get_store, require_llm

# Create Typer app
app = typer.Typer(
    name="termchat",
    help="Terminal chat client for OpenAI-compatible model services",
    add_completion=True,
)

# Console for rich output
console = Console()


class ExportFormat(str, Enum):
    MARKDOWN = "markdown"
    JSON = "json"


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context):
    """Launch the TUI when no command is given."""
    if ctx.invoked_subcommand is None:
        tui_command()


@app.command(name="tui")
def tui_command():
    """Launch the interactive TUI chat interface."""
    config = get_config()
    configure_logging(config.log_level, config.log_path)

    async def _tui():
        from ..ui import run_textual_tui

        llm = require_llm(config, console)
        store = get_store(config)

        try:
            await store.connect()
            session = ChatSession(
                llm,
                store,
                create_command_registry(),
                export_dir=config.export_dir,
                vision_model=config.vision_model,
                image_dir=config.image_dir,
            )
            await run_textual_tui(session)
        finally:
            await store.disconnect()
            await llm.close()
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_tui())
    except TermChatError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        pass


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Prompt to send"),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model to use (default: TERMCHAT_MODEL)"
    ),
    temperature: float | None = typer.Option(
        None,
        "--temperature",
        "-t",
        min=0.0,
        max=2.0,
        help="Sampling temperature"
    ),
    max_tokens: int | None = typer.Option(
        None,
        "--max-tokens",
        min=1,
        help="Maximum tokens to generate"
    ),
    no_stream: bool = typer.Option(
        False,
        "--no-stream",
        help="Wait for the full reply instead of streaming it"
    ),
    image: Path | None = typer.Option(
        None,
        "--image",
        "-i",
        exists=True,
        dir_okay=False,
        help="Image to send to the vision model with the prompt"
    ),
):
    """Send a single prompt and print the reply."""
    config = get_config()
    configure_logging(config.log_level)

    if image is not None and not is_supported_image(image):
        console.print(f"[red]Error: {UNSUPPORTED_IMAGE_MESSAGE}[/red]")
        raise typer.Exit(code=1)

    def on_content(fragment: str) -> None:
        console.print(fragment, end="", markup=False, highlight=False)

    async def _ask():
        llm = require_llm(config, console)
        callback = None if no_stream else on_content

        try:
            if image is not None:
                result = await llm.vision_chat(
                    VisionChatOptions(
                        model=model or config.vision_model,
                        prompt=prompt,
                        images=[ImageAttachment(type="file", data=str(image))],
                        temperature=temperature,
                        max_tokens=max_tokens,
                    ),
                    on_content=callback,
                )
            else:
                options = ChatOptions(
                    model=model or config.model,
                    messages=[Message(role=Role.USER, content=prompt)],
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
                if no_stream:
                    result = await llm.chat(options)
                else:
                    result = await llm.chat_stream(options, on_content=callback)
        finally:
            await llm.close()

        if no_stream:
            console.print(Markdown(result.content))
        else:
            console.print()
        if result.usage.total_tokens:
            console.print(f"[dim]Tokens: {result.usage.total_tokens}[/dim]")

    try:
        asyncio.run(_ask())
    except TermChatError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def models():
    """List the models offered by the chat service."""
    config = get_config()
    configure_logging(config.log_level)

    async def _models():
        llm = require_llm(config, console)
        try:
            catalog = await llm.get_models()
        finally:
            await llm.close()

        if not catalog:
            console.print("[yellow]No models available[/yellow]")
            return

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Model", style="cyan")
        table.add_column("Name")
        table.add_column("Context", style="green", justify="right")

        for info in catalog:
            marker = " *" if info.id == config.model else ""
            table.add_row(
                f"{info.id}{marker}",
                info.name or "",
                f"{info.context_length:,}" if info.context_length else "",
            )

        console.print(table)
        console.print(f"[dim]* default model ({config.model})[/dim]")

    try:
        asyncio.run(_models())
    except TermChatError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def chats(
    starred: bool = typer.Option(
        False,
        "--starred",
        "-s",
        help="Only show starred chats"
    ),
    search: str | None = typer.Option(
        None,
        "--search",
        "-q",
        help="Only show chats whose title or messages contain this text"
    ),
):
    """List saved chats."""
    config = get_config()
    configure_logging(config.log_level)

    async def _chats():
        store = get_store(config)
        try:
            await store.connect()
            if search:
                found = await store.search(search)
            else:
                found = await store.list_chats()
        finally:
            await store.disconnect()

        if starred:
            found = [chat for chat in found if chat.starred]

        if not found:
            console.print("[yellow]No chats found[/yellow]")
            return

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Title", style="cyan")
        table.add_column("Messages", style="green", justify="right", width=8)
        table.add_column("Updated", style="yellow")

        for chat in found:
            title = f"⭐ {chat.title}" if chat.starred else chat.title
            table.add_row(
                chat.id,
                title,
                str(len(chat.messages)),
                chat.timestamp.strftime("%Y-%m-%d %H:%M"),
            )

        console.print(table)

    try:
        asyncio.run(_chats())
    except TermChatError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def export(
    chat_id: str = typer.Argument(..., help="ID of the chat to export"),
    export_format: ExportFormat = typer.Option(
        ExportFormat.MARKDOWN,
        "--format",
        "-f",
        help="Export format"
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Write to this file instead of stdout"
    ),
):
    """Export a saved chat as Markdown or JSON."""
    config = get_config()
    configure_logging(config.log_level)

    async def _export() -> str | None:
        store = get_store(config)
        try:
            await store.connect()
            if export_format == ExportFormat.JSON:
                data = await store.export_chat(chat_id)
                return json.dumps(data, indent=2, ensure_ascii=False) if data else None
            return await store.export_as_markdown(chat_id)
        finally:
            await store.disconnect()

    try:
        text = asyncio.run(_export())
    except TermChatError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    if text is None:
        console.print(f"[red]Error: Chat not found: {chat_id}[/red]")
        raise typer.Exit(code=1)

    if output is None:
        console.print(text, markup=False, highlight=False)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    console.print(f"[green]Chat exported to {output}[/green]")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
