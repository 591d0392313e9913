"""Modal screens for the TUI.

This module hides the design decisions about:
- How the image prompt dialog looks (CSS, layout)
- Keyboard shortcuts for dialogs

To change how the image prompt is presented, modify only this file.
"""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static


class ImagePromptScreen(ModalScreen[str | None]):
    """Modal dialog asking for an image prompt.

    Dismisses with the prompt text, or None when cancelled.
    """

    CSS = """
    ImagePromptScreen {
        align: center middle;
        background: $background 70%;
    }

    #image-dialog {
        width: 70;
        height: auto;
        border: tall $accent;
        background: $surface;
        padding: 1 2;
    }

    #image-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $accent;
        padding: 0 0 1 0;
        border-bottom: solid $border;
        margin-bottom: 1;
    }

    #image-model {
        width: 100%;
        color: $text-muted;
        margin-bottom: 1;
    }

    #image-buttons {
        width: 100%;
        height: 3;
        align: center middle;
        margin-top: 1;
    }

    #image-buttons Button {
        margin: 0 1;
        min-width: 10;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(self, prompt: str | None = None, model: str | None = None) -> None:
        super().__init__()
        self._prompt = prompt or ""
        self._model = model

    def compose(self) -> ComposeResult:
        with Vertical(id="image-dialog"):
            yield Static("🎨 Generate Image", id="image-title")
            if self._model:
                yield Static(f"Model: {self._model}", id="image-model")
            yield Input(value=self._prompt, placeholder="Describe the image...", id="image-prompt")
            with Horizontal(id="image-buttons"):
                yield Button("Generate", id="btn-generate", variant="success")
                yield Button("Cancel", id="btn-cancel", variant="error")

    def on_mount(self) -> None:
        self.query_one("#image-prompt", Input).focus()

    def _submit(self) -> None:
        prompt = self.query_one("#image-prompt", Input).value.strip()
        if not prompt:
            self.app.notify("Enter a prompt first", severity="warning", timeout=2)
            return
        self.dismiss(prompt)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-generate":
            self._submit()
        elif event.button.id == "btn-cancel":
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)
