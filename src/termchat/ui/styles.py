"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.

Layout, top to bottom: status bar, chat history, commands help,
notice line, input bar.
"""

APP_CSS = """
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Status Bar - Model, Chat, Tokens
   ============================================ */
#status-bar {
    height: 1;
    padding: 0 2;
    background: $surface;
    color: $foreground;

    &.streaming {
        background: $warning 15%;
    }
}

/* ============================================
   Chat History Panel
   ============================================ */
#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $accent;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 1;
    background: transparent;
}

.user-message {
    border-left: tall $primary;

    & .message-header {
        color: $primary;
        text-style: bold;
    }
}

.assistant-message {
    border-left: tall $secondary;

    & .message-header {
        color: $secondary;
        text-style: bold;
    }
}

.system-message {
    border-left: tall $warning;

    & .message-header {
        color: $warning;
        text-style: bold;
    }

    & .message-content {
        color: $text-muted;
    }
}

.message-header {
    height: auto;
}

.message-content {
    height: auto;
    padding: 0 0 0 1;
    margin: 0;
}

/* ============================================
   Commands Help Panel
   ============================================ */
#commands-help {
    height: auto;
    padding: 0 1;
    border: round $border;
    border-title-color: $accent;
    border-title-style: bold;
    background: $panel;
}

/* ============================================
   Notice Line - Errors and Info
   ============================================ */
#notice {
    height: auto;
    max-height: 20;
    padding: 0 2;
    display: none;

    &.error {
        display: block;
        color: $error;
    }

    &.info {
        display: block;
        color: $foreground;
        background: $primary 8%;
    }
}

/* ============================================
   Chat Input Bar
   ============================================ */
ChatInputBar {
    height: 3;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }

    &.-disabled {
        border: round $text-muted;
    }
}

#chat-input {
    width: 1fr;
    border: none;
    padding: 0 1;
    background: transparent;
    height: 1;

    &:focus {
        border: none;
    }
}

#send-btn {
    width: 10;
    height: 1;
    min-width: 8;
    border: none;
    background: $primary;
    color: $background;
    text-style: bold;

    &:hover {
        background: $primary-lighten-1;
    }
}

/* ============================================
   Notification Toasts
   ============================================ */
Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-information {
        border: tall $primary;
    }

    &.-error {
        border: tall $error;
    }

    &.-warning {
        border: tall $warning;
    }
}

* {
    scrollbar-background: $panel;
    scrollbar-color: $surface-lighten-1;
    scrollbar-color-hover: $primary 50%;
    scrollbar-color-active: $primary;
    scrollbar-size: 1 1;
}

Header {
    background: $panel;
    color: $foreground;
    dock: top;
    height: 1;
}

Footer {
    background: $panel;
    height: auto;
}

Markdown {
    margin: 0;
    padding: 0;
}

MarkdownFence {
    background: $surface;
    border: round $border;
    margin: 1 0;
    padding: 1;
}
"""
