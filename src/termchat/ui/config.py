"""UI configuration constants.

Centralizes magic numbers and strings for the UI module.
"""

# Input history configuration
INPUT_HISTORY_MAX_SIZE = 100  # Maximum entries in input history

# Input placeholders
INPUT_PLACEHOLDER = "Type a message or /command... (use @file:path to attach image)"
INPUT_PLACEHOLDER_BUSY = "Waiting for response..."

# Chat display configuration
MESSAGE_TIMESTAMP_FORMAT = "%H:%M:%S"
STREAMING_PLACEHOLDER = "..."

# Commands shown in the help panel, in display order
HELP_PANEL_COMMANDS = (
    "new",
    "chats",
    "image",
    "models",
    "stats",
    "title",
    "star",
    "export",
    "clear",
    "help",
    "quit",
)
HELP_PANEL_SPECIAL = (("@file:path", "Attach image for analysis"),)
