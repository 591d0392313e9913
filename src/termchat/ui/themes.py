"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Dark theme built around the classic terminal-chat palette:
# sky-blue info, green success, amber warnings, coral errors
TERMCHAT_DARK = Theme(
    name="termchat-dark",
    primary="#74C0FC",      # Info blue - input, user messages
    secondary="#51CF66",    # Green - assistant messages
    accent="#FFA94D",       # Orange - highlights, panel titles
    foreground="#E9ECEF",
    background="#141517",
    success="#51CF66",
    warning="#FFD93D",
    error="#FF6B6B",
    surface="#1A1B1E",
    panel="#212529",
    dark=True,
    variables={
        "block-cursor-foreground": "#141517",
        "block-cursor-background": "#74C0FC",
        "block-cursor-text-style": "bold",

        "input-cursor-background": "#E9ECEF",
        "input-cursor-foreground": "#141517",
        "input-selection-background": "#74C0FC 30%",

        "border": "#495057",
        "border-blurred": "#343A40",

        "scrollbar": "#343A40",
        "scrollbar-hover": "#495057",
        "scrollbar-active": "#74C0FC",
        "scrollbar-background": "#212529",
        "scrollbar-corner-color": "#212529",

        "footer-foreground": "#CED4DA",
        "footer-background": "#141517",
        "footer-key-foreground": "#FFA94D",
        "footer-key-background": "#343A40",
        "footer-description-foreground": "#ADB5BD",

        "text-muted": "#868E96",
        "text-disabled": "#495057",
        "text-success": "#51CF66",
        "text-warning": "#FFD93D",
        "text-error": "#FF6B6B",
        "text-primary": "#74C0FC",
        "text-accent": "#FFA94D",

        "button-foreground": "#E9ECEF",
        "button-color-foreground": "#141517",
        "button-focus-text-style": "bold reverse",
    },
)
