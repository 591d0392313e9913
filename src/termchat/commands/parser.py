"""Slash-command tokenizer and parser.

Turns a raw input line into a ParsedCommand, or reports that the line is
ordinary chat text.
"""

import math

from pydantic import BaseModel, ConfigDict, Field

COMMAND_PREFIX = "/"

_QUOTE_CHARS = ('"', "'")
_ESCAPABLE_CHARS = ('"', "'", "\\")

_TRUE_WORDS = frozenset({"true", "yes", "1", "on"})
_FALSE_WORDS = frozenset({"false", "no", "0", "off"})


class ParsedCommand(BaseModel):
    """A command line split into its name and arguments."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Command name without prefix, lowercased")
    args: list[str] = Field(default_factory=list, description="Arguments after the name")
    raw: str = Field(description="Original input")


def tokenize(text: str) -> list[str]:
    """Split a line into words, honoring quotes and backslash escapes.

    A backslash before a quote or another backslash is a literal escape in
    any quote state. Quote characters delimit a span and are dropped; the
    other quote character inside a span is literal. An unterminated quote
    absorbs the rest of the input into the open token.

    Example:
        >>> tokenize('title "My Chat Title" extra')
        ['title', 'My Chat Title', 'extra']
    """
    tokens: list[str] = []
    current: list[str] = []
    quote_char: str | None = None

    i = 0
    length = len(text)
    while i < length:
        char = text[i]

        if char == "\\" and i + 1 < length and text[i + 1] in _ESCAPABLE_CHARS:
            current.append(text[i + 1])
            i += 2
            continue

        if char in _QUOTE_CHARS:
            if quote_char is None:
                quote_char = char
                i += 1
                continue
            if char == quote_char:
                quote_char = None
                i += 1
                continue

        if quote_char is None and char.isspace():
            if current:
                tokens.append("".join(current))
                current = []
            i += 1
            continue

        current.append(char)
        i += 1

    if current:
        tokens.append("".join(current))

    return tokens


def is_command(text: str) -> bool:
    """Check whether the first non-whitespace character is the command prefix."""
    return text.lstrip().startswith(COMMAND_PREFIX)


def parse_command(text: str) -> ParsedCommand | None:
    """Parse a command line.

    Returns:
        ParsedCommand, or None when the input is not a command or holds
        nothing but the prefix

    Example:
        >>> parse_command("/image a beautiful sunset")
        ParsedCommand(name='image', args=['a', 'beautiful', 'sunset'], raw='/image a beautiful sunset')
    """
    stripped = text.strip()
    if not is_command(stripped):
        return None

    tokens = tokenize(stripped[len(COMMAND_PREFIX):])
    if not tokens:
        return None

    return ParsedCommand(name=tokens[0].lower(), args=tokens[1:], raw=text)


# Argument helpers


def join_args(args: list[str]) -> str:
    """Join arguments back into one string (e.g. a title)."""
    return " ".join(args)


def parse_boolean(arg: str | None) -> bool | None:
    if not arg:
        return None
    lower = arg.lower()
    if lower in _TRUE_WORDS:
        return True
    if lower in _FALSE_WORDS:
        return False
    return None


def parse_number(arg: str | None) -> int | float | None:
    """Parse an integer or float argument; None if it is not a number."""
    if not arg:
        return None
    try:
        return int(arg)
    except ValueError:
        pass
    try:
        number = float(arg)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _long_form(name: str) -> str:
    return name if name.startswith("--") else f"--{name}"


def _short_form(name: str | None) -> str | None:
    if not name:
        return None
    return name if name.startswith("-") else f"-{name}"


def extract_flag(
    args: list[str],
    flag: str,
    short: str | None = None
) -> tuple[bool, list[str]]:
    """Pull a boolean flag (e.g. --force, -f) out of the arguments.

    Returns:
        Tuple of (flag present, remaining arguments)
    """
    long_flag = _long_form(flag)
    short_flag = _short_form(short)

    found = False
    remaining: list[str] = []
    for arg in args:
        if arg == long_flag or (short_flag is not None and arg == short_flag):
            found = True
        else:
            remaining.append(arg)

    return found, remaining


def extract_option(
    args: list[str],
    option: str,
    short: str | None = None
) -> tuple[str | None, list[str]]:
    """Pull a key-value option out of the arguments.

    Accepts --option=value, --option value, -o=value and -o value.
    The last occurrence wins. A trailing option with no value is kept
    in the remaining arguments.

    Returns:
        Tuple of (value or None, remaining arguments)
    """
    long_opt = _long_form(option)
    short_opt = _short_form(short)
    names = [long_opt] + ([short_opt] if short_opt else [])

    value: str | None = None
    remaining: list[str] = []

    i = 0
    while i < len(args):
        arg = args[i]

        matched = False
        for name in names:
            if arg.startswith(f"{name}="):
                value = arg[len(name) + 1:]
                matched = True
                break
            if arg == name and i + 1 < len(args):
                value = args[i + 1]
                i += 1
                matched = True
                break

        if not matched:
            remaining.append(arg)
        i += 1

    return value, remaining
