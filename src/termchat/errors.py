"""Application-level exception types for termchat."""


class TermChatError(Exception):
    """Base exception for termchat."""


class ConfigurationError(TermChatError):
    """Raised when required configuration (API key, paths) is missing or invalid."""


class RegistrationConflictError(TermChatError, ValueError):
    """Raised when a command name or alias is already taken in the registry."""


class ChatAPIError(TermChatError):
    """Raised when the chat service answers with a non-2xx status."""

    def __init__(self, status_code: int, body: str, endpoint: str | None = None):
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint
        where = f" ({endpoint})" if endpoint else ""
        detail = f": {body}" if body else ""
        super().__init__(f"Chat API error {status_code}{where}{detail}")


class ResponseValidationError(TermChatError):
    """Raised when a full response payload does not match the expected shape."""
