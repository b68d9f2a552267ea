"""Error types raised across extraction, encoding and sync."""


class MemocalError(Exception):
    """Base class for memocal failures."""


class GrammarError(MemocalError):
    """The temporal grammar could not process the input."""


class EncodingError(MemocalError):
    """The calendar file encoder failed to produce a payload."""


class SyncError(MemocalError):
    """A remote calendar operation failed."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Calendar {operation} failed: {detail}")


class InputValidationError(MemocalError):
    """User input cannot be saved; carries a user-facing message."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
