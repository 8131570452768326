"""
Exception taxonomy for the reconciliation pipeline.

Recoverable errors are absorbed by the stage that detects them; everything
that reaches the CLI is fatal for the run.
"""


class DeatomizeError(Exception):
    """Base error for the project."""


class InputFormatError(DeatomizeError):
    """Raised when the input record file is malformed or unreadable."""

    def __init__(self, message: str, line_number: int | None = None, line: str | None = None):
        self.line_number = line_number
        self.line = line
        self.message = message
        if line_number is not None:
            message = f"line {line_number}: {message}: {line!r}"
        super().__init__(message)


class ConfigurationError(DeatomizeError):
    """Raised when settings cannot be loaded or are invalid."""


class BackendError(DeatomizeError):
    """A backing-store call failed."""

    def __init__(self, operation: str, target: str, message: str):
        self.operation = operation
        self.target = target
        self.message = message
        super().__init__(f"[{operation}] {target}: {message}")


class EntryNotFoundError(BackendError):
    """The backing store reports that the file or path does not exist."""


class BackendUnavailableError(BackendError):
    """The backing store cannot be reached at all."""


class VersionListingError(DeatomizeError):
    """Version history could not be listed; no safe decision is possible."""

    def __init__(self, path: str, cause: BackendError):
        self.path = path
        self.cause = cause
        super().__init__(f"cannot list versions of {path}: {cause}")
