"""
Custom exception hierarchy for the preview generator.

Recoverable conditions (a missing file, an unreachable storage backend, a
preview request that cannot be satisfied) each get their own type so the
sweep can isolate them without masking anything else.
"""


class PreviewGeneratorError(Exception):
    """Base exception for all preview generator errors."""
    pass


class ConfigurationError(PreviewGeneratorError):
    """Raised when a configured value is invalid."""
    pass


class NotFoundError(PreviewGeneratorError):
    """Raised when a node or source file does not exist."""
    pass


class StorageNotAvailableError(PreviewGeneratorError):
    """Raised when the storage backing a folder cannot be reached."""

    def __init__(self, message: str, hint: str = ''):
        super().__init__(message)
        self.hint = hint or message


class InvalidPreviewArgumentError(PreviewGeneratorError):
    """Raised when a preview cannot be produced for a file/specification pair."""
    pass


class DatabaseError(PreviewGeneratorError):
    """Raised when catalog operations fail."""
    pass
