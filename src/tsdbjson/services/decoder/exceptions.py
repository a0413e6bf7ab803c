"""Custom exceptions for the decoder service."""


class DecoderException(Exception):
    """Base exception for the decoder service."""
    pass


class StorageError(DecoderException):
    """Exception raised when fetching or writing an object fails."""
    pass


class ObjectNotFoundError(StorageError):
    """Exception raised when the requested object or bucket does not exist."""
    pass


class ObjectAccessDeniedError(StorageError):
    """Exception raised when credentials do not allow the operation."""
    pass


class InvalidEventError(DecoderException, ValueError):
    """Exception raised when a trigger event cannot be parsed."""
    pass
