import copy
from typing import Optional


class ResourceError(Exception):
    """base class for exceptions in gitea-resource."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)

    def with_context(self, context: str) -> "ResourceError":
        """
        return a copy of this error with context prepended to its message.

        the innermost cause is carried over so the caller can still inspect it.
        """
        wrapped = copy.copy(self)
        wrapped.message = f"{context}: {self.message}"
        wrapped.args = (wrapped.message,)
        wrapped.cause = self.cause if self.cause is not None else self
        return wrapped


class UrlParseError(ResourceError):
    """raised when the registry base uri is malformed or cannot be joined."""
    pass


class AuthHeaderError(ResourceError):
    """raised when the token cannot be used as a header value."""
    pass


class CommunicationError(ResourceError):
    """raised when the registry cannot be reached."""
    pass


class ApiError(ResourceError):
    """raised when the registry answers with a non-success status or an unexpected body."""
    def __init__(self, message: str, status_code: Optional[int] = None, cause: Optional[BaseException] = None):
        self.status_code = status_code
        super().__init__(message, cause)


class LocalFileIOError(ResourceError):
    """raised when a local file cannot be created, opened, read or written."""
    pass


class InvalidInputError(ResourceError):
    """raised for input the resource cannot act on."""
    pass


class MissingSourceFileError(ResourceError):
    """raised when a file to publish does not exist or is not a regular file."""
    pass
