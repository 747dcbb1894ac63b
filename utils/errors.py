"""
Defines custom exception classes for the application.
"""
from typing import Optional


class CommitMatchException(Exception):
    """Base exception class for commitmatch application."""
    pass


class ConfigError(CommitMatchException):
    """Raised when there is a configuration error."""
    pass


class InvalidReference(CommitMatchException):
    """Raised when a repository URL cannot be parsed."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Invalid GitHub URL: {url!r}")


class UpstreamError(CommitMatchException):
    """Raised when the upstream API answers with a non-success status."""

    def __init__(self, status: int, message: Optional[str] = None):
        self.status = status
        super().__init__(message or f"GitHub API error: {status}")


class UpstreamUnreachable(CommitMatchException):
    """Raised when the upstream API cannot be reached at all."""
    pass


class DecodeError(CommitMatchException):
    """Raised when an upstream payload does not have the expected shape."""
    pass


class SourceError(CommitMatchException):
    """Raised when a commit source cannot be found or created."""
    pass


class FormatterError(CommitMatchException):
    """Raised when an error occurs during report formatting."""
    pass
