"""
Module: errors.py
Description: Exception hierarchy for queuelink.

Every error raised by the library derives from QueueLinkError so
callers can catch library failures in one place and still branch on
the specific class (or on the service-reported code of an ActionError).
"""

from typing import Any, Optional


class QueueLinkError(Exception):
    """Base class for all queuelink errors."""


class ConfigurationError(QueueLinkError, ValueError):
    """Signing inputs or client arguments are missing or malformed."""


class RequestAlreadySent(QueueLinkError, RuntimeError):
    """A SignedRequest was sent a second time."""


class ActionError(QueueLinkError):
    """
    The service rejected or failed a named action.

    Attributes:
        type: Service-reported error type (Sender/Receiver)
        code: Service-reported error code
        message: Service-reported error message
        status: HTTP status of the response
    """

    def __init__(self, type: str, code: str, message: str, status: int):
        self.type = type
        self.code = code
        self.message = message
        self.status = status
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Server-side (5xx) failures are considered transient."""
        return 500 <= self.status <= 599

    def __str__(self) -> str:
        return f"HTTP {self.status}: {self.type} {self.code} {self.message}"


class MessageDigestMismatch(QueueLinkError):
    """
    The MD5 digest returned for a sent message did not match the body.

    Attributes:
        body: The message body that was sent
        expected: Locally computed MD5 hex digest
        got: Digest reported by the service
    """

    def __init__(self, body: str, expected: str, got: Optional[str]):
        self.body = body
        self.expected = expected
        self.got = got
        super().__init__(
            f"MD5 mismatch for sent message: expected {expected}, got {got}"
        )


class QueueError(QueueLinkError):
    """An error tied to a specific queue."""

    def __init__(self, queue: Any, message: str):
        self.queue = queue
        super().__init__(f"queue: {queue.name}; {message}")


class QueueNotFound(QueueError):
    """The queue no longer exists at its URL."""
