"""
Package: queuelink
Description: Client for an SQS-style queue service over SigV4-signed HTTPS.

Exports the pieces most callers need: the signed transport, the queue
client and its entities, the listeners and the error classes.
"""

from .config.settings import Settings
from .errors import (
    ActionError,
    ConfigurationError,
    MessageDigestMismatch,
    QueueError,
    QueueLinkError,
    QueueNotFound,
    RequestAlreadySent,
)
from .listener.worker import MultiQueueListener, QueueListener
from .models.credentials import Credentials
from .models.message import Message
from .sqs_queue.client import QueueClient
from .sqs_queue.queue import Queue
from .transport.client import SignedHttpClient

__version__ = "0.1.0"

__all__ = [
    "ActionError",
    "ConfigurationError",
    "Credentials",
    "Message",
    "MessageDigestMismatch",
    "MultiQueueListener",
    "Queue",
    "QueueClient",
    "QueueError",
    "QueueLinkError",
    "QueueListener",
    "QueueNotFound",
    "RequestAlreadySent",
    "Settings",
    "SignedHttpClient",
]
