"""
Module: models
Description: Package initialization for Pydantic data models.

- Credentials: access key / secret key pair used for signing
- Message: message received from a queue
"""

from .credentials import Credentials
from .message import Message

__all__ = [
    "Credentials",
    "Message",
]
