"""
Module: message.py
Description: Message received from a queue.

Key Components:
- Message: received message with its receipt handle and attributes
- object: JSON payload, decoded on first access and cached

Dependencies: pydantic, json
"""

import json
from functools import cached_property
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """
    A message received from a queue.

    The receipt handle is only valid until the visibility timeout elapses
    or the message is deleted or returned; the service, not this object,
    enforces that.

    Attributes:
        queue: Queue the message was received from
        id: Service message id
        receipt_handle: Handle used to delete or return this delivery
        body: Raw message body
        attributes: Message attributes (SentTimestamp, ApproximateReceiveCount, ...)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    queue: Any = Field(..., exclude=True, repr=False, description="Originating queue")
    id: str = Field(..., description="Service message id")
    receipt_handle: str = Field(..., description="Receipt handle for this delivery")
    body: str = Field(..., description="Raw message body")
    attributes: Dict[str, str] = Field(
        default_factory=dict,
        description="Message attributes returned by the service"
    )

    @cached_property
    def object(self) -> Any:
        """The payload Queue.post_message() placed in the body."""
        return json.loads(self.body)

    def delete(self) -> bool:
        """Delete the message once it has been processed."""
        return self.queue.delete_message(self.receipt_handle)

    def return_message(self, visibility_seconds: int = 0) -> Any:
        """Make the message visible to other consumers again."""
        return self.queue.return_message(self.receipt_handle, visibility_seconds)
