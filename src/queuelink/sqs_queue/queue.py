"""
Module: queue.py
Description: A single queue and its message operations.

A Queue is a lightweight handle: a shared QueueClient plus the queue
URL. Two handles with the same URL are equal.
"""

import hashlib
import json
import re
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional, Union
from urllib.parse import urlsplit

from queuelink.errors import ActionError, ConfigurationError, QueueNotFound
from queuelink.models.message import Message
from queuelink.utils.batch_helpers import iter_batches
from queuelink.utils.logger import get_logger
from queuelink.utils.xml_document import ATTRIBUTE_NAME, ATTRIBUTE_VALUE, MESSAGE_FIELDS, text_of

if TYPE_CHECKING:
    from queuelink.sqs_queue.client import QueueClient

logger = get_logger(__name__)

MAX_NAME_LENGTH = 80
MAX_POLL_TIME = 20
DEFAULT_POLL_TIME = 5

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_]")
_DIGITS = re.compile(r"\A\d+\Z")


def sanitize_name(name: str) -> str:
    """
    Make a queue name acceptable to the service.

    Characters other than letters, digits and underscores are removed.
    Names longer than 80 characters keep their first 75 characters and
    are completed with the MD5 of the full name, cut to 80.
    """
    name = _INVALID_NAME_CHARS.sub("", name)
    if len(name) > MAX_NAME_LENGTH:
        digest = hashlib.md5(name.encode("utf-8")).hexdigest()
        name = (name[:75] + digest)[:MAX_NAME_LENGTH]
    return name


def _coerce(value: str) -> Union[int, str]:
    return int(value) if _DIGITS.match(value) else value


class Queue:
    """
    A queue on the service.

    Attributes:
        client: QueueClient shared with other queues (not owned)
        url: Queue URL as returned by the service
    """

    def __init__(self, client: "QueueClient", url: str):
        if not url or not isinstance(url, str):
            raise ConfigurationError("url must be a non-empty string")
        self.client = client
        self.url = url

    @property
    def name(self) -> str:
        return self.url.rstrip("/").split("/")[-1]

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Queue) and other.url == self.url

    def __hash__(self) -> int:
        return hash(self.url)

    def __repr__(self) -> str:
        return f"Queue({self.url!r})"

    def attributes(self, *names: str) -> Union[None, int, str, Dict[str, Union[int, str]]]:
        """
        Return queue attributes.

        Pass attribute names, or "All". All-digit values are returned as
        integers. With one name requested and one value returned, the
        bare value is returned; otherwise a dict of name to value.

        Example:
            >>> queue.attributes("ApproximateNumberOfMessages")
            10
            >>> queue.attributes("ApproximateNumberOfMessages", "DelaySeconds")
            {'ApproximateNumberOfMessages': 10, 'DelaySeconds': 0}
        """
        if not names:
            return None

        response = self.client.get_queue_attributes(self.path, names)
        values: Dict[str, Union[int, str]] = {}
        for element in response.doc.elements("attributes"):
            name = text_of(element, ATTRIBUTE_NAME)
            if name is not None:
                values[name] = _coerce(text_of(element, ATTRIBUTE_VALUE) or "")

        if len(values) == 1 and len(names) == 1:
            return next(iter(values.values()))
        return values

    def delete(self):
        return self.client.delete_queue(self.path)

    def post_message(self, obj: Any, delay_seconds: Optional[int] = None):
        """Post a JSON-serializable object to the queue."""
        return self.client.send_message(self.path, json.dumps(obj), delay_seconds)

    def post_messages(self, objects: Iterable[Any]) -> int:
        """
        Post many JSON-serializable objects using batch sends.

        Objects are accumulated and every complete group of 10 is sent as
        soon as it is full; the remaining partial group is sent at the end.

        Returns:
            Number of messages sent
        """
        sent = 0
        for batch in iter_batches(json.dumps(obj) for obj in objects):
            self.client.send_message_batch(self.path, batch)
            sent += len(batch)
        logger.debug("Messages posted", queue=self.name, count=sent)
        return sent

    def retrieve(self, poll_time: int = 1) -> Optional[Message]:
        """
        Receive at most one message, waiting up to poll_time seconds.

        Returns:
            Message, or None if nothing arrived within poll_time

        Raises:
            QueueNotFound: If the service answers HTTP 404
            ConfigurationError: If poll_time is outside 0..20
        """
        if not 0 <= poll_time <= MAX_POLL_TIME:
            raise ConfigurationError(f"poll_time must be between 0 and {MAX_POLL_TIME}")

        try:
            response = self.client.receive_message(
                self.path, wait_time_seconds=poll_time, max_messages=1
            )
        except ActionError as e:
            if e.status == 404:
                raise QueueNotFound(self, f"not found at {self.url}") from e
            raise

        if response.status == 404:
            raise QueueNotFound(self, f"not found at {self.url}")

        doc = response.doc
        for element in doc.elements("messages"):
            return Message(
                queue=self,
                id=text_of(element, MESSAGE_FIELDS["id"]) or "",
                receipt_handle=text_of(element, MESSAGE_FIELDS["receipt_handle"]) or "",
                body=text_of(element, MESSAGE_FIELDS["body"]) or "",
                attributes=doc.name_value_pairs(element),
            )
        return None

    def retrieve_one(self, poll_time: int = 5) -> Message:
        """Block until a message arrives and return it."""
        message = None
        while message is None:
            message = self.retrieve(poll_time)
        return message

    def delete_message(self, handle: str) -> bool:
        return self.client.delete_message(self.path, handle).success

    def return_message(self, handle: str, visibility_seconds: int = 0):
        """Return a received message to the queue; 0 makes it visible at once."""
        return self.client.change_message_visibility(self.path, handle, visibility_seconds)
