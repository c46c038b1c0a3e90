"""
Module: client.py
Description: Queue service client for queue and message lifecycle.

Every operation is a named action sent through a SignedHttpClient.
Two operations carry extra integrity logic: send_message() verifies
the MD5 digest the service reports for the stored body, and get_queue()
maps a missing queue to None instead of an error.
"""

import hashlib
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from queuelink.config.settings import Settings
from queuelink.errors import ActionError, ConfigurationError, MessageDigestMismatch
from queuelink.sqs_queue.queue import DEFAULT_POLL_TIME, MAX_POLL_TIME, Queue, sanitize_name
from queuelink.transport.client import SignedHttpClient
from queuelink.transport.response import Response
from queuelink.transport.retry import send_message_retrying
from queuelink.utils.batch_helpers import MAX_BATCH_SIZE
from queuelink.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

# Error codes the service uses for "queue does not exist"
NON_EXISTENT_QUEUE_CODES = frozenset({
    "AWS.SimpleQueueService.NonExistentQueue",
    "QueueDoesNotExist",
})


def md5_hex(body: str) -> str:
    return hashlib.md5(body.encode("utf-8")).hexdigest()


def _numbered(prefix: str, values: Iterable[Any]) -> Dict[str, Any]:
    """Expand values into Prefix.1, Prefix.2, ... parameters."""
    return {f"{prefix}.{index}": value for index, value in enumerate(values, start=1)}


class QueueClient:
    """
    Client for queue and message operations.

    Attributes:
        http: Signed HTTP client used for every action
        queue_prefix: Prefix applied to every queue name this client sees
        poll_time: Default long-poll wait for listeners on this client's queues

    Example:
        >>> client = QueueClient(SignedHttpClient("us-east-1", credentials), "app_")
        >>> queue = client.get_or_create_queue("jobs")
        >>> queue.post_message({"job": 1})
    """

    def __init__(
        self,
        http: SignedHttpClient,
        queue_prefix: str = "",
        poll_time: int = DEFAULT_POLL_TIME,
    ):
        if not isinstance(http, SignedHttpClient):
            raise ConfigurationError("http must be a SignedHttpClient instance")
        if not 1 <= poll_time <= MAX_POLL_TIME:
            raise ConfigurationError(f"poll_time must be between 1 and {MAX_POLL_TIME}")

        self.http = http
        self.queue_prefix = queue_prefix or ""
        self.poll_time = poll_time

        logger.debug(
            "Queue client initialized",
            region=http.region,
            queue_prefix=self.queue_prefix,
            poll_time=poll_time
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "QueueClient":
        """Build a client, and its SignedHttpClient, from Settings."""
        configure_logging(settings.log_level)
        http = SignedHttpClient(
            settings.region,
            settings.credentials(),
            service=settings.service,
            endpoint_url=settings.endpoint_url,
            receive_timeout=settings.receive_timeout,
            verify_ssl=settings.verify_ssl,
            max_attempts=settings.max_action_attempts,
        )
        return cls(http, settings.queue_prefix, settings.poll_time)

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "QueueClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _queue_name(self, name: str) -> str:
        return sanitize_name(f"{self.queue_prefix}{name}")

    # Queues

    def create_queue(self, name: str, attributes: Optional[Mapping[str, Any]] = None) -> Queue:
        """
        Create a queue, or return the existing one with the same attributes.

        Args:
            name: Queue name, without the client prefix
            attributes: Queue attributes, e.g. {"VisibilityTimeout": 60}

        Returns:
            Queue for the created queue

        Raises:
            ActionError: If the service rejects the request
        """
        params: Dict[str, Any] = {"QueueName": self._queue_name(name)}
        for index, (key, value) in enumerate((attributes or {}).items(), start=1):
            params[f"Attribute.{index}.Name"] = key
            params[f"Attribute.{index}.Value"] = value

        response = self.http.action("CreateQueue", "/", params)
        url = response.doc.value("queue_url")
        if not url:
            raise ActionError("Receiver", "MissingQueueUrl",
                              f"Could not create queue {name}", response.status)

        logger.info("Queue created", queue_url=url)
        return Queue(self, url)

    def get_queue(self, name: str) -> Optional[Queue]:
        """
        Look up a queue by name.

        Returns:
            Queue if it exists, None if the service reports it does not

        Raises:
            ActionError: For any other service failure
        """
        try:
            response = self.http.action(
                "GetQueueUrl", "/", {"QueueName": self._queue_name(name)}
            )
        except ActionError as e:
            if e.code in NON_EXISTENT_QUEUE_CODES:
                logger.debug("Queue does not exist", queue_name=name)
                return None
            raise

        url = response.doc.value("queue_url")
        return Queue(self, url) if url else None

    def get_or_create_queue(self, name: str) -> Queue:
        return self.get_queue(name) or self.create_queue(name)

    def list_queues(self, prefix: str = "") -> List[Queue]:
        """Queues whose names start with the client prefix plus prefix."""
        response = self.http.action(
            "ListQueues", "/", {"QueueNamePrefix": f"{self.queue_prefix}{prefix}"}
        )
        return [Queue(self, url) for url in response.doc.values("queue_urls")]

    def delete_queue(self, queue_url: str) -> Response:
        logger.info("Deleting queue", queue_url=queue_url)
        return self.http.action("DeleteQueue", queue_url)

    def get_queue_attributes(
        self, queue_url: str, attributes: Sequence[str] = ("All",)
    ) -> Response:
        """Fetch queue attributes; "All" returns every available attribute."""
        return self.http.action(
            "GetQueueAttributes",
            queue_url,
            _numbered("AttributeName", [str(a) for a in attributes]),
        )

    # Messages

    def send_message(
        self, queue_url: str, body: str, delay_seconds: Optional[int] = None
    ) -> Response:
        """
        Put a message on a queue and verify what the service stored.

        The MD5 digest reported by the service is compared with the local
        digest of the body. On a mismatch the whole send is repeated once.

        Args:
            queue_url: Queue URL (or path)
            body: Message body
            delay_seconds: Optional delay before the message becomes visible

        Returns:
            Response of the successful send

        Raises:
            MessageDigestMismatch: If both attempts report a different digest
            ActionError: If the service rejects the send
        """
        if not isinstance(body, str):
            raise ConfigurationError("body must be a string")

        params: Dict[str, Any] = {"MessageBody": body}
        if delay_seconds is not None:
            params["DelaySeconds"] = delay_seconds

        expected = md5_hex(body)

        for attempt in send_message_retrying():
            with attempt:
                response = self.http.action("SendMessage", queue_url, params)
                got = response.doc.value("md5_of_message_body")
                if got != expected:
                    logger.warning(
                        "Sent message digest mismatch",
                        queue_url=queue_url,
                        expected=expected,
                        got=got,
                        attempt=attempt.retry_state.attempt_number
                    )
                    raise MessageDigestMismatch(body, expected, got)

                logger.debug(
                    "Message sent",
                    queue_url=queue_url,
                    message_id=response.doc.value("message_id")
                )
                return response

    def send_message_batch(self, queue_url: str, bodies: Sequence[str]) -> Response:
        """
        Put up to 10 messages on a queue in one call.

        Raises:
            ConfigurationError: If bodies is empty or holds more than 10 entries
            ActionError: If the service rejects the batch
        """
        if not bodies:
            raise ConfigurationError("Batch cannot be empty")
        if len(bodies) > MAX_BATCH_SIZE:
            raise ConfigurationError(
                f"Batch size {len(bodies)} exceeds maximum allowed size of {MAX_BATCH_SIZE}"
            )

        params: Dict[str, Any] = {}
        for index, body in enumerate(bodies, start=1):
            params[f"SendMessageBatchRequestEntry.{index}.Id"] = f"msg{index}"
            params[f"SendMessageBatchRequestEntry.{index}.MessageBody"] = body

        response = self.http.action("SendMessageBatch", queue_url, params)
        logger.debug("Message batch sent", queue_url=queue_url, count=len(bodies))
        return response

    def receive_message(
        self,
        queue_url: str,
        wait_time_seconds: int = 0,
        max_messages: int = 1,
        visibility_timeout: Optional[int] = None,
    ) -> Response:
        """Long-poll a queue for up to max_messages messages."""
        params: Dict[str, Any] = {
            "WaitTimeSeconds": wait_time_seconds,
            "MaxNumberOfMessages": max_messages,
            "AttributeName.1": "All",
        }
        if visibility_timeout is not None:
            params["VisibilityTimeout"] = visibility_timeout
        return self.http.action("ReceiveMessage", queue_url, params)

    def delete_message(self, queue_url: str, receipt_handle: str) -> Response:
        return self.http.action(
            "DeleteMessage", queue_url, {"ReceiptHandle": receipt_handle}
        )

    def change_message_visibility(
        self, queue_url: str, receipt_handle: str, visibility_timeout: int
    ) -> Response:
        """
        Change how long a received message stays hidden.

        A timeout of 0 makes the message visible to other consumers immediately.
        """
        return self.http.action(
            "ChangeMessageVisibility",
            queue_url,
            {"ReceiptHandle": receipt_handle, "VisibilityTimeout": visibility_timeout},
        )
