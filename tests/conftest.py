"""
Module: conftest.py
Description: Shared pytest fixtures for queuelink tests.

Provides credentials, a fixed clock, a respx-mocked service endpoint
and builders for the XML documents the service returns, so tests run
without network access.
"""

import hashlib
from datetime import datetime, timezone

import httpx
import pytest
import respx

from queuelink.models.credentials import Credentials
from queuelink.sqs_queue.client import QueueClient
from queuelink.sqs_queue.queue import Queue
from queuelink.transport.client import SignedHttpClient

ENDPOINT = "https://sqs.us-east-1.amazonaws.com"
QUEUE_URL = f"{ENDPOINT}/123456789012/jobs"
QUEUE_PATH = "/123456789012/jobs"
NAMESPACE = "http://queue.amazonaws.com/doc/2012-11-05/"


@pytest.fixture
def credentials():
    """Example credentials from the SigV4 documentation."""
    return Credentials(
        access_key="AKIDEXAMPLE",
        secret_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY"
    )


@pytest.fixture
def fixed_time():
    return datetime(2015, 8, 30, 12, 36, 0, tzinfo=timezone.utc)


@pytest.fixture
def service():
    """
    Mock the queue service endpoint.

    Routes are added per test; unmatched requests fail the test.
    """
    with respx.mock(base_url=ENDPOINT, assert_all_called=False) as router:
        yield router


@pytest.fixture
def http_client(credentials, fixed_time, service):
    """SignedHttpClient with a fixed clock against the mocked endpoint."""
    client = SignedHttpClient("us-east-1", credentials, clock=lambda: fixed_time)
    yield client
    client.close()


@pytest.fixture
def queue_client(http_client):
    return QueueClient(http_client, queue_prefix="test_")


@pytest.fixture
def queue(queue_client):
    return Queue(queue_client, QUEUE_URL)


def _wrap(action, result):
    return (
        f'<?xml version="1.0"?>'
        f'<{action}Response xmlns="{NAMESPACE}">'
        f'{result}'
        f'<ResponseMetadata><RequestId>req-1</RequestId></ResponseMetadata>'
        f'</{action}Response>'
    )


@pytest.fixture
def xml_response():
    """Build a successful action response."""
    def build(action, result="", status=200):
        return httpx.Response(status, text=_wrap(action, result))
    return build


@pytest.fixture
def error_response():
    """Build an error response as the service returns it."""
    def build(status, code, message="Failure", type="Sender"):
        return httpx.Response(
            status,
            text=(
                f'<?xml version="1.0"?>'
                f'<ErrorResponse xmlns="{NAMESPACE}">'
                f'<Error><Type>{type}</Type><Code>{code}</Code><Message>{message}</Message></Error>'
                f'<RequestId>req-err</RequestId>'
                f'</ErrorResponse>'
            ),
        )
    return build


@pytest.fixture
def send_response(xml_response):
    """Build a SendMessage response reporting the given body's digest."""
    def build(body=None, md5=None):
        digest = md5 or hashlib.md5(body.encode("utf-8")).hexdigest()
        return xml_response(
            "SendMessage",
            f"<SendMessageResult><MD5OfMessageBody>{digest}</MD5OfMessageBody>"
            f"<MessageId>msg-1</MessageId></SendMessageResult>",
        )
    return build


@pytest.fixture
def receive_response(xml_response):
    """Build a ReceiveMessage response holding the given message dicts."""
    def build(*messages):
        parts = []
        for message in messages:
            attributes = "".join(
                f"<Attribute><Name>{name}</Name><Value>{value}</Value></Attribute>"
                for name, value in message.get("attributes", {}).items()
            )
            parts.append(
                f"<Message><MessageId>{message['id']}</MessageId>"
                f"<ReceiptHandle>{message['handle']}</ReceiptHandle>"
                f"<MD5OfBody>ignored</MD5OfBody>"
                f"<Body>{message['body']}</Body>{attributes}</Message>"
            )
        return xml_response(
            "ReceiveMessage", f"<ReceiveMessageResult>{''.join(parts)}</ReceiveMessageResult>"
        )
    return build


@pytest.fixture
def form_of():
    """Decode the form body of a captured request."""
    def decode(request):
        return dict(httpx.QueryParams(request.content.decode("utf-8")))
    return decode
