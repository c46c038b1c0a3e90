"""
Module: test_signed_client.py
Description: Unit tests for SignedHttpClient, SignedRequest and Response.

Covers single-use requests, signed headers on the wire, action()
error classification and the bounded 5xx retry policy, using respx
to simulate the service.
"""

from datetime import datetime, timezone

import httpx
import pytest

from queuelink.auth.signature import canonical_query_string
from queuelink.errors import ActionError, ConfigurationError, RequestAlreadySent
from queuelink.models.credentials import Credentials
from queuelink.transport.client import SignedHttpClient
from queuelink.transport.retry import is_retryable

QUEUE_PATH = "/123456789012/jobs"
QUEUE_URL = f"https://sqs.us-east-1.amazonaws.com{QUEUE_PATH}"


class TestSignedHttpClientInit:
    """Test cases for client construction."""

    def test_client_initialization(self, credentials):
        client = SignedHttpClient("us-east-1", credentials)

        assert client.region == "us-east-1"
        assert client.service == "sqs"
        assert client.max_attempts == 3

    def test_invalid_arguments(self, credentials):
        """Missing signing inputs are configuration errors."""
        with pytest.raises(ConfigurationError, match="region must be a non-empty string"):
            SignedHttpClient("", credentials)

        with pytest.raises(ConfigurationError, match="service must be a non-empty string"):
            SignedHttpClient("us-east-1", credentials, service="")

        with pytest.raises(ConfigurationError):
            SignedHttpClient("us-east-1", None)

        with pytest.raises(ConfigurationError):
            SignedHttpClient("us-east-1", credentials, max_attempts=0)

    def test_transport_lifecycle(self, credentials):
        """The owned transport is created once, reused, and closed."""
        client = SignedHttpClient("us-east-1", credentials)
        first = client.http

        assert client.http is first

        client.close()
        assert first.is_closed

    def test_injected_transport_not_closed(self, credentials):
        """A caller-provided transport stays open after close()."""
        transport = httpx.Client()
        with SignedHttpClient("us-east-1", credentials, http=transport) as client:
            assert client.http is transport

        assert not transport.is_closed
        transport.close()


class TestRequest:
    """Test cases for request() and SignedRequest."""

    def test_request_sends_signed_headers(self, http_client, service):
        """The wire request carries x-amz-date and the Authorization header."""
        route = service.get("/").respond(200, text="<ok/>")

        response = http_client.request("GET", "/", {"Action": "ListQueues"})

        assert response.status == 200
        assert response.success
        sent = route.calls.last.request
        assert sent.headers["x-amz-date"] == "20150830T123600Z"
        assert sent.headers["Authorization"].startswith(
            "AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/20150830/us-east-1/sqs/aws4_request, "
            "SignedHeaders=host;x-amz-date, Signature="
        )
        assert sent.url.params["Action"] == "ListQueues"

    def test_form_body_encoding(self, http_client, service):
        """Dict bodies are sent form-encoded with the service's percent-encoding."""
        route = service.post("/").respond(200)

        http_client.request("POST", "/", body={"MessageBody": "a b"})

        sent = route.calls.last.request
        assert sent.content == b"MessageBody=a%20b"
        assert sent.headers["Content-Type"].startswith("application/x-www-form-urlencoded")
        assert "content-type" in sent.headers["Authorization"]

    def test_query_sent_as_signed(self, http_client, service):
        """Query values go out with the same percent-encoding used for signing."""
        route = service.get("/").respond(200)
        query = {"QueueNamePrefix": "a b", "x": "*~"}

        http_client.request("GET", "/", query)

        sent = route.calls.last.request
        assert sent.url.query == canonical_query_string(query).encode("ascii")
        assert sent.url.query == b"QueueNamePrefix=a%20b&x=%2A~"

    def test_request_is_single_use(self, http_client, service):
        """A sent request refuses to be sent again."""
        route = service.post("/").respond(200)
        signed = http_client.build_request("POST", "/", body={"Action": "ListQueues"})

        signed.send(http_client.http)

        assert signed.sent
        with pytest.raises(RequestAlreadySent):
            signed.send(http_client.http)
        assert route.call_count == 1

    def test_each_request_gets_fresh_timestamp(self, credentials, service):
        """The clock is read once per request."""
        ticks = iter(["first", "second"])
        times = {}

        def clock():
            tick = next(ticks)
            times[tick] = datetime(2024, 1, 1, 0, 0, len(times), tzinfo=timezone.utc)
            return times[tick]

        route = service.get("/").respond(200)
        client = SignedHttpClient("us-east-1", credentials, clock=clock)

        client.request("GET", "/")
        client.request("GET", "/")

        dates = [call.request.headers["x-amz-date"] for call in route.calls]
        assert dates == ["20240101T000000Z", "20240101T000001Z"]
        client.close()

    def test_request_id_and_doc(self, http_client, service):
        service.get("/").respond(
            200,
            headers={"x-amzn-RequestId": "abc-123"},
            text='<R xmlns="urn:x"><QueueUrl>u</QueueUrl></R>',
        )

        response = http_client.request("GET", "/")

        assert response.request_id == "abc-123"
        assert response.doc.value("queue_url") == "u"
        assert response.doc is response.doc

    def test_non_xml_body_reads_as_empty(self, http_client, service):
        service.get("/").respond(502, text="Bad Gateway")

        response = http_client.request("GET", "/")

        assert not response.success
        assert response.doc.value("error.code") is None


class TestAction:
    """Test cases for action() and its retry policy."""

    def test_action_posts_form_with_action_name(self, http_client, service, xml_response, form_of):
        route = service.post(QUEUE_PATH).mock(return_value=xml_response("DeleteMessage"))

        response = http_client.action("DeleteMessage", QUEUE_URL, {"ReceiptHandle": "h"})

        assert response.success
        assert form_of(route.calls.last.request) == {
            "ReceiptHandle": "h",
            "Action": "DeleteMessage",
        }

    def test_retries_5xx_until_success(self, http_client, service, error_response, xml_response):
        """503, 503, then 200: three calls and no error."""
        route = service.post("/").mock(side_effect=[
            error_response(503, "ServiceUnavailable", type="Receiver"),
            error_response(503, "ServiceUnavailable", type="Receiver"),
            xml_response("ListQueues"),
        ])

        response = http_client.action("ListQueues")

        assert response.success
        assert route.call_count == 3

    def test_gives_up_after_three_5xx(self, http_client, service, error_response):
        """A third consecutive 5xx propagates."""
        route = service.post("/").mock(
            return_value=error_response(500, "InternalError", "Boom", type="Receiver")
        )

        with pytest.raises(ActionError) as exc_info:
            http_client.action("ListQueues")

        assert route.call_count == 3
        assert exc_info.value.status == 500
        assert exc_info.value.code == "InternalError"

    def test_4xx_not_retried(self, http_client, service, error_response):
        """A 400 raises at once with the parsed type, code and message."""
        route = service.post("/").mock(
            return_value=error_response(400, "InvalidParameterValue", "Bad value")
        )

        with pytest.raises(ActionError) as exc_info:
            http_client.action("ListQueues")

        error = exc_info.value
        assert route.call_count == 1
        assert error.type == "Sender"
        assert error.code == "InvalidParameterValue"
        assert error.message == "Bad value"
        assert error.status == 400
        assert str(error) == "HTTP 400: Sender InvalidParameterValue Bad value"

    def test_max_attempts_configurable(self, credentials, fixed_time, service, error_response):
        route = service.post("/").mock(return_value=error_response(503, "Unavailable"))
        client = SignedHttpClient(
            "us-east-1", credentials, max_attempts=1, clock=lambda: fixed_time
        )

        with pytest.raises(ActionError):
            client.action("ListQueues")

        assert route.call_count == 1
        client.close()

    def test_transport_errors_not_retried(self, http_client, service):
        """Transport failures propagate unchanged."""
        route = service.post("/").mock(side_effect=httpx.ConnectTimeout("timeout"))

        with pytest.raises(httpx.ConnectTimeout):
            http_client.action("ListQueues")

        assert route.call_count == 1


class TestIsRetryable:
    """Test cases for the retry classifier."""

    @pytest.mark.parametrize("status,expected", [
        (500, True), (503, True), (599, True),
        (400, False), (403, False), (404, False), (600, False),
    ])
    def test_status_classification(self, status, expected):
        assert is_retryable(ActionError("Receiver", "X", "m", status)) is expected

    def test_other_exceptions_not_retryable(self):
        assert is_retryable(ValueError("nope")) is False


def test_credentials_are_immutable():
    credentials = Credentials(access_key="AKID", secret_key="secret")

    with pytest.raises(Exception):
        credentials.access_key = "other"
    assert "secret" not in repr(credentials)
