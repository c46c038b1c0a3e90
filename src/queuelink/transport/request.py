"""
Module: request.py
Description: Single-use signed request.

A SignedRequest describes one call to the service. Its timestamp is
captured when it is built, it is signed when it is sent, and it can be
sent only once: a second send raises instead of replaying a signature
that may have expired.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Union
from urllib.parse import urljoin

import httpx

from queuelink.auth.signature import canonical_query_string, encode_form, sign_request
from queuelink.errors import ConfigurationError, RequestAlreadySent
from queuelink.models.credentials import Credentials
from queuelink.transport.response import Response
from queuelink.utils.logger import get_logger

logger = get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def service_endpoint(service: str, region: str) -> str:
    return f"https://{service}.{region}.amazonaws.com"


class SignedRequest:
    """
    One signed call to the service.

    Attributes:
        method: HTTP method
        path: Path of the call below the endpoint
        query: Query parameters
        body: Form fields (dict) or a raw body
        headers: Extra headers to send and sign
        region: Service region
        service: Service name
        credentials: Signing credentials
        timestamp: Request time, fixed at construction
    """

    def __init__(
        self,
        method: str,
        path: str,
        region: str,
        service: str,
        credentials: Credentials,
        query: Optional[Mapping[str, Any]] = None,
        body: Union[Mapping[str, Any], bytes, str, None] = None,
        headers: Optional[Mapping[str, str]] = None,
        endpoint: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        if not method or not isinstance(method, str):
            raise ConfigurationError("method must be a non-empty string")
        if not region or not service:
            raise ConfigurationError("region and service are required to sign a request")
        if credentials is None:
            raise ConfigurationError("credentials are required to sign a request")

        self.method = method.upper()
        self.path = path or "/"
        self.region = region
        self.service = service
        self.credentials = credentials
        self.query: Dict[str, Any] = dict(query or {})
        self.body = body
        self.headers: Dict[str, str] = dict(headers or {})
        self.endpoint = endpoint or service_endpoint(service, region)
        self.timestamp = clock()
        self._sent = False

    @property
    def url(self) -> str:
        return urljoin(self.endpoint.rstrip("/") + "/", self.path.lstrip("/"))

    @property
    def sent(self) -> bool:
        return self._sent

    @property
    def form_body(self) -> Union[bytes, str, None]:
        """The body as sent on the wire; dict bodies are form-encoded."""
        if isinstance(self.body, Mapping):
            return encode_form(self.body)
        return self.body

    def sign(self) -> Dict[str, str]:
        """Headers for this request, including x-amz-date and Authorization."""
        headers = dict(self.headers)
        if isinstance(self.body, Mapping):
            headers.setdefault("Content-Type", FORM_CONTENT_TYPE)
        return sign_request(
            self.method,
            self.url,
            self.query,
            headers,
            self.form_body,
            self.region,
            self.service,
            self.credentials,
            self.timestamp,
        )

    def send(self, http: httpx.Client) -> Response:
        """
        Sign and send the request.

        Args:
            http: Transport used for the call

        Returns:
            Response wrapping the HTTP status, headers and body

        Raises:
            RequestAlreadySent: If this request has been sent before
            httpx.HTTPError: On transport failures (timeouts, network errors)
        """
        if self._sent:
            raise RequestAlreadySent(
                f"{self.method} {self.url} was already sent; build a new request"
            )
        self._sent = True

        headers = self.sign()
        body = self.form_body
        if isinstance(body, str):
            body = body.encode("utf-8")

        logger.debug(
            "Sending signed request",
            method=self.method,
            url=self.url,
            amz_date=headers.get("x-amz-date")
        )

        # The query goes out byte-for-byte as it was signed
        url = self.url
        if self.query:
            url = f"{url}?{canonical_query_string(self.query)}"

        http_response = http.request(
            self.method,
            url,
            content=body,
            headers=headers,
        )
        return Response(self, http_response)
