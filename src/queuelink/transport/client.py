"""
Module: client.py
Description: Signed HTTP client for the queue service.

Issues exactly one signed wire call per request() and exposes action(),
which encodes a named remote operation as a form POST, turns error
responses into ActionError and retries server-side failures a bounded
number of times.

Key Components:
- SignedHttpClient: owns (or borrows) the httpx.Client transport
- request(): one signed call
- action(): named operation with classified retries

Dependencies: httpx, tenacity
"""

from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urlsplit

import httpx

from queuelink.errors import ActionError, ConfigurationError
from queuelink.models.credentials import Credentials
from queuelink.transport.request import SignedRequest, utc_now
from queuelink.transport.response import Response
from queuelink.transport.retry import DEFAULT_ACTION_ATTEMPTS, action_retrying
from queuelink.utils.logger import get_logger

logger = get_logger(__name__)


class SignedHttpClient:
    """
    HTTP client that signs every call with SigV4.

    The httpx.Client is created on first use and reused for every later
    call, including calls from concurrent listener threads (httpx.Client
    is safe to share between threads). close() releases it; a transport
    passed in via `http` belongs to the caller and is never closed here.

    Example:
        >>> with SignedHttpClient("us-east-1", credentials) as http:
        ...     response = http.action("ListQueues")
    """

    def __init__(
        self,
        region: str,
        credentials: Credentials,
        service: str = "sqs",
        endpoint_url: Optional[str] = None,
        receive_timeout: float = 30.0,
        verify_ssl: bool = True,
        max_attempts: int = DEFAULT_ACTION_ATTEMPTS,
        http: Optional[httpx.Client] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the signed client.

        Args:
            region: Service region, e.g. us-east-1
            credentials: Access key / secret key pair
            service: Service name used in the endpoint and credential scope
            endpoint_url: Endpoint override (defaults to the regional endpoint)
            receive_timeout: HTTP timeout in seconds; must exceed the long-poll wait
            verify_ssl: Verify TLS certificates
            max_attempts: Total attempts for actions failing with HTTP 5xx
            http: Externally managed transport
            clock: Source of request timestamps

        Raises:
            ConfigurationError: If region, service or credentials are missing
        """
        if not region or not isinstance(region, str):
            raise ConfigurationError("region must be a non-empty string")
        if not service or not isinstance(service, str):
            raise ConfigurationError("service must be a non-empty string")
        if not isinstance(credentials, Credentials):
            raise ConfigurationError("credentials must be a Credentials instance")
        if max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")

        self.region = region
        self.service = service
        self.credentials = credentials
        self.endpoint_url = endpoint_url
        self.timeout = httpx.Timeout(receive_timeout, connect=min(receive_timeout, 10.0))
        self.verify_ssl = verify_ssl
        self.max_attempts = max_attempts
        self.clock = clock
        self._http = http
        self._owns_http = http is None

        logger.debug(
            "Signed HTTP client initialized",
            region=region,
            service=service,
            endpoint_url=endpoint_url,
            access_key=credentials.access_key
        )

    @property
    def http(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(timeout=self.timeout, verify=self.verify_ssl)
        return self._http

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_http and self._http is not None:
            self._http.close()
            self._http = None

    def __enter__(self) -> "SignedHttpClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def build_request(
        self,
        method: str,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> SignedRequest:
        return SignedRequest(
            method,
            path,
            region=self.region,
            service=self.service,
            credentials=self.credentials,
            query=query,
            body=body,
            headers=headers,
            endpoint=self.endpoint_url,
            clock=self.clock,
        )

    def request(
        self,
        method: str,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Response:
        """
        Perform one signed HTTP call.

        Args:
            method: HTTP method (GET, POST, ...)
            path: Path below the endpoint; do not append the query string
            query: Query parameters
            body: Form fields as a dict, or a raw str/bytes body
            headers: Additional headers to send

        Returns:
            Response for the call, whatever its status
        """
        return self.build_request(method, path, query, body, headers).send(self.http)

    def action(
        self,
        name: str,
        path: str = "/",
        params: Optional[Mapping[str, Any]] = None,
    ) -> Response:
        """
        Call a named remote action.

        The action is sent as a form POST with the params plus
        Action=<name>. HTTP 5xx failures are retried, up to
        max_attempts calls in total; any other failure raises at once.

        Args:
            name: Action name, e.g. SendMessage
            path: Path (or full URL) of the resource, e.g. the queue URL
            params: Action parameters

        Returns:
            Successful response

        Raises:
            ActionError: If the service reports a failure
        """
        path = urlsplit(path).path or "/"
        form: Dict[str, Any] = dict(params or {})
        form["Action"] = name

        for attempt in action_retrying(self.max_attempts):
            with attempt:
                return self._action_once(name, path, form, attempt.retry_state.attempt_number)

    def _action_once(
        self, name: str, path: str, form: Dict[str, Any], attempt: int
    ) -> Response:
        response = self.request("POST", path, {}, form)
        if response.success:
            return response

        doc = response.doc
        error = ActionError(
            doc.value("error.type") or "",
            doc.value("error.code") or "",
            doc.value("error.message") or "",
            response.status,
        )
        logger.warning(
            "Action failed",
            action=name,
            path=path,
            status_code=response.status,
            error_code=error.code,
            attempt=attempt,
            request_id=response.request_id
        )
        raise error
