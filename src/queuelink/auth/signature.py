"""
Module: signature.py
Description: AWS Signature Version 4 request signing.

Pure functions that turn a request description, credentials and a
timestamp into the Authorization header the service recomputes and
compares. Nothing here performs I/O or reads the clock; the caller
captures the timestamp once and passes it to every step so the
canonical request and the header always agree.

Key Components:
- percent_encode(): AWS flavour of RFC 3986 encoding
- canonical_request(): Task 1, the canonical request
- string_to_sign(): Task 2, the string to sign
- derive_signing_key() / signature(): Task 3, the HMAC chain
- sign_request(): one complete signing pass returning request headers

Dependencies: hashlib, hmac, urllib.parse
"""

import hashlib
import hmac
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple, Union
from urllib.parse import urlsplit

from queuelink.errors import ConfigurationError
from queuelink.models.credentials import Credentials

ALGORITHM = "AWS4-HMAC-SHA256"
KEY_PREFIX = "AWS4"
SCOPE_TERMINATOR = "aws4_request"
AMZ_DATE_HEADER = "x-amz-date"
DEFAULT_PORTS = {"http": 80, "https": 443}

_UNRESERVED = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"
)

Body = Union[bytes, str, None]


class CanonicalRequest(NamedTuple):
    """Canonical form of a request, derived entirely from its description."""

    method: str
    path: str
    query_string: str
    headers: List[Tuple[str, str]]
    payload_hash: str

    @property
    def signed_headers(self) -> str:
        return ";".join(name for name, _ in self.headers)

    @property
    def text(self) -> str:
        header_lines = "".join(f"{name}:{value}\n" for name, value in self.headers)
        return "\n".join([
            self.method,
            self.path,
            self.query_string,
            header_lines,
            self.signed_headers,
            self.payload_hash,
        ])


def percent_encode(value: Any) -> str:
    """
    Percent-encode a value using the service's rules.

    Every UTF-8 byte outside A-Z a-z 0-9 - . _ ~ becomes %XX with
    uppercase hex digits. Spaces are %20, never '+'.

    Example:
        >>> percent_encode("a b")
        'a%20b'
    """
    raw = value if isinstance(value, bytes) else str(value).encode("utf-8")
    return "".join(
        chr(byte) if byte in _UNRESERVED else f"%{byte:02X}" for byte in raw
    )


def encode_form(params: Mapping[str, Any]) -> str:
    """Encode form fields as k=v pairs joined by '&', in insertion order."""
    return "&".join(
        f"{percent_encode(key)}={percent_encode(value)}"
        for key, value in params.items()
    )


def canonical_query_string(query: Optional[Mapping[str, Any]]) -> str:
    """Encode query pairs, sort them by encoded key and join them."""
    pairs = sorted(
        (percent_encode(key), percent_encode(value))
        for key, value in (query or {}).items()
    )
    return "&".join(f"{key}={value}" for key, value in pairs)


def host_header(url: str) -> str:
    """
    Host header value for url, as the HTTP client sends it.

    Userinfo is dropped, and the port is kept only when it is not the
    scheme default.
    """
    parts = urlsplit(url)
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    if parts.port is not None and parts.port != DEFAULT_PORTS.get(parts.scheme):
        host = f"{host}:{parts.port}"
    return host


def canonical_headers(
    headers: Optional[Mapping[str, Any]], url: str
) -> List[Tuple[str, str]]:
    """
    Lower-case and sort the headers that take part in signing.

    A host header is injected from the URL if absent, and any
    existing authorization header is left out.
    """
    lowered = {
        name.lower(): str(value).strip() for name, value in (headers or {}).items()
    }
    lowered.pop("authorization", None)
    if "host" not in lowered:
        lowered["host"] = host_header(url)
    return sorted(lowered.items())


def hash_payload(body: Body) -> str:
    """Hex SHA-256 of the request body; no body hashes as the empty string."""
    if body is None:
        body = b""
    elif isinstance(body, str):
        body = body.encode("utf-8")
    return hashlib.sha256(body).hexdigest()


def canonical_request(
    method: str,
    url: str,
    query: Optional[Mapping[str, Any]],
    headers: Optional[Mapping[str, Any]],
    body: Body,
) -> CanonicalRequest:
    """Build the canonical request (task 1)."""
    return CanonicalRequest(
        method=method.upper(),
        path=urlsplit(url).path or "/",
        query_string=canonical_query_string(query),
        headers=canonical_headers(headers, url),
        payload_hash=hash_payload(body),
    )


def _as_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def format_amz_date(timestamp: datetime) -> str:
    return _as_utc(timestamp).strftime("%Y%m%dT%H%M%SZ")


def format_datestamp(timestamp: datetime) -> str:
    return _as_utc(timestamp).strftime("%Y%m%d")


def credential_scope(timestamp: datetime, region: str, service: str) -> str:
    return "/".join([format_datestamp(timestamp), region, service, SCOPE_TERMINATOR])


def string_to_sign(
    timestamp: datetime, scope: str, canonical: CanonicalRequest
) -> str:
    """Build the string to sign (task 2)."""
    return "\n".join([
        ALGORITHM,
        format_amz_date(timestamp),
        scope,
        hashlib.sha256(canonical.text.encode("utf-8")).hexdigest(),
    ])


def _hmac(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(
    secret_key: str, datestamp: str, region: str, service: str
) -> bytes:
    """Narrow the secret key to one date, region and service."""
    k_date = _hmac((KEY_PREFIX + secret_key).encode("utf-8"), datestamp)
    k_region = _hmac(k_date, region)
    k_service = _hmac(k_region, service)
    return _hmac(k_service, SCOPE_TERMINATOR)


def signature(signing_key: bytes, to_sign: str) -> str:
    """Hex HMAC-SHA256 of the string to sign (task 3)."""
    return hmac.new(signing_key, to_sign.encode("utf-8"), hashlib.sha256).hexdigest()


def authorization_header(
    access_key: str, scope: str, signed_headers: str, sig: str
) -> str:
    return (
        f"{ALGORITHM} Credential={access_key}/{scope}, "
        f"SignedHeaders={signed_headers}, Signature={sig}"
    )


def _require(**values: Any) -> None:
    for name, value in values.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ConfigurationError(f"{name} is required for request signing")


def sign_request(
    method: str,
    url: str,
    query: Optional[Mapping[str, Any]],
    headers: Optional[Mapping[str, Any]],
    body: Body,
    region: str,
    service: str,
    credentials: Optional[Credentials],
    timestamp: datetime,
) -> Dict[str, str]:
    """
    Run one complete signing pass over a request.

    The timestamp is used for both the x-amz-date header and the
    credential scope, so it must be captured once by the caller and
    never recomputed between the two.

    Args:
        method: HTTP method
        url: Full request URL without query string
        query: Query parameters
        headers: Caller supplied headers (any Authorization is ignored)
        body: Encoded request body
        region: Service region, e.g. us-east-1
        service: Service name, e.g. sqs
        credentials: Access key / secret key pair
        timestamp: Request time

    Returns:
        Headers to send: the caller's headers, x-amz-date and Authorization

    Raises:
        ConfigurationError: If region, service, credentials, method, url or
            timestamp is missing
    """
    _require(
        method=method, url=url, region=region, service=service,
        credentials=credentials, timestamp=timestamp,
    )

    signed = {
        name: str(value)
        for name, value in (headers or {}).items()
        if name.lower() not in ("authorization", AMZ_DATE_HEADER)
    }
    signed[AMZ_DATE_HEADER] = format_amz_date(timestamp)

    canonical = canonical_request(method, url, query, signed, body)
    scope = credential_scope(timestamp, region, service)
    key = derive_signing_key(
        credentials.secret_key, format_datestamp(timestamp), region, service
    )
    sig = signature(key, string_to_sign(timestamp, scope, canonical))

    signed["Authorization"] = authorization_header(
        credentials.access_key, scope, canonical.signed_headers, sig
    )
    return signed
