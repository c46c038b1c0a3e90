"""
Package: transport
Description: Signed HTTP calls to the queue service.

Provides the single-use SignedRequest, the typed Response and the
SignedHttpClient with bounded retries for server-side failures.
"""

from .client import SignedHttpClient
from .request import SignedRequest
from .response import Response
from .retry import is_retryable

__all__ = ["SignedHttpClient", "SignedRequest", "Response", "is_retryable"]
