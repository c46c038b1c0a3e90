"""
Module: response.py
Description: Typed wrapper around a service HTTP response.
"""

from typing import TYPE_CHECKING, Optional

import httpx

from queuelink.utils.xml_document import ResponseDocument

if TYPE_CHECKING:
    from queuelink.transport.request import SignedRequest


class Response:
    """
    Result of one signed call.

    The XML body is parsed on first access to `doc` and cached.

    Attributes:
        request: The SignedRequest that produced this response
        http_response: The underlying httpx response
        status: HTTP status code
        content: Raw response body
    """

    def __init__(self, request: "SignedRequest", http_response: httpx.Response):
        self.request = request
        self.http_response = http_response
        self.status = http_response.status_code
        self.headers = http_response.headers
        self.content = http_response.content
        self._doc: Optional[ResponseDocument] = None

    @property
    def doc(self) -> ResponseDocument:
        if self._doc is None:
            self._doc = ResponseDocument(self.content)
        return self._doc

    @property
    def success(self) -> bool:
        return 200 <= self.status < 300

    @property
    def request_id(self) -> Optional[str]:
        return self.headers.get("x-amzn-RequestId") or self.doc.value("request_id")

    def __repr__(self) -> str:
        return f"<Response {self.status} {self.request.method} {self.request.path}>"
