"""
Module: xml_document.py
Description: Namespace-free access to service XML responses.

Responses are parsed once, every namespace is stripped, and fields are
looked up through a fixed table mapping a logical field name to an
ElementTree path. Callers ask for fields, never for paths, so the
parsing contract lives in one place.
"""

import xml.etree.ElementTree as ET
from typing import Dict, List, Optional, Union

# Logical field -> ElementTree path, relative to the document root
FIELD_PATHS: Dict[str, str] = {
    "error.type": ".//Error/Type",
    "error.code": ".//Error/Code",
    "error.message": ".//Error/Message",
    "queue_url": ".//QueueUrl",
    "queue_urls": ".//ListQueuesResult/QueueUrl",
    "messages": ".//ReceiveMessageResult/Message",
    "attributes": ".//GetQueueAttributesResult/Attribute",
    "md5_of_message_body": ".//MD5OfMessageBody",
    "message_id": ".//MessageId",
    "request_id": ".//RequestId",
}

# Paths relative to a <Message> or <Attribute> element
MESSAGE_FIELDS: Dict[str, str] = {
    "id": "MessageId",
    "receipt_handle": "ReceiptHandle",
    "body": "Body",
    "md5_of_body": "MD5OfBody",
}
ATTRIBUTE_NAME = "Name"
ATTRIBUTE_VALUE = "Value"


def _strip_namespaces(root: ET.Element) -> ET.Element:
    for element in root.iter():
        if isinstance(element.tag, str) and "}" in element.tag:
            element.tag = element.tag.split("}", 1)[1]
        for name in [n for n in element.attrib if "}" in n]:
            element.attrib[name.split("}", 1)[1]] = element.attrib.pop(name)
    return root


def text_of(element: ET.Element, path: str) -> Optional[str]:
    """Text of the first match for path under element, or None."""
    found = element.find(path)
    if found is None:
        return None
    return found.text or ""


class ResponseDocument:
    """A parsed, namespace-free response body."""

    def __init__(self, content: Union[bytes, str, None]):
        self.root: Optional[ET.Element] = None
        if content:
            try:
                self.root = _strip_namespaces(ET.fromstring(content))
            except ET.ParseError:
                # Non-XML bodies (proxies, load balancers) read as empty
                self.root = None

    @staticmethod
    def _path(field: str) -> str:
        try:
            return FIELD_PATHS[field]
        except KeyError:
            raise KeyError(f"Unknown response field: {field}") from None

    def elements(self, field: str) -> List[ET.Element]:
        path = self._path(field)
        if self.root is None:
            return []
        return self.root.findall(path)

    def value(self, field: str) -> Optional[str]:
        """Text of the first element for field, or None when absent."""
        found = self.elements(field)
        if not found:
            return None
        return found[0].text or ""

    def values(self, field: str) -> List[str]:
        return [element.text or "" for element in self.elements(field)]

    def name_value_pairs(self, element: ET.Element) -> Dict[str, str]:
        """Collect <Attribute><Name/><Value/></Attribute> children of element."""
        pairs = {}
        for attribute in element.findall("Attribute"):
            name = text_of(attribute, ATTRIBUTE_NAME)
            if name is not None:
                pairs[name] = text_of(attribute, ATTRIBUTE_VALUE) or ""
        return pairs
