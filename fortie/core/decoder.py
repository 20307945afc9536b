"""
Response Decoder.

Turns a Fortnox response body into a structured value based on its
declared content type:

- application/json         -> dict / list tree
- application/xml, text/xml -> dict tree (see ``xml_to_tree``)
- application/pdf and other binary types -> raw bytes

An empty body decodes to None. Any other content type raises
UnsupportedContentTypeError.
"""

import json
from typing import TYPE_CHECKING, Any

from lxml import etree

from .exceptions import ResponseDecodeError, UnsupportedContentTypeError

if TYPE_CHECKING:
    from .transport import HttpResponse

JSON_CONTENT_TYPES = frozenset({"application/json"})
XML_CONTENT_TYPES = frozenset({"application/xml", "text/xml"})
BINARY_CONTENT_TYPES = frozenset({"application/pdf", "application/octet-stream"})
BINARY_CONTENT_PREFIXES = ("image/",)

# No entity expansion and no network access while parsing remote XML
_XML_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=True)


def media_type(content_type: str | None) -> str | None:
    """Strip parameters such as ``; charset=utf-8`` and normalize case."""
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower() or None


def is_binary(media: str | None) -> bool:
    if media is None:
        return False
    return media in BINARY_CONTENT_TYPES or media.startswith(BINARY_CONTENT_PREFIXES)


def _local_name(tag: str) -> str:
    return etree.QName(tag).localname


def _element_to_value(element: Any) -> Any:
    children = [child for child in element if isinstance(child.tag, str)]
    attributes = {f"@{_local_name(key)}": value for key, value in element.attrib.items()}

    if not children and not attributes:
        return element.text.strip() if element.text and element.text.strip() else None

    tree: dict[str, Any] = dict(attributes)
    for child in children:
        name = _local_name(child.tag)
        value = _element_to_value(child)
        if name in tree:
            existing = tree[name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                tree[name] = [existing, value]
        else:
            tree[name] = value

    text = element.text.strip() if element.text else ""
    if text:
        tree["#text"] = text
    return tree


def xml_to_tree(body: bytes | str) -> dict[str, Any]:
    """
    Parse an XML document into a generic tree.

    The root element becomes the single top-level key. Elements holding
    only text become their text, repeated child elements become lists,
    attributes become ``@name`` keys and namespaces are dropped.
    """
    if isinstance(body, str):
        body = body.encode("utf-8")

    try:
        root = etree.fromstring(body, parser=_XML_PARSER)
    except etree.XMLSyntaxError as e:
        raise ResponseDecodeError(f"Invalid XML response: {e}", "application/xml") from e

    return {_local_name(root.tag): _element_to_value(root)}


def decode_body(content_type: str | None, body: bytes) -> Any:
    """
    Decode ``body`` according to ``content_type``.

    Raises:
        UnsupportedContentTypeError: No rule matches the content type
        ResponseDecodeError: The body is not valid for its content type
    """
    if not body:
        return None

    media = media_type(content_type)

    if media in JSON_CONTENT_TYPES:
        try:
            return json.loads(body)
        except ValueError as e:
            raise ResponseDecodeError(f"Invalid JSON response: {e}", media) from e

    if media in XML_CONTENT_TYPES:
        return xml_to_tree(body)

    if is_binary(media):
        return body

    raise UnsupportedContentTypeError(content_type)


def decode_response(response: "HttpResponse") -> Any:
    """Decode a transport response by its Content-Type header."""
    return decode_body(response.content_type, response.body)
