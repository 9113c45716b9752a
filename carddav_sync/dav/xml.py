"""
XML loading and multistatus decoding for WebDAV responses.

Provides:
- A hardened document loader that raises MalformedDocument on bad input
- Decoding of RFC 4918 multistatus bodies into plain dictionaries:

    {href: {status_code: {property_name: value}}}

Property names use Clark notation ("{DAV:}getetag"). Values are the element
text, None for empty elements, or the list of child element names for
structured properties such as DAV:resourcetype.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from lxml import etree

from carddav_sync.dav import namespaces as ns
from carddav_sync.errors import MalformedDocument, ProtocolError

logger = logging.getLogger(__name__)

# "HTTP/1.1 200 OK" -> 200
_STATUS_LINE = re.compile(r"^\s*HTTP/\d+(?:\.\d+)?\s+(\d{3})")

MultistatusResult = dict[str, dict[int, dict[str, Any]]]


def _parser() -> etree.XMLParser:
    # Server responses are untrusted: no entities, no DTD fetching
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_blank_text=True,
        huge_tree=False,
    )


def load_document(body: bytes | str | None) -> etree._Element:
    """
    Parse an XML document and return its root element.

    Args:
        body: Raw response body

    Returns:
        Root element of the document

    Raises:
        MalformedDocument: If the body is empty or not well-formed XML
    """
    if body is None:
        raise MalformedDocument("Response body is empty, expected an XML document")

    if isinstance(body, str):
        body = body.encode("utf-8")

    if not body.strip():
        raise MalformedDocument("Response body is empty, expected an XML document")

    try:
        return etree.fromstring(body, parser=_parser())
    except etree.XMLSyntaxError as e:
        raise MalformedDocument(f"Response body is not valid XML: {e}") from e


def parse_status_line(line: str | None) -> int | None:
    """
    Extract the numeric code from a DAV:status line.

    Returns:
        Status code, or None if the line is missing or unparseable
    """
    if not line:
        return None
    match = _STATUS_LINE.match(line)
    if not match:
        return None
    return int(match.group(1))


def _property_value(element: etree._Element) -> Any:
    children = [child for child in element if isinstance(child.tag, str)]
    if children:
        return [child.tag for child in children]
    return element.text


def parse_multistatus(body: bytes | str) -> MultistatusResult:
    """
    Decode a multistatus document.

    Each DAV:response contributes one href. Property bags are grouped by the
    status code of their propstat. A response that carries a bare DAV:status
    and no propstat (a member removed since the last sync-token) is recorded
    as {code: {}}.

    Args:
        body: Raw multistatus body

    Returns:
        Mapping of href to status code to property bag

    Raises:
        MalformedDocument: If the body is not XML
        ProtocolError: If the root element is not DAV:multistatus
    """
    root = load_document(body)

    if root.tag != ns.MULTISTATUS:
        raise ProtocolError(f"Expected DAV:multistatus document, got {root.tag}")

    results: MultistatusResult = {}

    for response in root.iterchildren(ns.RESPONSE):
        href = (response.findtext(ns.HREF) or "").strip()
        if not href:
            logger.warning("Skipping multistatus response without href")
            continue

        if href in results:
            logger.warning(f"Skipping duplicate href in multistatus: {href!r}")
            continue

        statuses: dict[int, dict[str, Any]] = {}

        for propstat in response.iterchildren(ns.PROPSTAT):
            code = parse_status_line(propstat.findtext(ns.STATUS))
            if code is None:
                logger.debug(f"Skipping propstat without status for {href!r}")
                continue

            bag = statuses.setdefault(code, {})
            prop = propstat.find(ns.PROP)
            if prop is None:
                continue
            for element in prop:
                if isinstance(element.tag, str):
                    bag[element.tag] = _property_value(element)

        if not statuses:
            code = parse_status_line(response.findtext(ns.STATUS))
            if code is not None:
                statuses[code] = {}

        results[href] = statuses

    logger.debug(f"Parsed multistatus with {len(results)} responses")
    return results


__all__ = [
    "MultistatusResult",
    "load_document",
    "parse_multistatus",
    "parse_status_line",
]
