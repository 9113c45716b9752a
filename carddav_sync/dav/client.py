"""
WebDAV transport client.

Provides a thin wrapper around a requests Session for:
- Sending arbitrary WebDAV requests (REPORT, PROPFIND, GET)
- PROPFIND with a list of properties and a Depth header
- Decoding multistatus responses

HTTP status codes are never turned into exceptions here; interpreting them
is the caller's job. Only failures of the request itself raise
TransportError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from urllib.parse import urljoin

import requests
from lxml import etree
from requests.exceptions import RequestException

from carddav_sync import __version__
from carddav_sync.dav import namespaces as ns
from carddav_sync.dav.xml import MultistatusResult
from carddav_sync.dav.xml import parse_multistatus as _parse_multistatus
from carddav_sync.errors import ProtocolError, TransportError

# HTTP timeout configuration
DEFAULT_TIMEOUT = 30.0  # seconds

USER_AGENT = f"carddav-sync/{__version__}"

XML_CONTENT_TYPE = "application/xml; charset=utf-8"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DAVRequest:
    """
    An HTTP request to send to the server.

    Attributes:
        method: HTTP method (e.g. "REPORT", "GET")
        uri: Target, absolute or relative to the client's base URL
        headers: Extra request headers
        body: Request body, or None
    """

    method: str
    uri: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


@dataclass(frozen=True)
class DAVResponse:
    """
    A server response.

    Attributes:
        status: HTTP status code
        body: Raw response body
        headers: Response headers
    """

    status: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)


def build_propfind_body(properties: Iterable[str]) -> bytes:
    """
    Build the XML body of a PROPFIND request.

    Args:
        properties: Property names in Clark notation

    Returns:
        Serialized DAV:propfind document
    """
    root = etree.Element(ns.PROPFIND, nsmap=ns.NSMAP)
    prop = etree.SubElement(root, ns.PROP)
    for name in properties:
        etree.SubElement(prop, name)
    return etree.tostring(root, xml_declaration=True, encoding="utf-8")


class WebDAVClient:
    """
    Minimal WebDAV client over requests.

    Attributes:
        base_url: Server URL that relative URIs are resolved against
        timeout: Per-request timeout in seconds
        session: Underlying requests Session

    Usage:
        client = WebDAVClient("https://dav.example.com/", "me", "secret")

        # PROPFIND the etags of an address book's members
        props = client.propfind("/addressbooks/me/default/", ["{DAV:}getetag"], 1)

        # Send a prepared REPORT
        response = client.send(request)
        results = client.parse_multistatus(response.body)
    """

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = True,
        session: requests.Session | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Server URL, e.g. "https://dav.example.com/"
            username: Basic auth user name (no auth if None)
            password: Basic auth password
            timeout: Request timeout in seconds (default 30)
            verify: Whether to verify TLS certificates (default True)
            session: Pre-configured session to use instead of a new one
        """
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.verify = verify
        self.session.headers.update({"User-Agent": USER_AGENT})
        if username is not None:
            self.session.auth = (username, password or "")

    def resolve(self, uri: str) -> str:
        """Resolve a URI against the base URL."""
        return urljoin(self.base_url, uri)

    def send(self, request: DAVRequest) -> DAVResponse:
        """
        Send a request and return the response, whatever its status.

        Args:
            request: Request to send

        Returns:
            DAVResponse with status, body and headers

        Raises:
            TransportError: If the request could not be completed
        """
        url = self.resolve(request.uri)
        logger.debug(f"{request.method} {url}")

        try:
            response = self.session.request(
                request.method,
                url,
                headers=dict(request.headers),
                data=request.body,
                timeout=self.timeout,
            )
        except RequestException as e:
            logger.error(f"{request.method} {url} failed: {e}")
            raise TransportError(f"{request.method} {url} failed: {e}") from e

        logger.debug(f"{request.method} {url} -> {response.status_code}")
        return DAVResponse(
            status=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )

    def propfind(
        self, uri: str, properties: Iterable[str], depth: int = 0
    ) -> dict[str, dict[str, Any]]:
        """
        Fetch properties of a resource and, with depth 1, of its members.

        Args:
            uri: Target resource or collection
            properties: Property names in Clark notation
            depth: Depth header value (0 or 1)

        Returns:
            Mapping of href to the properties the server returned with
            status 200 (an empty dict for hrefs with none)

        Raises:
            TransportError: If the request could not be completed
            ProtocolError: If the server does not answer 207 Multi-Status
            MalformedDocument: If the response is not XML
        """
        request = DAVRequest(
            method="PROPFIND",
            uri=uri,
            headers={"Depth": str(depth), "Content-Type": XML_CONTENT_TYPE},
            body=build_propfind_body(properties),
        )
        response = self.send(request)

        if response.status != 207:
            raise ProtocolError(
                f"PROPFIND {uri} returned HTTP {response.status}",
                status=response.status,
            )

        multistatus = self.parse_multistatus(response.body)
        return {href: statuses.get(200, {}) for href, statuses in multistatus.items()}

    def parse_multistatus(self, body: bytes | str) -> MultistatusResult:
        """Decode a multistatus body (see carddav_sync.dav.xml)."""
        return _parse_multistatus(body)

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()

    def __enter__(self) -> WebDAVClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
