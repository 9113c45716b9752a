"""
carddav_sync.dav - Generic WebDAV plumbing

HTTP transport, XML loading and multistatus decoding.
"""

from carddav_sync.dav.client import DAVRequest, DAVResponse, WebDAVClient
from carddav_sync.dav.xml import load_document, parse_multistatus

__all__ = [
    "DAVRequest",
    "DAVResponse",
    "WebDAVClient",
    "load_document",
    "parse_multistatus",
]
