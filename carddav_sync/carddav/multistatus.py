"""
Interpretation of multistatus responses for collection sync.

Callers read per-resource results through the status grouping convention:
an href with a 200 entry has usable properties, an href without one was
deleted or is inaccessible and should be treated as removed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from carddav_sync.dav import namespaces as ns
from carddav_sync.dav.xml import load_document
from carddav_sync.dav.xml import parse_multistatus as parse_multistatus
from carddav_sync.errors import MissingSyncToken

logger = logging.getLogger(__name__)


def parse_sync_token(body: bytes | str) -> str:
    """
    Extract the DAV:sync-token from a response body.

    The first sync-token element found anywhere in the document is used.

    Args:
        body: Raw multistatus body

    Returns:
        Text of the sync-token element

    Raises:
        MalformedDocument: If the body is not XML
        MissingSyncToken: If the document has no sync-token element
    """
    root = load_document(body)
    element = next(root.iter(ns.SYNC_TOKEN), None)

    if element is None:
        raise MissingSyncToken("No sync-token found in multistatus response")

    token = element.text or ""
    logger.debug(f"Parsed sync-token: {token}")
    return token


def filter_status(
    results: Mapping[str, dict[int, dict[str, Any]]], status: int = 200
) -> dict[str, dict[str, Any]]:
    """
    Select the property bags of one status code.

    Args:
        results: Decoded multistatus
        status: Status code to keep (default 200)

    Returns:
        Mapping of href to property bag, for hrefs that have ``status``
    """
    return {
        href: dict(statuses[status])
        for href, statuses in results.items()
        if status in statuses
    }


def missing_status(
    results: Mapping[str, dict[int, dict[str, Any]]], status: int = 200
) -> set[str]:
    """Return the hrefs that have no entry for ``status``."""
    return {href for href, statuses in results.items() if status not in statuses}


__all__ = [
    "filter_status",
    "missing_status",
    "parse_multistatus",
    "parse_sync_token",
]
