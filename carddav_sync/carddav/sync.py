"""
Collection synchronization via the sync-collection REPORT.

The outcome of a sync-collection attempt is classified from its HTTP status:

- DELTA: 207 Multi-Status. The body carries the new sync-token and the
  members changed since the token that was sent.
- FALLBACK: 400 Bad Request on an initial sync (no token). Some servers
  (Google among them) reject token-less sync-collection requests; the
  current token is read with a PROPFIND and every member is fetched with
  addressbook-multiget. The result is a full snapshot, not a delta.
- FATAL: anything else, including 400 on a resumed sync. A rejected token
  is expired or invalid and the caller must restart with a full sync.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from carddav_sync.carddav.builders import DEFAULT_SYNC_LEVEL, build_sync_collection
from carddav_sync.carddav.multistatus import (
    filter_status,
    missing_status,
    parse_sync_token,
)
from carddav_sync.errors import ProtocolError

if TYPE_CHECKING:
    from carddav_sync.carddav.adapter import CardDAVAdapter

logger = logging.getLogger(__name__)


class SyncOutcome(str, Enum):
    """How a sync-collection attempt was resolved."""

    DELTA = "delta"  # Changes since the given token
    FALLBACK = "fallback"  # Full snapshot after a rejected initial sync
    FATAL = "fatal"  # Unsupported response, raised as ProtocolError


def classify_response(status: int, sync_token: str | None) -> SyncOutcome:
    """
    Map the status of a sync-collection response to an outcome.

    Args:
        status: HTTP status of the response
        sync_token: Token that was sent with the request

    Returns:
        The SyncOutcome for the response
    """
    if status == 207:
        return SyncOutcome.DELTA
    if status == 400 and not sync_token:
        return SyncOutcome.FALLBACK
    return SyncOutcome.FATAL


@dataclass(frozen=True)
class SyncCollection:
    """
    Result of one synchronization call.

    Attributes:
        sync_token: Token to persist and send with the next call
        responses: Read-only decoded multistatus ({href: {status: {prop: value}}})
        outcome: DELTA for an incremental result, FALLBACK for a full snapshot

    Usage:
        result = adapter.get_sync_collection(uri, previous_token)

        for href, props in result.successes().items():
            store(href, props["{urn:ietf:params:xml:ns:carddav}address-data"])
        for href in result.removed():
            forget(href)

        save_token(result.sync_token)
    """

    sync_token: str
    responses: Mapping[str, dict[int, dict[str, Any]]] = field(default_factory=dict)
    outcome: SyncOutcome = SyncOutcome.DELTA

    def __post_init__(self) -> None:
        object.__setattr__(self, "responses", MappingProxyType(dict(self.responses)))

    @property
    def is_full_snapshot(self) -> bool:
        """True when the result is authoritative full state, not a delta."""
        return self.outcome is SyncOutcome.FALLBACK

    def successes(self) -> dict[str, dict[str, Any]]:
        """Return the property bags of members that answered 200."""
        return filter_status(self.responses, 200)

    def removed(self) -> set[str]:
        """Return the hrefs that produced no usable properties."""
        return missing_status(self.responses, 200)


def synchronize(
    adapter: CardDAVAdapter,
    uri: str,
    sync_token: str | None = None,
    depth: int = DEFAULT_SYNC_LEVEL,
) -> SyncCollection:
    """
    Synchronize an address book from ``sync_token``.

    Args:
        adapter: Adapter providing transport and change-tag reads
        uri: Address book URI
        sync_token: Token from the previous call, None for an initial sync
        depth: sync-level of the request

    Returns:
        SyncCollection holding the new token and the per-member results

    Raises:
        ProtocolError: On an unsupported response status
        MissingSyncToken: If a 207 response carries no sync-token
        MalformedDocument: If a response body is not XML
        TransportError: If a request fails
    """
    request = build_sync_collection(uri, sync_token, depth)
    response = adapter.send(request)
    outcome = classify_response(response.status, sync_token)

    if outcome is SyncOutcome.DELTA:
        new_token = parse_sync_token(response.body)
        responses = adapter.parse_multistatus(response.body)
        logger.info(f"Synchronized {uri}: {len(responses)} changed member(s)")
        return SyncCollection(new_token, responses, outcome)

    if outcome is SyncOutcome.FALLBACK:
        logger.warning(
            f"Server rejected token-less sync-collection on {uri}, "
            "falling back to full listing"
        )
        new_token = adapter.get_sync_token(uri)
        hrefs = list(adapter.get_etags(uri))
        if not hrefs:
            # addressbook-multiget needs at least one href
            logger.info(f"Fetched full snapshot of {uri}: address book is empty")
            return SyncCollection(new_token, {}, outcome)
        multiget = adapter.addressbook_multiget(uri, hrefs)
        responses = adapter.parse_multistatus(multiget.body)
        logger.info(f"Fetched full snapshot of {uri}: {len(responses)} member(s)")
        return SyncCollection(new_token, responses, outcome)

    if response.status == 400:
        message = (
            f"sync-collection on {uri} rejected the sync-token (HTTP 400); "
            "restart with a full sync"
        )
    else:
        message = f"sync-collection on {uri} failed: HTTP {response.status}"
    logger.error(message)
    raise ProtocolError(message, status=response.status)


__all__ = [
    "SyncCollection",
    "SyncOutcome",
    "classify_response",
    "synchronize",
]
