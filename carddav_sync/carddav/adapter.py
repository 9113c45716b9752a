"""
CardDAV adapter: the public synchronization surface.

Provides a high-level interface to a CardDAV address book for:
- Change detection with CTags, ETags and sync-tokens
- Incremental sync with sync-collection, with a full-listing fallback
- Batch retrieval of vCards with addressbook-multiget
- Allocation of unused resource ids for new contacts
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import vobject
from vobject.base import VObjectError

from carddav_sync.carddav import ids
from carddav_sync.carddav.builders import DEFAULT_SYNC_LEVEL, build_multiget
from carddav_sync.carddav.multistatus import filter_status
from carddav_sync.carddav.sync import SyncCollection, synchronize
from carddav_sync.carddav.tags import ChangeTagReader
from carddav_sync.dav import namespaces as ns
from carddav_sync.dav.client import DAVRequest, DAVResponse, WebDAVClient
from carddav_sync.dav.xml import MultistatusResult
from carddav_sync.errors import ProtocolError

logger = logging.getLogger(__name__)


class CardDAVAdapter:
    """
    CardDAV operations on top of a WebDAV client.

    Attributes:
        client: WebDAV transport
        tags: Change-tag reader sharing the same client
        id_max_attempts: Retry cap for id allocation

    Usage:
        adapter = CardDAVAdapter(WebDAVClient("https://dav.example.com/", "me", "pw"))
        book = "/addressbooks/me/default/"

        # Cheap change check
        if adapter.get_ctag(book) != last_ctag:
            result = adapter.get_sync_collection(book, last_token)

        # Fetch contacts
        cards = adapter.get_vcards(book)

        # Name a new contact
        href = adapter.generate_vcard_uri(book)
    """

    def __init__(
        self, client: WebDAVClient, id_max_attempts: int = ids.DEFAULT_MAX_ATTEMPTS
    ):
        self.client = client
        self.tags = ChangeTagReader(client)
        self.id_max_attempts = id_max_attempts

    # Transport

    def send(self, request: DAVRequest) -> DAVResponse:
        return self.client.send(request)

    def parse_multistatus(self, body: bytes | str) -> MultistatusResult:
        return self.client.parse_multistatus(body)

    # Change tags

    def get_ctag(self, uri: str) -> str | None:
        return self.tags.get_ctag(uri)

    def get_ctags(self, uri: str) -> dict[str, str]:
        return self.tags.get_ctags(uri)

    def get_etag(self, uri: str) -> str | None:
        return self.tags.get_etag(uri)

    def get_etags(self, uri: str) -> dict[str, str]:
        return self.tags.get_etags(uri)

    def get_sync_token(self, uri: str) -> str:
        return self.tags.get_sync_token(uri)

    # Sync

    def get_sync_collection(
        self,
        uri: str,
        sync_token: str | None = None,
        depth: int = DEFAULT_SYNC_LEVEL,
    ) -> SyncCollection:
        """
        Return the changes to an address book since ``sync_token``.

        See carddav_sync.carddav.sync.synchronize.
        """
        return synchronize(self, uri, sync_token, depth)

    def addressbook_multiget(
        self, uri: str, vcard_uris: Iterable[str]
    ) -> DAVResponse:
        """
        Fetch several vCards in one REPORT and return the raw response.

        Raises:
            ProtocolError: If the server does not answer 207 Multi-Status
        """
        vcard_uris = list(vcard_uris)
        logger.debug(f"addressbook-multiget on {uri} for {len(vcard_uris)} card(s)")

        response = self.send(build_multiget(uri, vcard_uris))
        if response.status != 207:
            raise ProtocolError(
                f"addressbook-multiget on {uri} failed: HTTP {response.status}",
                status=response.status,
            )
        return response

    # vCards

    def get_vcard_uris(self, address_book_uri: str) -> list[str]:
        """Return the hrefs of every card in an address book."""
        return list(self.get_etags(address_book_uri))

    def get_vcards(
        self, address_book_uri: str, vcard_uris: Iterable[str] | None = None
    ) -> dict[str, Any]:
        """
        Fetch and parse vCards.

        Args:
            address_book_uri: Address book the cards belong to
            vcard_uris: Hrefs to fetch; None or empty fetches every card

        Returns:
            Mapping of href to parsed vobject vCard. Hrefs the server did
            not return with status 200 are left out.

        Raises:
            ProtocolError: If the multiget fails or a card is not valid vCard
        """
        vcard_uris = list(vcard_uris or []) or self.get_vcard_uris(address_book_uri)
        if not vcard_uris:
            logger.info(f"Address book {address_book_uri} is empty")
            return {}

        response = self.addressbook_multiget(address_book_uri, vcard_uris)
        found = filter_status(self.parse_multistatus(response.body), 200)

        vcards: dict[str, Any] = {}
        for href, props in found.items():
            data = props.get(ns.ADDRESS_DATA)
            if not data:
                logger.debug(f"No address-data returned for {href}")
                continue
            try:
                vcards[href] = vobject.readOne(data)
            except VObjectError as e:
                raise ProtocolError(f"Invalid vCard data for {href}: {e}") from e

        logger.info(f"Fetched {len(vcards)} vCard(s) from {address_book_uri}")
        return vcards

    def get_vcard(self, address_book_uri: str, vcard_uri: str) -> Any | None:
        """Fetch and parse one vCard, or None if the server did not return it."""
        vcards = self.get_vcards(address_book_uri, [vcard_uri])
        if vcard_uri in vcards:
            return vcards[vcard_uri]
        # Servers may answer with a differently spelled href (absolute URL)
        return next(iter(vcards.values()), None)

    # New resources

    def generate_vcard_id(self, uri: str) -> str:
        return ids.generate_vcard_id(self.client, uri, self.id_max_attempts)

    def generate_vcard_uri(self, uri: str) -> str:
        return ids.generate_vcard_uri(self.client, uri, self.id_max_attempts)
