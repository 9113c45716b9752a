"""
Change-tag reading: collection CTags, resource ETags and sync-tokens.

All tags are opaque strings compared for equality only. A CTag changes
whenever any member of a collection changes; an ETag changes whenever that
specific resource changes.
"""

from __future__ import annotations

import logging
from typing import Any

from carddav_sync.dav import namespaces as ns
from carddav_sync.dav.client import WebDAVClient
from carddav_sync.errors import MissingSyncToken

logger = logging.getLogger(__name__)


def _pick(tags: dict[str, str], uri: str) -> str | None:
    if uri in tags:
        return tags[uri]
    return next(iter(tags.values()), None)


class ChangeTagReader:
    """
    Reads change tags through depth-1 PROPFIND requests.

    Usage:
        reader = ChangeTagReader(client)

        ctag = reader.get_ctag("/addressbooks/me/default/")
        etags = reader.get_etags("/addressbooks/me/default/")
        token = reader.get_sync_token("/addressbooks/me/default/")
    """

    def __init__(self, client: WebDAVClient):
        self.client = client

    def _read(self, uri: str, prop: str) -> dict[str, str]:
        found: dict[str, dict[str, Any]] = self.client.propfind(uri, [prop], 1)
        # Entries without the property are dropped: for ETags this removes
        # the collection itself, which is not content-tagged
        return {href: props[prop] for href, props in found.items() if props.get(prop)}

    def get_ctags(self, uri: str) -> dict[str, str]:
        """Return the CTags of ``uri`` and its immediate members."""
        ctags = self._read(uri, ns.CTAG)
        logger.debug(f"Read {len(ctags)} ctags from {uri}")
        return ctags

    def get_ctag(self, uri: str) -> str | None:
        """Return the CTag of ``uri``, or None if the server has none."""
        return _pick(self.get_ctags(uri), uri)

    def get_etags(self, uri: str) -> dict[str, str]:
        """
        Return the ETags of the members of ``uri``.

        The collection-level entry is never included. If ``uri`` names a
        single resource the result holds just that resource.
        """
        etags = self._read(uri, ns.ETAG)
        logger.debug(f"Read {len(etags)} etags from {uri}")
        return etags

    def get_etag(self, uri: str) -> str | None:
        """Return the ETag of the resource ``uri``, or None."""
        return _pick(self.get_etags(uri), uri)

    def get_sync_token(self, uri: str) -> str:
        """
        Read the current sync-token of a collection with a plain PROPFIND.

        Raises:
            MissingSyncToken: If the server reports no sync-token
        """
        found = self.client.propfind(uri, [ns.SYNC_TOKEN], 0)
        props = found.get(uri)
        if props is None and len(found) == 1:
            props = next(iter(found.values()))

        token = (props or {}).get(ns.SYNC_TOKEN)
        if not token:
            raise MissingSyncToken(f"Server returned no sync-token for {uri}")
        return token
