"""
REPORT request bodies for CardDAV batch fetch and collection sync.

Both builders are pure: they return a DAVRequest value and perform no I/O.

addressbook-multiget (RFC 6352 section 8.7):

    <card:addressbook-multiget xmlns:d="DAV:" xmlns:card="...carddav">
      <d:prop><d:getetag/><card:address-data/></d:prop>
      <d:href>/addressbooks/me/default/a.vcf</d:href>
    </card:addressbook-multiget>

sync-collection (RFC 6578 section 3.2):

    <d:sync-collection xmlns:d="DAV:">
      <d:sync-token>...</d:sync-token>
      <d:sync-level>1</d:sync-level>
      <d:prop><d:getetag/><card:address-data/></d:prop>
    </d:sync-collection>
"""

from __future__ import annotations

from collections.abc import Iterable

from lxml import etree

from carddav_sync.dav import namespaces as ns
from carddav_sync.dav.client import XML_CONTENT_TYPE, DAVRequest

# Properties requested for every contact resource
DEFAULT_PROPERTIES = (ns.ETAG, ns.ADDRESS_DATA)

DEFAULT_SYNC_LEVEL = 1


def _serialize(root: etree._Element) -> bytes:
    return etree.tostring(root, xml_declaration=True, encoding="utf-8")


def _add_prop(root: etree._Element, properties: Iterable[str]) -> None:
    prop = etree.SubElement(root, ns.PROP)
    for name in properties:
        etree.SubElement(prop, name)


def build_multiget(
    collection_uri: str,
    resource_uris: Iterable[str],
    properties: Iterable[str] = DEFAULT_PROPERTIES,
) -> DAVRequest:
    """
    Build an addressbook-multiget REPORT for the named resources.

    The caller resolves the member list beforehand; an empty
    ``resource_uris`` produces a request with no hrefs.

    Args:
        collection_uri: Address book the resources belong to
        resource_uris: Hrefs of the resources to fetch
        properties: Properties to return for each resource

    Returns:
        REPORT request targeting the address book
    """
    root = etree.Element(ns.ADDRESSBOOK_MULTIGET, nsmap=ns.NSMAP)
    _add_prop(root, properties)
    for uri in resource_uris:
        etree.SubElement(root, ns.HREF).text = uri

    return DAVRequest(
        method="REPORT",
        uri=collection_uri,
        headers={"Depth": "1", "Content-Type": XML_CONTENT_TYPE},
        body=_serialize(root),
    )


def build_sync_collection(
    collection_uri: str,
    sync_token: str | None = None,
    depth: int = DEFAULT_SYNC_LEVEL,
    properties: Iterable[str] = DEFAULT_PROPERTIES,
) -> DAVRequest:
    """
    Build a sync-collection REPORT.

    Args:
        collection_uri: Address book to synchronize
        sync_token: Token from the previous sync; None or "" asks for an
                    initial sync and yields an empty sync-token element
        depth: sync-level value (1 = immediate members only)
        properties: Properties to return for each changed member

    Returns:
        REPORT request targeting the address book
    """
    root = etree.Element(ns.SYNC_COLLECTION, nsmap=ns.NSMAP)
    token = etree.SubElement(root, ns.SYNC_TOKEN)
    if sync_token:
        token.text = sync_token
    etree.SubElement(root, ns.SYNC_LEVEL).text = str(depth)
    _add_prop(root, properties)

    # RFC 6578: the Depth header must be 0, the scope lives in sync-level
    return DAVRequest(
        method="REPORT",
        uri=collection_uri,
        headers={"Depth": "0", "Content-Type": XML_CONTENT_TYPE},
        body=_serialize(root),
    )


__all__ = [
    "DEFAULT_PROPERTIES",
    "DEFAULT_SYNC_LEVEL",
    "build_multiget",
    "build_sync_collection",
]
