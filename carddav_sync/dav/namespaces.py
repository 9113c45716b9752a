"""XML namespaces and property names in Clark notation ({namespace}local)."""

DAV_NS = "DAV:"
CARDDAV_NS = "urn:ietf:params:xml:ns:carddav"
CALENDARSERVER_NS = "http://calendarserver.org/ns/"

NSMAP = {
    "d": DAV_NS,
    "card": CARDDAV_NS,
    "cs": CALENDARSERVER_NS,
}


def clark(namespace: str, name: str) -> str:
    """Return the Clark-notation name for ``name`` in ``namespace``."""
    return f"{{{namespace}}}{name}"


# DAV: elements
MULTISTATUS = clark(DAV_NS, "multistatus")
RESPONSE = clark(DAV_NS, "response")
HREF = clark(DAV_NS, "href")
PROPSTAT = clark(DAV_NS, "propstat")
PROP = clark(DAV_NS, "prop")
STATUS = clark(DAV_NS, "status")
PROPFIND = clark(DAV_NS, "propfind")
SYNC_COLLECTION = clark(DAV_NS, "sync-collection")
SYNC_LEVEL = clark(DAV_NS, "sync-level")

# Properties
ETAG = clark(DAV_NS, "getetag")
SYNC_TOKEN = clark(DAV_NS, "sync-token")
RESOURCETYPE = clark(DAV_NS, "resourcetype")
CTAG = clark(CALENDARSERVER_NS, "getctag")
ADDRESS_DATA = clark(CARDDAV_NS, "address-data")
ADDRESSBOOK_MULTIGET = clark(CARDDAV_NS, "addressbook-multiget")
