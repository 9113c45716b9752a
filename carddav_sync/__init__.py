"""
carddav_sync - CardDAV address-book synchronization client.

Keeps a local mirror of a CardDAV address book consistent with the server
using collection sync (RFC 6578), multi-get batching (RFC 6352) and
ETag/CTag change detection.
"""

__version__ = "0.1.0"
