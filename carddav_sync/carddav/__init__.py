"""
carddav_sync.carddav - CardDAV synchronization

Change tags, request builders, multistatus interpretation, collection sync
and resource id allocation.
"""

from carddav_sync.carddav.adapter import CardDAVAdapter
from carddav_sync.carddav.sync import SyncCollection, SyncOutcome

__all__ = ["CardDAVAdapter", "SyncCollection", "SyncOutcome"]
