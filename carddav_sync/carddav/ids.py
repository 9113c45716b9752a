"""
Collision-free resource id generation.

Ids look like UUIDs but carry no version or variant bits:

    3F2A91C0-7B4E5D10-C6E2F09B

26 characters, hyphens at offsets 8 and 17, uppercase hexadecimal digits
elsewhere. Candidates come from the non-cryptographic ``random`` module;
uniqueness is checked against the server, not guaranteed by the generator.
"""

from __future__ import annotations

import logging
import random

from carddav_sync.dav.client import DAVRequest, WebDAVClient
from carddav_sync.errors import AllocationExhausted, ProtocolError

ID_LENGTH = 26
HYPHEN_POSITIONS = frozenset({8, 17})
ID_CHARS = "0123456789ABCDEF"

# Collision retry cap
DEFAULT_MAX_ATTEMPTS = 10

logger = logging.getLogger(__name__)


def generate_candidate(rng: random.Random | None = None) -> str:
    """
    Generate one id candidate without checking the server.

    Args:
        rng: Random generator to draw from (module-level generator if None)
    """
    choice = rng.choice if rng is not None else random.choice
    return "".join(
        "-" if i in HYPHEN_POSITIONS else choice(ID_CHARS)
        for i in range(ID_LENGTH)
    )


def generate_vcard_id(
    client: WebDAVClient,
    base_uri: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    rng: random.Random | None = None,
) -> str:
    """
    Return an id that is not in use under ``base_uri``.

    Each candidate is probed with GET ``base_uri + candidate``: 404 means it
    is free, 200 means it is taken and another candidate is tried.

    Args:
        client: WebDAV client used for the probes
        base_uri: Collection URI the id will live under (with trailing "/")
        max_attempts: Maximum number of candidates to probe
        rng: Random generator for candidates

    Returns:
        Unused id

    Raises:
        ProtocolError: If a probe returns anything other than 200 or 404
        AllocationExhausted: If every probed candidate was taken
    """
    for attempt in range(1, max_attempts + 1):
        candidate = generate_candidate(rng)
        response = client.send(DAVRequest(method="GET", uri=base_uri + candidate))

        if response.status == 404:
            logger.debug(f"Allocated id {candidate} after {attempt} probe(s)")
            return candidate

        if response.status == 200:
            logger.debug(f"Id {candidate} already in use under {base_uri}")
            continue

        raise ProtocolError(
            f"Unexpected HTTP {response.status} when generating new vCard id",
            status=response.status,
        )

    raise AllocationExhausted(
        f"No free vCard id under {base_uri} after {max_attempts} attempts",
        attempts=max_attempts,
    )


def generate_vcard_uri(
    client: WebDAVClient,
    base_uri: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    rng: random.Random | None = None,
) -> str:
    """Return ``base_uri`` joined with an unused id."""
    return base_uri + generate_vcard_id(client, base_uri, max_attempts, rng)
