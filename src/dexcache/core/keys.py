"""Cache key derivation.

Logical keys are human-readable strings such as ``complete_pokemon_pikachu``
or ``pokemon_list_1302_0``. They are passed through sanitize() before they
become filenames; every filename helper here goes through it so that reads
and writes of one logical key always land on the same file.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse


_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


def sanitize(key: str) -> str:
    """Map a logical key to a filesystem-safe name.

    Every character outside ``[A-Za-z0-9_-]`` becomes ``_``. Lossy: keys that
    differ only in punctuation collide.

    Example:
        >>> sanitize("https://pokeapi.co/api/v2/pokemon/25")
        'https___pokeapi_co_api_v2_pokemon_25'
    """
    return _UNSAFE.sub("_", key)


def data_filename(key: str) -> str:
    """Filename of a data-domain entry for a logical key."""
    return f"{sanitize(key)}.json"


def media_filename(stem: str, extension: str) -> str:
    """Filename of a sprite or audio entry."""
    return f"{sanitize(stem)}.{extension.lstrip('.')}"


def extract_resource_id(url: str | None) -> str | None:
    """Extract the id embedded in a cross-reference URL.

    The id is the second-to-last segment of the URL split on ``/``
    (``.../evolution-chain/67/`` -> ``"67"``).

    Returns:
        The id string, or None if the URL has no such segment.
    """
    if not url:
        return None
    segments = urlparse(url).path.split("/")
    if len(segments) < 2:
        return None
    resource_id = segments[-2]
    return resource_id or None


def list_key(collection: str, limit: int, offset: int = 0) -> str:
    return f"{collection}_list_{limit}_{offset}"


def detail_key(collection: str, id_or_name: str | int) -> str:
    return f"{collection}_{id_or_name}"


def species_key(id_or_name: str | int) -> str:
    return f"species_{id_or_name}"


def encounters_key(record_id: str | int) -> str:
    return f"encounters_{record_id}"


def evolution_key(chain_id: str | int) -> str:
    return f"evolution_{chain_id}"


def composite_prefix(collection: str) -> str:
    return f"complete_{collection}_"


def composite_key(collection: str, id_or_name: str | int) -> str:
    """Key of a merged detail+species+encounters+evolution record."""
    return f"{composite_prefix(collection)}{id_or_name}"


def aggregate_key(collection: str) -> str:
    """Key of the full-collection snapshot."""
    return f"all_{collection}_complete"
