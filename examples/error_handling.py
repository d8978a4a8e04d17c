"""Error handling and offline fallback patterns.

This example demonstrates what each operation does when the API is
unreachable, and how to use the recovery_hint property to provide
actionable guidance.
"""

from typing import Any

from dexcache import (
    Dex,
    # Exceptions
    DexcacheError,
    InvalidDomainError,
    NoCachedDataError,
    RemoteFetchError,
    load_config,
)


# Start offline: only what earlier runs cached is available
dex = Dex.from_config(load_config(online=False, probe_on_start=False))


# Pattern 1: Single resources return None when offline and not cached
def fetch_or_none(dex: Dex, url: str) -> Any | None:
    """Fetch a resource; None means 'offline and never cached'."""
    data = dex.fetch_resource(url)
    if data is None:
        print(f"Not cached and offline: {url}")
    return data


# Pattern 2: Online failures raise RemoteFetchError
def fetch_reporting_failures(dex: Dex, url: str) -> Any | None:
    """Fetch a resource, reporting transport errors."""
    try:
        return dex.fetch_resource(url)
    except RemoteFetchError as e:
        print(f"Request to {e.url} failed: {e.reason}")
        print(f"Hint: {e.recovery_hint}")
        return None


# Pattern 3: Bulk loads degrade to whatever is on disk
def load_what_you_can(dex: Dex) -> list[dict[str, Any]]:
    """Load all records; an empty list means nothing was ever cached."""
    try:
        return dex.get_all_records()
    except NoCachedDataError as e:
        print(f"Error: {e}")
        print(f"Hint: {e.recovery_hint}")
        return []


# Pattern 4: Catch-all for any library error
def clear_safe(dex: Dex, target: str) -> bool:
    """Clear a cache domain, reporting bad names."""
    try:
        return dex.clear_cache(target).success
    except InvalidDomainError as e:
        print(f"Error: {e}")
        print(f"Hint: {e.recovery_hint}")
        return False
    except DexcacheError as e:
        print(f"Error: {e}")
        return False


if __name__ == "__main__":
    fetch_or_none(dex, "https://pokeapi.co/api/v2/pokemon/25")
    records = load_what_you_can(dex)
    print(f"{len(records)} records available offline")

    # Back online: probe and retry
    if dex.check_connectivity()["online"]:
        fetch_reporting_failures(dex, "https://pokeapi.co/api/v2/pokemon/25")
    dex.close()
