"""Pytest configuration and shared fixtures.

This module registers custom markers for CI job separation and provides
shared fixtures for the test suite: a scripted fake gateway standing in for
the remote API, and disk-backed stores under tmp_path.
"""

from __future__ import annotations

import copy
import threading
from typing import TYPE_CHECKING, Any

import pytest

from dexcache.core.models import FetchResult


if TYPE_CHECKING:
    from pathlib import Path

    from dexcache.adapters.store import FileBlobStore
    from dexcache.core.data_cache import DataCache


BASE_URL = "https://pokeapi.test/api/v2"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "core: Core models, ports, and services")
    config.addinivalue_line("markers", "cache: Blob stores and the data cache facade")
    config.addinivalue_line("markers", "http: Remote fetch gateway")
    config.addinivalue_line("markers", "progress: Rich progress integration")
    config.addinivalue_line("markers", "cli: CLI tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests")
    config.addinivalue_line(
        "markers", "tra: Test Responsibility Anchor (TRA) - namespace.Anchor format"
    )
    config.addinivalue_line(
        "markers",
        "tier: Test tier for CI job separation (0=instant, 1=fast, 2=standard, 3=slow, 4=manual)",
    )


class FakeGateway:
    """Scripted GatewayPort.

    Maps URLs to JSON payloads or bytes. Unknown URLs answer 404, URLs in
    ``failing`` answer with their error, and ``online = False`` makes every
    request fail like a dropped connection. Every request URL is logged in
    ``calls``.
    """

    def __init__(self, base_url: str = BASE_URL) -> None:
        self.base_url = base_url
        self.json: dict[str, Any] = {}
        self.binary: dict[str, bytes] = {}
        self.failing: dict[str, str] = {}
        self.calls: list[str] = []
        self.probes: list[tuple[str, float]] = []
        self.online = True
        self._lock = threading.Lock()

    def _log(self, url: str) -> FetchResult | None:
        with self._lock:
            self.calls.append(url)
        if not self.online:
            return FetchResult.failure("Connection refused")
        if url in self.failing:
            return FetchResult.failure(self.failing[url], status_code=500)
        return None

    def fetch_json(self, url: str) -> FetchResult:
        failed = self._log(url)
        if failed is not None:
            return failed
        if url not in self.json:
            return FetchResult.failure("HTTP 404: Not Found", status_code=404)
        return FetchResult.ok(copy.deepcopy(self.json[url]))

    def fetch_binary(self, url: str) -> FetchResult:
        failed = self._log(url)
        if failed is not None:
            return failed
        if url not in self.binary:
            return FetchResult.failure("HTTP 404: Not Found", status_code=404)
        return FetchResult.ok(self.binary[url])

    def probe(self, url: str, timeout: float) -> bool:
        self.probes.append((url, timeout))
        return self.online

    def calls_to(self, fragment: str) -> list[str]:
        return [url for url in self.calls if fragment in url]

    def seed_creatures(
        self, names: list[str], *, limit: int | None = None, collection: str = "pokemon"
    ) -> list[dict[str, Any]]:
        """Script a list endpoint plus detail, species, encounters and evolution.

        Ids are assigned from 1 in list order; every three consecutive ids
        share an evolution chain.

        Returns:
            The scripted detail records.
        """
        base = self.base_url
        limit = len(names) if limit is None else limit
        self.json[f"{base}/{collection}?limit={limit}&offset=0"] = {
            "count": len(names),
            "results": [
                {"name": name, "url": f"{base}/{collection}/{i}/"}
                for i, name in enumerate(names, 1)
            ],
        }
        details = []
        for record_id, name in enumerate(names, 1):
            chain_id = (record_id + 2) // 3
            detail = {
                "id": record_id,
                "name": name,
                "height": 4,
                "weight": 60,
                "types": [{"slot": 1, "type": {"name": "electric", "url": f"{base}/type/13/"}}],
                "species": {"name": name, "url": f"{base}/{collection}-species/{record_id}/"},
                "sprites": {
                    "front_default": f"https://sprites.test/{record_id}.png",
                    "front_shiny": f"https://sprites.test/shiny/{record_id}.png",
                },
            }
            self.json[f"{base}/{collection}/{name}"] = detail
            self.json[f"{base}/{collection}/{record_id}"] = detail
            self.json[f"{base}/{collection}-species/{record_id}"] = {
                "id": record_id,
                "name": name,
                "evolution_chain": {"url": f"{base}/evolution-chain/{chain_id}/"},
                "genera": [{"genus": "Test Pokémon", "language": {"name": "en"}}],
                "flavor_text_entries": [
                    {"flavor_text": f"{name} lives\nin tests.", "language": {"name": "en"}},
                    {"flavor_text": f"{name} vit ici.", "language": {"name": "fr"}},
                ],
            }
            self.json[f"{base}/{collection}/{record_id}/encounters"] = [
                {"location_area": {"name": f"route-{record_id}", "url": ""}}
            ]
            self.json[f"{base}/evolution-chain/{chain_id}"] = {
                "id": chain_id,
                "chain": {"species": {"name": name}, "evolves_to": []},
            }
            details.append(detail)
        return details


@pytest.fixture
def fake_gateway() -> FakeGateway:
    """Scripted gateway with no resources; tests seed what they need."""
    return FakeGateway()


@pytest.fixture
def file_store(tmp_path: Path) -> FileBlobStore:
    """Disk-backed blob store rooted in a temporary directory."""
    from dexcache.adapters.store import FileBlobStore

    return FileBlobStore(tmp_path / "dexcache")


@pytest.fixture
def data_cache(file_store: FileBlobStore, fake_gateway: FakeGateway) -> DataCache:
    """Online data cache over the temporary store and the fake gateway."""
    from dexcache.core.data_cache import DataCache

    return DataCache(file_store, fake_gateway, base_url=BASE_URL)
