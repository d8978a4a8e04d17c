"""Shared fixtures for integration tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest


if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from dexcache.core.services import Dex


@pytest.fixture
def make_dex(tmp_path: Path, fake_gateway) -> Callable[..., Dex]:
    """Build Dex instances sharing one data root, like restarts of the app.

    Each instance gets a real thread pool; pass ``online=False`` to start
    offline. Instances are closed at teardown.
    """
    from dexcache.adapters.executor import ThreadPoolExecutorAdapter
    from dexcache.adapters.store import FileBlobStore
    from dexcache.core.data_cache import DataCache
    from dexcache.core.services import Dex

    built: list[Dex] = []

    def factory(*, online: bool = True, collection: str = "pokemon", batch_size: int = 5) -> Dex:
        store = FileBlobStore(tmp_path / "dexcache")
        cache = DataCache(
            store,
            fake_gateway,
            base_url=fake_gateway.base_url,
            collection=collection,
            online=online,
        )
        dex = Dex(
            store,
            fake_gateway,
            data_cache=cache,
            executor=ThreadPoolExecutorAdapter(max_workers=batch_size),
            batch_size=batch_size,
            batch_delay=0,
        )
        built.append(dex)
        return dex

    yield factory
    for dex in built:
        dex.close()
